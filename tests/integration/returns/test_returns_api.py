"""Integration tests for the Returns API (driver and merchant slips)."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.returns.models import DriverSlip, MerchantSlip
from modules.returns.printing import SlipPrinter

pytestmark = pytest.mark.integration

DRIVER_SLIPS_URL = "/api/v1/returns/driver-slips/"
MERCHANT_SLIPS_URL = "/api/v1/returns/merchant-slips/"


@pytest.fixture()
def returned(make_order):
    return [
        make_order(status=OrderStatus.RETURNED, driver="A", item_price="10.00"),
        make_order(status=OrderStatus.ARRIVAL_NO_ANSWER, driver="A", item_price="4.00"),
    ]


def _create_driver_slip(client, driver, orders):
    return client.post(
        DRIVER_SLIPS_URL,
        {"driver_name": driver, "order_ids": [str(o.id) for o in orders]},
        format="json",
    )


@pytest.fixture()
def fake_pdf(monkeypatch):
    monkeypatch.setattr(SlipPrinter, "render_pdf", lambda self, slip: b"%PDF-1.7 test")


class TestDriverSlips:
    def test_create_driver_slip(self, auth_client, returned):
        response = _create_driver_slip(auth_client, "A", returned)

        assert response.status_code == 201
        data = response.json()
        assert data["item_count"] == 2
        assert data["driver_name"] == "A"
        assert data["total_item_price"] == "14.00"
        assert data["order_ids"] == [str(o.id) for o in returned]
        assert [e["return_reason"] for e in data["entries"]] == ["مرتجع", "وصول وعدم رد"]
        assert data["entries"][0]["released_at"] is None
        for order in returned:
            order.refresh_from_db()
            assert order.status == OrderStatus.BRANCH_RETURNED

    def test_conflict_names_the_claimed_order(self, auth_client, make_order, returned):
        _create_driver_slip(auth_client, "A", returned)
        fresh = make_order(status=OrderStatus.RETURNED, driver="A")

        response = _create_driver_slip(auth_client, "A", [returned[1], fresh])

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "order_already_claimed"
        assert body["order_id"] == str(returned[1].id)
        fresh.refresh_from_db()
        assert fresh.status == OrderStatus.RETURNED

    def test_foreign_order_conflicts(self, auth_client, make_order):
        foreign = make_order(status=OrderStatus.RETURNED, driver="B")
        response = _create_driver_slip(auth_client, "A", [foreign])
        assert response.status_code == 409
        assert response.json()["code"] == "order_not_owned"

    def test_unknown_order_is_not_found(self, auth_client):
        response = auth_client.post(
            DRIVER_SLIPS_URL, {"driver_name": "A", "order_ids": [str(uuid4())]}, format="json"
        )
        assert response.status_code == 404
        assert response.json()["code"] == "order_not_found"

    def test_empty_selection_is_a_bad_request(self, auth_client):
        response = auth_client.post(DRIVER_SLIPS_URL, {"driver_name": "A", "order_ids": []}, format="json")
        assert response.status_code == 400
        assert not DriverSlip.objects.exists()

    def test_blank_driver_is_a_bad_request(self, auth_client, returned):
        response = _create_driver_slip(auth_client, " ", returned)
        assert response.status_code == 400

    def test_list_and_filter(self, auth_client, make_order, returned):
        _create_driver_slip(auth_client, "A", returned)
        _create_driver_slip(auth_client, "B", [make_order(status=OrderStatus.RETURNED, driver="B")])

        assert auth_client.get(DRIVER_SLIPS_URL).json()["count"] == 2
        filtered = auth_client.get(DRIVER_SLIPS_URL, {"driver_name": "B"}).json()
        assert [s["driver_name"] for s in filtered["results"]] == ["B"]

    def test_retrieve(self, auth_client, returned):
        slip_id = _create_driver_slip(auth_client, "A", returned).json()["id"]
        response = auth_client.get(f"{DRIVER_SLIPS_URL}{slip_id}/")
        assert response.status_code == 200
        assert response.json()["id"] == slip_id
        assert auth_client.get(f"{DRIVER_SLIPS_URL}{uuid4()}/").status_code == 404

    def test_candidates(self, auth_client, make_order, returned):
        make_order(status=OrderStatus.OUT_FOR_DELIVERY, driver="A")
        response = auth_client.get(f"{DRIVER_SLIPS_URL}candidates/", {"driver_name": "A"})
        assert {o["id"] for o in response.json()} == {str(o.id) for o in returned}

        _create_driver_slip(auth_client, "A", returned)
        assert auth_client.get(f"{DRIVER_SLIPS_URL}candidates/", {"driver_name": "A"}).json() == []

    def test_candidates_need_driver(self, auth_client):
        assert auth_client.get(f"{DRIVER_SLIPS_URL}candidates/").status_code == 400

    def test_pdf(self, auth_client, returned, fake_pdf):
        slip = _create_driver_slip(auth_client, "A", returned).json()
        response = auth_client.get(f"{DRIVER_SLIPS_URL}{slip['id']}/pdf/")
        assert response.status_code == 200
        assert response["Content-Type"] == "application/pdf"
        assert slip["reference"] in response["Content-Disposition"]
        assert response.content == b"%PDF-1.7 test"

    def test_pdf_renderer_failure_is_bad_gateway(self, auth_client, returned, settings):
        settings.SLIP_RENDERER_URL = ""
        slip = _create_driver_slip(auth_client, "A", returned).json()
        response = auth_client.get(f"{DRIVER_SLIPS_URL}{slip['id']}/pdf/")
        assert response.status_code == 502
        assert response.json()["code"] == "slip_rendering_failed"


class TestMerchantSlips:
    @pytest.fixture()
    def at_branch(self, auth_client, returned):
        _create_driver_slip(auth_client, "A", returned)
        return returned

    def _create(self, client, merchant, orders):
        return client.post(
            MERCHANT_SLIPS_URL,
            {"merchant_name": merchant, "order_ids": [str(o.id) for o in orders]},
            format="json",
        )

    def test_create_merchant_slip(self, auth_client, at_branch):
        response = self._create(auth_client, "متجر الأمل", at_branch)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "ready_for_pickup"
        assert data["delivered_at"] is None
        assert [e["previous_status"] for e in data["entries"]] == ["RETURNED", "ARRIVAL_NO_ANSWER"]
        for order in at_branch:
            order.refresh_from_db()
            assert order.status == OrderStatus.MERCHANT_RETURNED

    def test_order_not_at_branch_conflicts(self, auth_client, returned):
        response = self._create(auth_client, "متجر الأمل", returned)
        assert response.status_code == 409
        assert response.json()["code"] == "order_not_returnable"
        assert not MerchantSlip.objects.exists()

    def test_candidates(self, auth_client, at_branch):
        response = auth_client.get(f"{MERCHANT_SLIPS_URL}candidates/", {"merchant_name": "متجر الأمل"})
        assert len(response.json()) == 2
        assert auth_client.get(f"{MERCHANT_SLIPS_URL}candidates/").status_code == 400

    def test_deliver_is_idempotent(self, auth_client, at_branch):
        slip_id = self._create(auth_client, "متجر الأمل", at_branch).json()["id"]

        first = auth_client.post(f"{MERCHANT_SLIPS_URL}{slip_id}/deliver/")
        second = auth_client.post(f"{MERCHANT_SLIPS_URL}{slip_id}/deliver/")

        assert first.status_code == second.status_code == 200
        assert first.json()["status"] == "delivered_to_merchant"
        assert first.json()["delivered_at"] == second.json()["delivered_at"]

    def test_deliver_unknown_slip(self, auth_client):
        assert auth_client.post(f"{MERCHANT_SLIPS_URL}{uuid4()}/deliver/").status_code == 404

    def test_filter_by_status(self, auth_client, at_branch):
        slip_id = self._create(auth_client, "متجر الأمل", at_branch).json()["id"]
        auth_client.post(f"{MERCHANT_SLIPS_URL}{slip_id}/deliver/")

        pending = auth_client.get(MERCHANT_SLIPS_URL, {"status": "ready_for_pickup"}).json()
        delivered = auth_client.get(MERCHANT_SLIPS_URL, {"status": "delivered_to_merchant"}).json()
        assert pending["count"] == 0
        assert delivered["count"] == 1

    def test_pdf(self, auth_client, at_branch, fake_pdf):
        slip_id = self._create(auth_client, "متجر الأمل", at_branch).json()["id"]
        response = auth_client.get(f"{MERCHANT_SLIPS_URL}{slip_id}/pdf/")
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")
