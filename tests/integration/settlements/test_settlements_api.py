"""Integration tests for the Settlements API (driver and merchant payment slips)."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.integration

DRIVER_PAYMENTS_URL = "/api/v1/settlements/driver-payments/"
MERCHANT_PAYMENTS_URL = "/api/v1/settlements/merchant-payments/"


@pytest.fixture()
def delivered(make_order):
    return [
        make_order(status=OrderStatus.DELIVERED, driver="A", cod="30.00", item_price="24.00", driver_fee="2.00"),
        make_order(status=OrderStatus.DELIVERED, driver="A", cod="10.00", item_price="7.00", driver_fee="1.50"),
    ]


def _post(client, url, party_field, party, orders):
    return client.post(
        url,
        {party_field: party, "order_ids": [str(o.id) for o in orders]},
        format="json",
    )


class TestDriverPayments:
    def test_create_reports_totals_and_amount_due(self, auth_client, delivered):
        response = _post(auth_client, DRIVER_PAYMENTS_URL, "driver_name", "A", delivered)

        assert response.status_code == 201
        data = response.json()
        assert data["item_count"] == 2
        assert data["totals"]["cod"] == "40.00"
        assert data["totals"]["driver_fee"] == "3.50"
        assert data["totals"]["company_due"] == "5.50"
        assert data["amount_due"] == "36.50"
        assert [e["order_status"] for e in data["entries"]] == ["DELIVERED", "DELIVERED"]
        for order in delivered:
            order.refresh_from_db()
            assert order.status == OrderStatus.MONEY_RECEIVED

    def test_second_slip_for_same_cash_conflicts(self, auth_client, delivered):
        _post(auth_client, DRIVER_PAYMENTS_URL, "driver_name", "A", delivered)

        response = _post(auth_client, DRIVER_PAYMENTS_URL, "driver_name", "A", delivered[:1])

        assert response.status_code == 409
        assert response.json()["code"] == "order_already_claimed"
        assert response.json()["order_id"] == str(delivered[0].id)

    def test_undelivered_order_conflicts(self, auth_client, make_order):
        out = make_order(status=OrderStatus.OUT_FOR_DELIVERY, driver="A")
        response = _post(auth_client, DRIVER_PAYMENTS_URL, "driver_name", "A", [out])
        assert response.status_code == 409
        assert response.json()["code"] == "order_not_settleable"

    def test_unknown_order_is_not_found(self, auth_client):
        response = auth_client.post(
            DRIVER_PAYMENTS_URL, {"driver_name": "A", "order_ids": [str(uuid4())]}, format="json"
        )
        assert response.status_code == 404

    def test_list_retrieve_and_candidates(self, auth_client, delivered):
        candidates = auth_client.get(f"{DRIVER_PAYMENTS_URL}candidates/", {"driver_name": "A"})
        assert {o["id"] for o in candidates.json()} == {str(o.id) for o in delivered}

        slip_id = _post(auth_client, DRIVER_PAYMENTS_URL, "driver_name", "A", delivered).json()["id"]

        assert auth_client.get(DRIVER_PAYMENTS_URL).json()["count"] == 1
        assert auth_client.get(f"{DRIVER_PAYMENTS_URL}{slip_id}/").json()["id"] == slip_id
        assert auth_client.get(f"{DRIVER_PAYMENTS_URL}{uuid4()}/").status_code == 404
        assert auth_client.get(f"{DRIVER_PAYMENTS_URL}candidates/", {"driver_name": "A"}).json() == []

    def test_candidates_need_driver(self, auth_client):
        assert auth_client.get(f"{DRIVER_PAYMENTS_URL}candidates/").status_code == 400

    def test_requires_authentication(self, api_client):
        assert api_client.get(DRIVER_PAYMENTS_URL).status_code == 401


class TestMerchantPayments:
    @pytest.fixture()
    def cash_in(self, auth_client, delivered):
        _post(auth_client, DRIVER_PAYMENTS_URL, "driver_name", "A", delivered)
        return delivered

    def test_create_then_pay(self, auth_client, cash_in):
        created = _post(auth_client, MERCHANT_PAYMENTS_URL, "merchant_name", "متجر الأمل", cash_in)
        assert created.status_code == 201
        slip = created.json()
        assert slip["status"] == "ready_for_payment"
        assert slip["amount_due"] == "31.00"

        response = auth_client.post(f"{MERCHANT_PAYMENTS_URL}{slip['id']}/pay/")

        assert response.status_code == 200
        assert response.json()["status"] == "paid"
        assert response.json()["paid_at"] is not None
        for order in cash_in:
            order.refresh_from_db()
            assert order.status == OrderStatus.MERCHANT_SETTLED

    def test_pay_is_idempotent(self, auth_client, cash_in):
        slip_id = _post(auth_client, MERCHANT_PAYMENTS_URL, "merchant_name", "متجر الأمل", cash_in).json()["id"]
        first = auth_client.post(f"{MERCHANT_PAYMENTS_URL}{slip_id}/pay/").json()
        second = auth_client.post(f"{MERCHANT_PAYMENTS_URL}{slip_id}/pay/").json()
        assert second["paid_at"] == first["paid_at"]

    def test_pay_unknown_slip(self, auth_client):
        assert auth_client.post(f"{MERCHANT_PAYMENTS_URL}{uuid4()}/pay/").status_code == 404

    def test_listed_order_conflicts(self, auth_client, cash_in):
        _post(auth_client, MERCHANT_PAYMENTS_URL, "merchant_name", "متجر الأمل", cash_in[:1])
        response = _post(auth_client, MERCHANT_PAYMENTS_URL, "merchant_name", "متجر الأمل", cash_in)
        assert response.status_code == 409
        assert response.json()["code"] == "order_already_claimed"

    def test_filter_by_status(self, auth_client, cash_in):
        first = _post(auth_client, MERCHANT_PAYMENTS_URL, "merchant_name", "متجر الأمل", cash_in[:1]).json()
        _post(auth_client, MERCHANT_PAYMENTS_URL, "merchant_name", "متجر الأمل", cash_in[1:])
        auth_client.post(f"{MERCHANT_PAYMENTS_URL}{first['id']}/pay/")

        paid = auth_client.get(MERCHANT_PAYMENTS_URL, {"status": "paid"}).json()
        assert [s["id"] for s in paid["results"]] == [first["id"]]
