"""Unit tests for OrderService.

Runs against the real Django ORM repository on the test database, the
same way the service runs in production.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from uuid import uuid4

import pytest

from modules.orders.constants import UNASSIGNED_DRIVER, OrderStatus
from modules.orders.dtos import CreateOrderDTO
from modules.orders.exceptions import (
    InvalidOrderField,
    InvalidOrderStatus,
    OrderNotFound,
    ProtectedOrderField,
)
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.signals import order_transitioned
from shared.infrastructure.realtime import NEW_ORDER_CREATED, ORDER_STATUS_CHANGED

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Intake
# ---------------------------------------------------------------------------


class TestCreateOrder:
    def test_new_order_is_pending_with_sequential_number(self, order_service):
        first = order_service.create_order(CreateOrderDTO(recipient="علي", cod=Decimal("10")))
        second = order_service.create_order(CreateOrderDTO(recipient="مريم", cod=Decimal("12")))

        assert first.status == OrderStatus.PENDING
        assert first.previous_status is None
        assert second.order_number == first.order_number + 1

    def test_item_price_defaults_to_cod_minus_fees(self, order_service):
        order = order_service.create_order(
            CreateOrderDTO(
                recipient="علي",
                cod=Decimal("20.00"),
                delivery_fee=Decimal("1.50"),
                additional_cost=Decimal("0.50"),
            )
        )
        order.refresh_from_db()
        assert order.item_price == Decimal("18.00")
        assert order.driver_fee == Decimal("1.00")

    def test_explicit_item_price_is_kept(self, order_service):
        order = order_service.create_order(
            CreateOrderDTO(recipient="علي", cod=Decimal("20"), item_price=Decimal("15"))
        )
        order.refresh_from_db()
        assert order.item_price == Decimal("15.00")

    def test_intake_writes_history_row(self, order_service):
        order = order_service.create_order(CreateOrderDTO(recipient="علي"))
        history = list(order.status_history.all())
        assert len(history) == 1
        assert history[0].old_status is None
        assert history[0].new_status == OrderStatus.PENDING

    def test_intake_announces_new_order_after_commit(
        self, order_service, realtime_messages, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            order = order_service.create_order(CreateOrderDTO(recipient="علي"))

        assert (NEW_ORDER_CREATED, {"orderId": str(order.id)}) in realtime_messages


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------


class TestUpdateOrderStatus:
    def test_dispatch_without_driver_is_rejected(self, order_service, make_order):
        order = make_order(status=OrderStatus.PENDING)

        with pytest.raises(InvalidOrderStatus) as exc_info:
            order_service.update_order_status(order.id, OrderStatus.OUT_FOR_DELIVERY, None)

        assert exc_info.value.code == "driver_required"
        assert exc_info.value.details["order_id"] == str(order.id)
        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert order.previous_status is None
        assert not OrderStatusHistory.objects.filter(order=order).exists()

    def test_dispatch_then_return_records_previous_status(self, order_service, make_order):
        order = make_order(status=OrderStatus.PENDING)

        order_service.update_order_status(order.id, OrderStatus.OUT_FOR_DELIVERY, "A")
        order.refresh_from_db()
        assert order.status == OrderStatus.OUT_FOR_DELIVERY
        assert order.driver == "A"
        assert order.previous_status == OrderStatus.PENDING

        order_service.update_order_status(order.id, OrderStatus.RETURNED)
        order.refresh_from_db()
        assert order.status == OrderStatus.RETURNED
        assert order.previous_status == OrderStatus.OUT_FOR_DELIVERY
        assert order.driver == "A"

    def test_reassigning_an_out_for_delivery_order(self, order_service, make_order):
        order = make_order(status=OrderStatus.OUT_FOR_DELIVERY, driver="A")

        with pytest.raises(InvalidOrderStatus) as no_op:
            order_service.update_order_status(order.id, OrderStatus.OUT_FOR_DELIVERY)
        assert no_op.value.code == "status_unchanged"

        with pytest.raises(InvalidOrderStatus) as missing:
            order_service.update_order_status(order.id, OrderStatus.AWAITING_DRIVER)
        assert missing.value.code == "driver_required"

        order_service.update_order_status(order.id, OrderStatus.AWAITING_DRIVER, "B")
        order.refresh_from_db()
        assert order.previous_status == OrderStatus.OUT_FOR_DELIVERY
        assert order.status == OrderStatus.AWAITING_DRIVER
        assert order.driver == "B"

    def test_each_transition_appends_history(self, order_service, make_order):
        order = make_order(status=OrderStatus.PENDING)
        order_service.update_order_status(order.id, OrderStatus.OUT_FOR_DELIVERY, "A")
        order_service.update_order_status(order.id, OrderStatus.DELIVERED, notes="handed over")

        rows = list(OrderStatusHistory.objects.filter(order=order).order_by("created_at"))
        assert [(r.old_status, r.new_status) for r in rows] == [
            (OrderStatus.PENDING, OrderStatus.OUT_FOR_DELIVERY),
            (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED),
        ]
        assert rows[0].driver == "A"
        assert rows[1].notes == "handed over"

    def test_supplied_driver_replaces_current(self, order_service, make_order):
        order = make_order(status=OrderStatus.POSTPONED, driver="A")
        order_service.update_order_status(order.id, OrderStatus.OUT_FOR_DELIVERY, "B")
        order.refresh_from_db()
        assert order.driver == "B"

    def test_stored_driver_does_not_satisfy_requirement(self, order_service, make_order):
        order = make_order(status=OrderStatus.POSTPONED, driver="A")
        with pytest.raises(InvalidOrderStatus) as exc_info:
            order_service.update_order_status(order.id, OrderStatus.OUT_FOR_DELIVERY)
        assert exc_info.value.code == "driver_required"

    def test_placeholder_driver_keeps_existing_one(self, order_service, make_order):
        order = make_order(status=OrderStatus.OUT_FOR_DELIVERY, driver="A")
        order_service.update_order_status(order.id, OrderStatus.NO_ANSWER, UNASSIGNED_DRIVER)
        order.refresh_from_db()
        assert order.driver == "A"

    def test_same_status_is_rejected(self, order_service, make_order):
        order = make_order(status=OrderStatus.DELIVERED)
        with pytest.raises(InvalidOrderStatus) as exc_info:
            order_service.update_order_status(order.id, OrderStatus.DELIVERED)
        assert exc_info.value.code == "status_unchanged"

    def test_role_restriction(self, order_service, make_order):
        order = make_order(status=OrderStatus.DELIVERED)
        with pytest.raises(InvalidOrderStatus) as exc_info:
            order_service.update_order_status(
                order.id, OrderStatus.COMPLETED, actor_role="driver"
            )
        assert exc_info.value.code == "role_not_permitted"

    def test_unknown_order_raises(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.update_order_status(uuid4(), OrderStatus.DELIVERED)

    def test_malformed_id_raises_not_found(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.update_order_status("not-a-uuid", OrderStatus.DELIVERED)

    def test_change_is_broadcast_after_commit(
        self, order_service, make_order, realtime_messages, django_capture_on_commit_callbacks
    ):
        order = make_order(status=OrderStatus.PENDING)
        with django_capture_on_commit_callbacks(execute=True):
            order_service.update_order_status(order.id, OrderStatus.OUT_FOR_DELIVERY, "A")

        assert (
            ORDER_STATUS_CHANGED,
            {"orderId": str(order.id), "status": "OUT_FOR_DELIVERY", "driverName": "A"},
        ) in realtime_messages

    def test_rejected_change_is_not_broadcast(
        self, order_service, make_order, realtime_messages, django_capture_on_commit_callbacks
    ):
        order = make_order(status=OrderStatus.PENDING)
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(InvalidOrderStatus):
                order_service.update_order_status(order.id, OrderStatus.OUT_FOR_DELIVERY)

        assert callbacks == []
        assert realtime_messages == []


class TestBulkUpdateStatus:
    def test_all_orders_move_together(self, order_service, make_order):
        orders = [make_order(status=OrderStatus.PENDING) for _ in range(3)]
        updated = order_service.bulk_update_status(
            [o.id for o in orders], OrderStatus.OUT_FOR_DELIVERY, "A"
        )

        assert len(updated) == 3
        for order in orders:
            order.refresh_from_db()
            assert order.status == OrderStatus.OUT_FOR_DELIVERY
            assert order.driver == "A"

    def test_one_rejection_leaves_every_order_untouched(self, order_service, make_order):
        pending = make_order(status=OrderStatus.PENDING)
        already = make_order(status=OrderStatus.OUT_FOR_DELIVERY, driver="A")

        with pytest.raises(InvalidOrderStatus) as exc_info:
            order_service.bulk_update_status(
                [pending.id, already.id], OrderStatus.OUT_FOR_DELIVERY, "A"
            )

        assert exc_info.value.details["order_id"] == str(already.id)
        assert f"#{already.order_number}" in exc_info.value.message
        pending.refresh_from_db()
        assert pending.status == OrderStatus.PENDING
        assert OrderStatusHistory.objects.count() == 0

    def test_unknown_id_aborts_batch(self, order_service, make_order):
        order = make_order(status=OrderStatus.PENDING)
        with pytest.raises(OrderNotFound):
            order_service.bulk_update_status([order.id, uuid4()], OrderStatus.POSTPONED)
        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING


class TestSystemTransition:
    def test_bypasses_driver_requirement_checks(self, order_service, make_order):
        order = make_order(status=OrderStatus.RETURNED, driver="A")
        order_service.apply_system_transition(
            order, OrderStatus.BRANCH_RETURNED, clear_driver=True, notes="slip"
        )
        order.refresh_from_db()
        assert order.status == OrderStatus.BRANCH_RETURNED
        assert order.previous_status == OrderStatus.RETURNED
        assert order.driver is None

    def test_rejects_unknown_and_unchanged(self, order_service, make_order):
        order = make_order(status=OrderStatus.RETURNED)
        with pytest.raises(InvalidOrderStatus):
            order_service.apply_system_transition(order, "NOWHERE")
        with pytest.raises(InvalidOrderStatus):
            order_service.apply_system_transition(order, OrderStatus.RETURNED)


class TestTransitionSignal:
    @pytest.fixture()
    def sent(self):
        received = []

        def _record(sender, order, old_status, new_status, **kwargs):
            received.append((order.id, old_status, new_status))

        order_transitioned.connect(_record, weak=False)
        yield received
        order_transitioned.disconnect(_record)

    def test_status_update_and_system_transition_are_announced(
        self, order_service, make_order, sent
    ):
        order = make_order(status=OrderStatus.PENDING)
        order_service.update_order_status(order.id, OrderStatus.OUT_FOR_DELIVERY, "A")
        order.refresh_from_db()
        order_service.apply_system_transition(order, OrderStatus.RETURNED)

        assert sent == [
            (order.id, OrderStatus.PENDING, OrderStatus.OUT_FOR_DELIVERY),
            (order.id, OrderStatus.OUT_FOR_DELIVERY, OrderStatus.RETURNED),
        ]

    def test_field_edit_is_not_a_transition(self, order_service, make_order, sent):
        order = make_order(status=OrderStatus.PENDING)
        order_service.update_order_field(order.id, "notes", "اتصل قبل الوصول")
        assert sent == []

    def test_failing_receiver_rolls_the_transition_back(self, order_service, make_order):
        order = make_order(status=OrderStatus.PENDING)

        def _fail(sender, **kwargs):
            raise RuntimeError("receiver failed")

        order_transitioned.connect(_fail, weak=False)
        try:
            with pytest.raises(RuntimeError):
                order_service.update_order_status(
                    order.id, OrderStatus.OUT_FOR_DELIVERY, "A"
                )
        finally:
            order_transitioned.disconnect(_fail)

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert not OrderStatusHistory.objects.filter(order=order).exists()


# ---------------------------------------------------------------------------
# Direct field edits
# ---------------------------------------------------------------------------


class TestUpdateOrderField:
    @pytest.mark.parametrize("field", ["status", "previous_status", "order_number", "id"])
    def test_protected_fields_are_refused(self, order_service, make_order, field):
        order = make_order()
        with pytest.raises(ProtectedOrderField):
            order_service.update_order_field(order.id, field, "DELIVERED")

    def test_unknown_field_is_refused(self, order_service, make_order):
        order = make_order()
        with pytest.raises(InvalidOrderField):
            order_service.update_order_field(order.id, "colour", "red")

    def test_money_value_is_quantized(self, order_service, make_order):
        order = make_order()
        order_service.update_order_field(order.id, "cod", "12.5")
        order.refresh_from_db()
        assert order.cod == Decimal("12.50")

    @pytest.mark.parametrize("value", ["abc", "-1", "NaN", "1e12"])
    def test_bad_cod_is_refused(self, order_service, make_order, value):
        order = make_order()
        with pytest.raises(InvalidOrderField):
            order_service.update_order_field(order.id, "cod", value)

    def test_edit_does_not_touch_status(self, order_service, make_order):
        order = make_order(status=OrderStatus.POSTPONED, previous_status=OrderStatus.OUT_FOR_DELIVERY)
        order_service.update_order_field(order.id, "address", "شارع المدينة")
        order.refresh_from_db()
        assert order.address == "شارع المدينة"
        assert order.status == OrderStatus.POSTPONED
        assert order.previous_status == OrderStatus.OUT_FOR_DELIVERY
        assert not OrderStatusHistory.objects.filter(order=order).exists()

    def test_driver_cannot_be_cleared_while_required(self, order_service, make_order):
        order = make_order(status=OrderStatus.OUT_FOR_DELIVERY, driver="A")
        with pytest.raises(InvalidOrderField):
            order_service.update_order_field(order.id, "driver", "")

    def test_driver_can_be_cleared_otherwise(self, order_service, make_order):
        order = make_order(status=OrderStatus.POSTPONED, driver="A")
        order_service.update_order_field(order.id, "driver", UNASSIGNED_DRIVER)
        order.refresh_from_db()
        assert order.driver is None

    def test_date_is_parsed(self, order_service, make_order):
        order = make_order()
        order_service.update_order_field(order.id, "date", "2024-03-01")
        order.refresh_from_db()
        assert order.date == dt.date(2024, 3, 1)

    @pytest.mark.parametrize("value", ["yesterday", "2024-13-45", None])
    def test_bad_date_is_refused(self, order_service, make_order, value):
        order = make_order()
        with pytest.raises(InvalidOrderField):
            order_service.update_order_field(order.id, "date", value)

    def test_recipient_cannot_be_blank(self, order_service, make_order):
        order = make_order()
        with pytest.raises(InvalidOrderField):
            order_service.update_order_field(order.id, "recipient", "  ")


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestQueries:
    def test_get_order_unknown_raises(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.get_order(uuid4())

    def test_list_orders_with_filters(self, order_service, make_order):
        make_order(driver="A", status=OrderStatus.OUT_FOR_DELIVERY)
        make_order(driver="B", status=OrderStatus.OUT_FOR_DELIVERY)
        assert [o.driver for o in order_service.list_orders({"driver": "A"})] == ["A"]

    def test_compute_totals_over_filtered_orders(self, order_service, make_order):
        make_order(driver="A", item_price=Decimal("10"), cod=Decimal("15"), driver_fee=Decimal("1"))
        make_order(driver="A", item_price=Decimal("20"), cod=Decimal("25"), driver_fee=Decimal("1"))
        make_order(driver="B", item_price=Decimal("99"), cod=Decimal("99"))

        totals = order_service.compute_totals({"driver": "A"})
        assert totals.order_count == 2
        assert totals.company_due == Decimal("8.00")

    def test_compute_totals_empty(self, order_service):
        totals = order_service.compute_totals({"driver": "nobody"})
        assert totals.order_count == 0
        assert totals.company_due == 0
