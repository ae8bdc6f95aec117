"""Tests for the Order aggregate state machine."""

from datetime import UTC, datetime

import pytest
from builders import make_order_record
from protean.exceptions import ValidationError

from fleet.exceptions import InvalidTransition
from fleet.order.order import Order, OrderStatus, successor_of


def _order(**overrides):
    return Order.from_record({"id": "ord-001", **make_order_record(**overrides)})


class TestOrderCreation:
    def test_create_is_pending(self):
        order = Order.create(
            customer_name="Ada Fleet",
            customer_email="ada@customer.test",
            vehicle_model="X5",
            vehicle_trim="M Sport",
            vehicle_color="Black",
            order_value=65000,
            user_id="user-sales",
        )
        assert order.status == OrderStatus.PENDING.value
        assert order.vin is None

    def test_order_number_is_epoch_millis(self):
        now = datetime(2024, 10, 19, 12, 0, tzinfo=UTC)
        order = Order.create(
            customer_name="Ada Fleet",
            customer_email="ada@customer.test",
            vehicle_model="X5",
            vehicle_trim="M Sport",
            vehicle_color="Black",
            order_value=65000,
            user_id="user-sales",
            now=now,
        )
        assert order.order_number == f"ORD-{int(now.timestamp() * 1000)}"
        assert order.order_date == now
        assert order.created_at == now

    def test_negative_order_value_is_rejected(self):
        with pytest.raises(ValidationError):
            Order.create(
                customer_name="Ada Fleet",
                customer_email="ada@customer.test",
                vehicle_model="X5",
                vehicle_trim="M Sport",
                vehicle_color="Black",
                order_value=-1,
                user_id="user-sales",
            )


class TestSuccessor:
    def test_forward_sequence(self):
        assert successor_of(OrderStatus.PENDING) == OrderStatus.CONFIRMED
        assert successor_of(OrderStatus.CONFIRMED) == OrderStatus.IN_PRODUCTION
        assert successor_of(OrderStatus.IN_PRODUCTION) == OrderStatus.BUILT
        assert successor_of(OrderStatus.BUILT) == OrderStatus.IN_TRANSIT
        assert successor_of(OrderStatus.IN_TRANSIT) == OrderStatus.DELIVERED

    def test_end_states_have_no_successor(self):
        assert successor_of(OrderStatus.DELIVERED) is None
        assert successor_of(OrderStatus.CANCELLED) is None


class TestValidTransitions:
    @pytest.mark.parametrize(
        "current, target",
        [
            ("confirmed", "in_production"),
            ("in_production", "built"),
            ("built", "in_transit"),
            ("in_transit", "delivered"),
        ],
    )
    def test_step_forward(self, current, target):
        order = _order(status=current, vin="WBA11111111111111")
        order.transition_to(target)
        assert order.status == target

    def test_confirm_with_vin_on_record(self):
        order = _order()
        order.confirm_with_vin("WBA11111111111111")
        assert order.status == "confirmed"
        assert order.vin == "WBA11111111111111"

    @pytest.mark.parametrize("current", ["pending", "confirmed", "in_production", "built", "in_transit"])
    def test_cancel_from_any_open_state(self, current):
        vin = None if current == "pending" else "WBA11111111111111"
        order = _order(status=current, vin=vin)
        order.transition_to("cancelled")
        assert order.status == "cancelled"

    def test_transition_stamps_updated_at(self):
        later = datetime(2024, 10, 20, 9, 30, tzinfo=UTC)
        order = _order(status="confirmed", vin="WBA11111111111111")
        order.transition_to("in_production", now=later)
        assert order.updated_at == later


class TestInvalidTransitions:
    def test_pending_cannot_confirm_without_vin(self):
        order = _order()
        with pytest.raises(InvalidTransition) as exc_info:
            order.transition_to("confirmed")
        assert "status" in exc_info.value.messages
        assert order.status == "pending"

    def test_cannot_skip_a_step(self):
        order = _order()
        with pytest.raises(InvalidTransition):
            order.transition_to("in_production")

    def test_cannot_move_backwards(self):
        order = _order(status="built", vin="WBA11111111111111")
        with pytest.raises(InvalidTransition):
            order.transition_to("in_production")

    def test_cannot_stay_in_place(self):
        order = _order(status="built", vin="WBA11111111111111")
        with pytest.raises(InvalidTransition):
            order.transition_to("built")

    @pytest.mark.parametrize("terminal", ["delivered", "cancelled"])
    @pytest.mark.parametrize("target", ["pending", "confirmed", "in_transit", "cancelled", "delivered"])
    def test_terminal_states_never_change(self, terminal, target):
        order = _order(status=terminal, vin="WBA11111111111111")
        with pytest.raises(InvalidTransition):
            order.transition_to(target)
        assert order.status == terminal

    def test_unknown_status_is_rejected(self):
        order = _order()
        with pytest.raises(InvalidTransition) as exc_info:
            order.transition_to("shipped")
        assert "Unknown order status" in exc_info.value.messages["status"][0]

    def test_invalid_transition_is_a_validation_error(self):
        order = _order(status="delivered", vin="WBA11111111111111")
        with pytest.raises(ValidationError):
            order.transition_to("cancelled")

    def test_confirm_with_vin_requires_pending(self):
        order = _order(status="cancelled")
        with pytest.raises(InvalidTransition):
            order.confirm_with_vin("WBA11111111111111")
        assert order.vin is None


class TestProgress:
    @pytest.mark.parametrize(
        "status, expected",
        [
            ("pending", 10),
            ("confirmed", 25),
            ("in_production", 50),
            ("built", 75),
            ("in_transit", 90),
            ("delivered", 100),
            ("cancelled", 0),
        ],
    )
    def test_progress_percentage(self, status, expected):
        vin = None if status == "pending" else "WBA11111111111111"
        assert _order(status=status, vin=vin).progress == expected

    def test_progress_steps_mark_completed_and_current(self):
        steps = _order(status="built", vin="WBA11111111111111").progress_steps()

        assert [s.status for s in steps] == [
            "pending",
            "confirmed",
            "in_production",
            "built",
            "in_transit",
            "delivered",
        ]
        assert [s.completed for s in steps] == [True, True, True, True, False, False]
        assert [s.current for s in steps] == [False, False, False, True, False, False]
        assert steps[3].label == "Vehicle Built"

    def test_cancelled_order_has_no_completed_steps(self):
        steps = _order(status="cancelled").progress_steps()
        assert not any(s.completed or s.current for s in steps)


class TestAssociatedUsers:
    def test_owner_customer_and_broker(self):
        order = _order(user_id="u-1", customer_id="u-2", broker_id="u-3")
        assert order.associated_user_ids() == ["u-1", "u-2", "u-3"]

    def test_duplicates_and_blanks_are_dropped(self):
        order = _order(user_id="u-1", customer_id="u-1", broker_id=None)
        assert order.associated_user_ids() == ["u-1"]


class TestRecordConversion:
    def test_record_round_trip_keeps_fields(self):
        record = {"id": "ord-001", **make_order_record(status="built", vin="WBA11111111111111")}
        converted = Order.from_record(record).to_record()

        assert converted["id"] == "ord-001"
        assert converted["status"] == "built"
        assert converted["vin"] == "WBA11111111111111"
        assert converted["order_value"] == 65000.0
