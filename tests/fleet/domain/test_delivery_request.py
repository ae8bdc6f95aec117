"""Tests for the DeliveryRequest aggregate."""

from datetime import date

import pytest

from fleet.delivery.delivery import DeliveryRequest, DeliveryStatus
from fleet.exceptions import InvalidTransition


def _request(**overrides):
    defaults = {
        "order_id": "ord-001",
        "user_id": "user-broker",
        "delivery_address": "1 Depot Road, Leeds",
        "contact_name": "Sam Driver",
        "contact_phone": "+44 113 000 0000",
        "preferred_date": date(2024, 11, 2),
    }
    defaults.update(overrides)
    return DeliveryRequest.create(**defaults)


class TestDeliveryRequestCreation:
    def test_create_is_pending_and_active(self):
        request = _request()
        assert request.status == DeliveryStatus.PENDING.value
        assert request.is_active

    def test_optional_fields(self):
        request = _request(pickup_address="Dealer lot 4", special_instructions="Call ahead")
        assert request.pickup_address == "Dealer lot 4"
        assert request.special_instructions == "Call ahead"
        assert request.preferred_date == date(2024, 11, 2)


class TestDeliveryTransitions:
    def test_happy_path(self):
        request = _request()
        for target in ("approved", "in_progress", "completed"):
            request.advance_to(target)
        assert request.status == "completed"
        assert not request.is_active

    @pytest.mark.parametrize("current", ["pending", "approved"])
    def test_reject_before_work_starts(self, current):
        request = _request()
        if current == "approved":
            request.advance_to("approved")
        request.advance_to("rejected")
        assert request.status == "rejected"
        assert not request.is_active

    def test_cannot_reject_once_in_progress(self):
        request = _request()
        request.advance_to("approved")
        request.advance_to("in_progress")
        with pytest.raises(InvalidTransition):
            request.advance_to("rejected")

    def test_cannot_skip_approval(self):
        with pytest.raises(InvalidTransition):
            _request().advance_to("in_progress")

    def test_rejected_is_terminal(self):
        request = _request()
        request.advance_to("rejected")
        with pytest.raises(InvalidTransition):
            request.advance_to("approved")

    def test_unknown_status(self):
        with pytest.raises(InvalidTransition):
            _request().advance_to("lost")
