"""Tests for the Notification and Communication aggregates."""

from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError

from fleet.communication.communication import Communication
from fleet.notification.notification import Notification


class TestNotification:
    def test_created_unread(self):
        notification = Notification.create(
            user_id="user-sales",
            notification_type="order_update",
            title="Order Status Updated",
            message="Order ORD-1 is now built",
            order_id="ord-001",
        )
        assert notification.is_read is False
        assert notification.priority == "medium"

    def test_mark_read_once(self):
        notification = Notification.create(
            user_id="user-sales",
            notification_type="system",
            title="Hello",
            message="Welcome aboard",
        )
        later = datetime(2024, 10, 19, 15, 0, tzinfo=UTC)

        assert notification.mark_read(later) is True
        assert notification.is_read is True
        assert notification.updated_at == later
        assert notification.mark_read() is False

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            Notification.create(
                user_id="user-sales",
                notification_type="carrier_pigeon",
                title="Hello",
                message="Coo",
            )


class TestCommunication:
    def test_create_defaults_to_message(self):
        communication = Communication.create(
            order_id="ord-001",
            user_id="user-sales",
            sender="sales@fleet.test",
            message="Customer asked about the tow bar",
        )
        assert communication.message_type == "message"
        assert communication.created_at is not None

    @pytest.mark.parametrize("message", ["", "   "])
    def test_blank_message_is_rejected(self, message):
        with pytest.raises(ValidationError) as exc_info:
            Communication.create(
                order_id="ord-001",
                user_id="user-sales",
                sender="sales@fleet.test",
                message=message,
            )
        assert "message" in exc_info.value.messages

    def test_unknown_message_type_is_rejected(self):
        with pytest.raises(ValidationError):
            Communication.create(
                order_id="ord-001",
                user_id="user-sales",
                sender="sales@fleet.test",
                message="Hi",
                message_type="telegram",
            )
