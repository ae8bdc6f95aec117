"""Notification aggregate — a message raised for one user.

Notifications are created as side effects of order transitions, stock
matches and delivery requests. The only change they ever see is being
marked read; `is_read` never flips back.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String, Text

from fleet.domain import fleet
from fleet.records import hydrate, snapshot


class NotificationType(Enum):
    ORDER_UPDATE = "order_update"
    DELIVERY_REQUEST = "delivery_request"
    STOCK_MATCH = "stock_match"
    SYSTEM = "system"
    COMMUNICATION = "communication"


class NotificationPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


NOTIFICATION_FIELDS = (
    "user_id",
    "order_id",
    "title",
    "message",
    "notification_type",
    "priority",
    "is_read",
    "created_at",
    "updated_at",
)


@fleet.aggregate
class Notification:
    user_id = Identifier(required=True)
    order_id = Identifier()
    title = String(required=True, max_length=255)
    message = Text(required=True)
    notification_type = String(choices=NotificationType, required=True)
    priority = String(choices=NotificationPriority, default=NotificationPriority.MEDIUM.value)
    is_read = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id, notification_type, title, message, order_id=None, priority="medium", now=None):
        now = now or datetime.now(UTC)
        return cls(
            user_id=user_id,
            order_id=order_id,
            title=title,
            message=message,
            notification_type=notification_type,
            priority=priority,
            is_read=False,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_record(cls, record: dict) -> "Notification":
        return hydrate(cls, record, NOTIFICATION_FIELDS)

    def to_record(self) -> dict:
        return snapshot(self, NOTIFICATION_FIELDS)

    def mark_read(self, now=None) -> bool:
        """Mark as read. Returns False when it already was."""
        if self.is_read:
            return False
        self.is_read = True
        self.updated_at = now or datetime.now(UTC)
        return True
