"""Communication aggregate — one entry in an order's message log.

The log is append-only: entries are created and listed, never edited or
removed.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from fleet.domain import fleet
from fleet.records import hydrate, snapshot


class MessageType(Enum):
    NOTE = "note"
    MESSAGE = "message"
    STATUS_UPDATE = "status_update"
    DELIVERY_REQUEST = "delivery_request"
    CUSTOMER_INQUIRY = "customer_inquiry"


COMMUNICATION_FIELDS = (
    "order_id",
    "user_id",
    "sender",
    "message",
    "message_type",
    "created_at",
)


@fleet.aggregate
class Communication:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    sender = String(required=True, max_length=255)
    message = Text(required=True)
    message_type = String(choices=MessageType, default=MessageType.MESSAGE.value)
    created_at = DateTime()

    @classmethod
    def create(cls, order_id, user_id, sender, message, message_type=MessageType.MESSAGE.value, now=None):
        if not message or not message.strip():
            raise ValidationError({"message": ["Message cannot be blank"]})
        return cls(
            order_id=order_id,
            user_id=user_id,
            sender=sender,
            message=message,
            message_type=message_type,
            created_at=now or datetime.now(UTC),
        )

    @classmethod
    def from_record(cls, record: dict) -> "Communication":
        return hydrate(cls, record, COMMUNICATION_FIELDS)

    def to_record(self) -> dict:
        return snapshot(self, COMMUNICATION_FIELDS)
