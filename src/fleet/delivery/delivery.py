"""DeliveryRequest aggregate — a request to move a built vehicle to the customer.

State Machine:
    PENDING → APPROVED → IN_PROGRESS → COMPLETED
    PENDING | APPROVED → REJECTED
    REJECTED and COMPLETED are terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Date, DateTime, Identifier, String, Text

from fleet.domain import fleet
from fleet.exceptions import InvalidTransition
from fleet.records import hydrate, snapshot


class DeliveryStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


_VALID_TRANSITIONS = {
    DeliveryStatus.PENDING: {DeliveryStatus.APPROVED, DeliveryStatus.REJECTED},
    DeliveryStatus.APPROVED: {DeliveryStatus.IN_PROGRESS, DeliveryStatus.REJECTED},
    DeliveryStatus.IN_PROGRESS: {DeliveryStatus.COMPLETED},
    DeliveryStatus.REJECTED: set(),  # Terminal
    DeliveryStatus.COMPLETED: set(),  # Terminal
}

ACTIVE_STATES = {DeliveryStatus.PENDING, DeliveryStatus.APPROVED, DeliveryStatus.IN_PROGRESS}

DELIVERY_FIELDS = (
    "order_id",
    "user_id",
    "pickup_address",
    "delivery_address",
    "contact_name",
    "contact_phone",
    "preferred_date",
    "special_instructions",
    "status",
    "created_at",
    "updated_at",
)


@fleet.aggregate
class DeliveryRequest:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    pickup_address = Text()
    delivery_address = Text(required=True)
    contact_name = String(required=True, max_length=255)
    contact_phone = String(required=True, max_length=50)
    preferred_date = Date()
    special_instructions = Text()
    status = String(choices=DeliveryStatus, default=DeliveryStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        order_id,
        user_id,
        delivery_address,
        contact_name,
        contact_phone,
        preferred_date=None,
        pickup_address=None,
        special_instructions=None,
        now=None,
    ):
        now = now or datetime.now(UTC)
        return cls(
            order_id=order_id,
            user_id=user_id,
            pickup_address=pickup_address,
            delivery_address=delivery_address,
            contact_name=contact_name,
            contact_phone=contact_phone,
            preferred_date=preferred_date,
            special_instructions=special_instructions,
            status=DeliveryStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_record(cls, record: dict) -> "DeliveryRequest":
        return hydrate(cls, record, DELIVERY_FIELDS)

    def to_record(self) -> dict:
        return snapshot(self, DELIVERY_FIELDS)

    @property
    def is_active(self) -> bool:
        return DeliveryStatus(self.status) in ACTIVE_STATES

    def advance_to(self, target_status, now=None):
        current = DeliveryStatus(self.status)
        try:
            target = DeliveryStatus(target_status)
        except ValueError:
            raise InvalidTransition({"status": [f"Unknown delivery status `{target_status}`"]}) from None

        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition({"status": [f"Cannot move delivery request from {current.value} to {target.value}"]})

        self.status = target.value
        self.updated_at = now or datetime.now(UTC)
