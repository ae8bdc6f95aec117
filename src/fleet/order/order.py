"""Order aggregate — a customer's order for one vehicle.

State Machine (7 states):
    PENDING → CONFIRMED → IN_PRODUCTION → BUILT → IN_TRANSIT → DELIVERED
    any non-terminal state → CANCELLED
    DELIVERED and CANCELLED are terminal.

There is no skipping and no way back. PENDING → CONFIRMED needs a VIN, so
in practice an order is confirmed by reserving a stock vehicle for it
(see fleet.stock.reservation).
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String

from fleet.domain import fleet
from fleet.exceptions import InvalidTransition
from fleet.records import hydrate, snapshot


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PRODUCTION = "in_production"
    BUILT = "built"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class VehicleLocation(Enum):
    MANUFACTURER = "manufacturer"
    IN_TRANSIT = "in_transit"
    DEALER = "dealer"
    DELIVERED = "delivered"


# Forward sequence; each state may only move to the next one (or cancel)
_LIFECYCLE = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.IN_PRODUCTION,
    OrderStatus.BUILT,
    OrderStatus.IN_TRANSIT,
    OrderStatus.DELIVERED,
]

_TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

_PROGRESS = {
    OrderStatus.PENDING: 10,
    OrderStatus.CONFIRMED: 25,
    OrderStatus.IN_PRODUCTION: 50,
    OrderStatus.BUILT: 75,
    OrderStatus.IN_TRANSIT: 90,
    OrderStatus.DELIVERED: 100,
    OrderStatus.CANCELLED: 0,
}

_STEP_LABELS = {
    OrderStatus.PENDING: "Order Placed",
    OrderStatus.CONFIRMED: "Order Confirmed",
    OrderStatus.IN_PRODUCTION: "In Production",
    OrderStatus.BUILT: "Vehicle Built",
    OrderStatus.IN_TRANSIT: "In Transit",
    OrderStatus.DELIVERED: "Delivered",
}

ORDER_FIELDS = (
    "order_number",
    "customer_name",
    "customer_email",
    "customer_id",
    "broker_id",
    "user_id",
    "vehicle_model",
    "vehicle_trim",
    "vehicle_color",
    "order_value",
    "status",
    "vin",
    "build_date",
    "delivery_date",
    "current_location",
    "order_date",
    "created_at",
    "updated_at",
)


def successor_of(status: OrderStatus) -> OrderStatus | None:
    """Return the next state in the forward sequence, or None at the end."""
    if status not in _LIFECYCLE:
        return None
    index = _LIFECYCLE.index(status)
    return _LIFECYCLE[index + 1] if index + 1 < len(_LIFECYCLE) else None


def parse_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidTransition({"status": [f"Unknown order status `{value}`"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class VehicleDescriptor:
    """The model/trim/color triple an order asks for and a stock vehicle offers."""

    model: str
    trim: str
    color: str

    def normalized(self) -> tuple[str, str, str]:
        return (self.model.lower(), self.trim.lower(), self.color.lower())

    def matches(self, other: "VehicleDescriptor") -> bool:
        """Exact, case-insensitive equality on all three fields."""
        return self.normalized() == other.normalized()


@dataclass(frozen=True)
class ProgressStep:
    status: str
    label: str
    completed: bool
    current: bool


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@fleet.aggregate
class Order:
    order_number = String(required=True, max_length=50)
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=255)
    customer_id = Identifier()
    broker_id = Identifier()
    user_id = Identifier(required=True)
    vehicle_model = String(required=True, max_length=100)
    vehicle_trim = String(required=True, max_length=100)
    vehicle_color = String(required=True, max_length=100)
    order_value = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    vin = String(max_length=17)
    build_date = DateTime()
    delivery_date = DateTime()
    current_location = String(choices=VehicleLocation, default=VehicleLocation.MANUFACTURER.value)
    order_date = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def vin_is_set_only_after_confirmation(self):
        if self.vin and self.status == OrderStatus.PENDING.value:
            raise ValidationError({"vin": ["A VIN can only be recorded on a confirmed order"]})

    # -------------------------------------------------------------------
    # Factory & record conversion
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        customer_name,
        customer_email,
        vehicle_model,
        vehicle_trim,
        vehicle_color,
        order_value,
        user_id,
        customer_id=None,
        broker_id=None,
        now=None,
    ):
        """Open a new pending order with a generated `ORD-<epoch millis>` number."""
        now = now or datetime.now(UTC)
        return cls(
            order_number=f"ORD-{int(now.timestamp() * 1000)}",
            customer_name=customer_name,
            customer_email=customer_email,
            customer_id=customer_id,
            broker_id=broker_id,
            user_id=user_id,
            vehicle_model=vehicle_model,
            vehicle_trim=vehicle_trim,
            vehicle_color=vehicle_color,
            order_value=order_value,
            status=OrderStatus.PENDING.value,
            order_date=now,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_record(cls, record: dict) -> "Order":
        return hydrate(cls, record, ORDER_FIELDS)

    def to_record(self) -> dict:
        return snapshot(self, ORDER_FIELDS)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def descriptor(self) -> VehicleDescriptor:
        return VehicleDescriptor(self.vehicle_model, self.vehicle_trim, self.vehicle_color)

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in _TERMINAL_STATES

    @property
    def progress(self) -> int:
        """Percentage of the journey to delivery, as shown to customers."""
        return _PROGRESS[OrderStatus(self.status)]

    def progress_steps(self) -> list[ProgressStep]:
        current = OrderStatus(self.status)
        current_index = _LIFECYCLE.index(current) if current in _LIFECYCLE else -1
        return [
            ProgressStep(
                status=step.value,
                label=_STEP_LABELS[step],
                completed=index <= current_index,
                current=index == current_index,
            )
            for index, step in enumerate(_LIFECYCLE)
        ]

    def associated_user_ids(self) -> list[str]:
        """Owner, customer and broker ids, de-duplicated, in that order."""
        user_ids = []
        for user_id in (self.user_id, self.customer_id, self.broker_id):
            if user_id and str(user_id) not in user_ids:
                user_ids.append(str(user_id))
        return user_ids

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def transition_to(self, target_status, now=None):
        """Move to `target_status` if it is the next state or a cancellation.

        Raises:
            InvalidTransition: the order is terminal, the target skips or
                reverses the sequence, or the target is CONFIRMED and no
                vehicle has been matched yet.
        """
        current = OrderStatus(self.status)
        target = parse_status(target_status)

        if current in _TERMINAL_STATES:
            raise InvalidTransition({"status": [f"Order is already {current.value} and cannot change"]})

        if target != OrderStatus.CANCELLED and target != successor_of(current):
            raise InvalidTransition({"status": [f"Cannot move order from {current.value} to {target.value}"]})

        if target == OrderStatus.CONFIRMED and not self.vin:
            raise InvalidTransition({"status": ["An order is confirmed by matching it to a stock vehicle"]})

        self.status = target.value
        self.updated_at = now or datetime.now(UTC)

    def confirm_with_vin(self, vin, now=None):
        """Confirm a pending order against the VIN of a reserved vehicle."""
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise InvalidTransition({"status": [f"Only pending orders can be matched, order is {self.status}"]})

        self.status = OrderStatus.CONFIRMED.value
        self.vin = vin
        self.updated_at = now or datetime.now(UTC)
