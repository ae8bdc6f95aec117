"""StockVehicle aggregate — one physical vehicle held in stock.

State Machine:
    AVAILABLE → RESERVED   (only by matching it to a pending order)
    AVAILABLE → SOLD | DAMAGED
    RESERVED  → SOLD
    DAMAGED   → AVAILABLE
    SOLD is terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, Integer, String

from fleet.domain import fleet
from fleet.exceptions import InvalidTransition
from fleet.order.order import VehicleDescriptor
from fleet.records import hydrate, snapshot


class StockStatus(Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"
    DAMAGED = "damaged"


# Transitions an operator may make by hand; RESERVED is reached through matching only
_MANUAL_TRANSITIONS = {
    StockStatus.AVAILABLE: {StockStatus.SOLD, StockStatus.DAMAGED},
    StockStatus.RESERVED: {StockStatus.SOLD},
    StockStatus.DAMAGED: {StockStatus.AVAILABLE},
    StockStatus.SOLD: set(),  # Terminal
}

STOCK_FIELDS = (
    "vin",
    "model",
    "trim",
    "color",
    "year",
    "price",
    "location",
    "status",
    "user_id",
    "created_at",
    "updated_at",
)


@fleet.aggregate
class StockVehicle:
    vin = String(required=True, max_length=17)
    model = String(required=True, max_length=100)
    trim = String(required=True, max_length=100)
    color = String(required=True, max_length=100)
    year = Integer(min_value=1900)
    price = Float(min_value=0.0, default=0.0)
    location = String(max_length=255)
    status = String(choices=StockStatus, default=StockStatus.AVAILABLE.value)
    user_id = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, vin, model, trim, color, year, price, location, user_id=None, now=None):
        now = now or datetime.now(UTC)
        return cls(
            vin=vin,
            model=model,
            trim=trim,
            color=color,
            year=year,
            price=price,
            location=location,
            status=StockStatus.AVAILABLE.value,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_record(cls, record: dict) -> "StockVehicle":
        return hydrate(cls, record, STOCK_FIELDS)

    def to_record(self) -> dict:
        return snapshot(self, STOCK_FIELDS)

    @property
    def descriptor(self) -> VehicleDescriptor:
        return VehicleDescriptor(self.model, self.trim, self.color)

    @property
    def is_available(self) -> bool:
        return self.status == StockStatus.AVAILABLE.value

    def reserve(self, now=None):
        if not self.is_available:
            raise InvalidTransition({"status": [f"Vehicle {self.vin} is {self.status}, not available"]})
        self.status = StockStatus.RESERVED.value
        self.updated_at = now or datetime.now(UTC)

    def change_status(self, target_status, now=None):
        """Apply an operator's manual status change."""
        current = StockStatus(self.status)
        try:
            target = StockStatus(target_status)
        except ValueError:
            raise InvalidTransition({"status": [f"Unknown stock status `{target_status}`"]}) from None

        if target not in _MANUAL_TRANSITIONS[current]:
            raise InvalidTransition({"status": [f"Cannot move vehicle from {current.value} to {target.value}"]})

        self.status = target.value
        self.updated_at = now or datetime.now(UTC)
