"""Stock reservation — reserving a stock vehicle against a pending order.

The store has no multi-record transaction, so a reservation is two
single-record writes:

    1. vehicle  available → reserved   (guarded on status == available)
    2. order    pending   → confirmed  (guarded on status == pending, no VIN)

Preconditions are re-checked against fresh reads first, and each write is a
compare-and-set, so of two operators racing for the same vehicle exactly one
wins and the other gets StaleMatch. If write 2 is refused, write 1 is undone
before the error is raised. Every failure names the step it happened at.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import Identifier

from fleet.domain import fleet
from fleet.exceptions import AdapterUnavailable, NotFound, PreconditionFailed, StaleMatch
from fleet.notification import notify_quietly
from fleet.notification.notification import NotificationType
from fleet.order.order import Order, OrderStatus
from fleet.stock.matching import descriptors_match
from fleet.stock.vehicle import StockStatus, StockVehicle
from fleet.store import Collection, get_store

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Reservation:
    """The confirmed order and the reserved vehicle, as written."""

    order: Order
    vehicle: StockVehicle


def _check_still_matches(order: Order, vehicle: StockVehicle) -> None:
    if order.status != OrderStatus.PENDING.value:
        raise StaleMatch({"order_id": [f"Order {order.order_number} is {order.status}, not pending"]})
    if vehicle.status != StockStatus.AVAILABLE.value:
        raise StaleMatch({"stock_id": [f"Vehicle {vehicle.vin} is {vehicle.status}, not available"]})
    if not descriptors_match(order, vehicle):
        raise StaleMatch({"stock_id": [f"Vehicle {vehicle.vin} does not match order {order.order_number}"]})


def _release(store, stock_id, now) -> None:
    """Undo step 1 after step 2 was refused."""
    try:
        store.update(
            Collection.STOCK_VEHICLES,
            stock_id,
            {"status": StockStatus.AVAILABLE.value, "updated_at": now},
            expected={"status": StockStatus.RESERVED.value},
        )
    except (AdapterUnavailable, NotFound, PreconditionFailed) as exc:
        logger.error("Could not release vehicle after failed reservation", stock_id=str(stock_id), error=str(exc))
        raise AdapterUnavailable(
            f"Vehicle {stock_id} left reserved without an order: {exc}",
            step="compensation",
        ) from exc


def reserve(order_id, stock_id, now=None) -> Reservation:
    """Confirm `order_id` against stock vehicle `stock_id`.

    Raises:
        NotFound: either record is gone.
        StaleMatch: the pair no longer qualifies, or another reservation got
            there first. Nothing is left applied; re-list and retry.
        AdapterUnavailable: a store call failed; `step` says which.
    """
    store = get_store()
    now = now or datetime.now(UTC)

    order = Order.from_record(store.get(Collection.ORDERS, order_id))
    vehicle = StockVehicle.from_record(store.get(Collection.STOCK_VEHICLES, stock_id))
    _check_still_matches(order, vehicle)

    order.confirm_with_vin(vehicle.vin, now)
    vehicle.reserve(now)

    # Step 1: the vehicle
    try:
        vehicle_record = store.update(
            Collection.STOCK_VEHICLES,
            stock_id,
            {"status": vehicle.status, "updated_at": now},
            expected={"status": StockStatus.AVAILABLE.value},
        )
    except PreconditionFailed as exc:
        raise StaleMatch(
            {"stock_id": [f"Vehicle {vehicle.vin} was {exc.actual.get('status')} by the time it was reserved"]},
            step="stock",
        ) from exc
    except AdapterUnavailable as exc:
        raise AdapterUnavailable(exc.message, step="stock") from exc

    # Step 2: the order
    try:
        order_record = store.update(
            Collection.ORDERS,
            order_id,
            {"status": order.status, "vin": order.vin, "updated_at": now},
            expected={"status": OrderStatus.PENDING.value, "vin": None},
        )
    except PreconditionFailed as exc:
        _release(store, stock_id, now)
        raise StaleMatch(
            {"order_id": [f"Order {order.order_number} was {exc.actual.get('status')} by the time it was confirmed"]},
            step="order",
        ) from exc
    except AdapterUnavailable as exc:
        _release(store, stock_id, now)
        raise AdapterUnavailable(exc.message, step="order") from exc
    except NotFound:
        _release(store, stock_id, now)
        raise

    reservation = Reservation(
        order=Order.from_record(order_record),
        vehicle=StockVehicle.from_record(vehicle_record),
    )
    logger.info(
        "Vehicle reserved for order",
        order_id=str(order_id),
        order_number=reservation.order.order_number,
        stock_id=str(stock_id),
        vin=reservation.vehicle.vin,
    )

    notify_quietly(
        reservation.order.associated_user_ids(),
        NotificationType.STOCK_MATCH.value,
        "Stock Vehicle Matched",
        f"Order {reservation.order.order_number} has been matched to vehicle {reservation.vehicle.vin}",
        order_id=str(order_id),
    )
    return reservation


@fleet.command(part_of="StockVehicle")
class ReserveVehicle:
    """Reserve a stock vehicle for a pending order."""

    order_id = Identifier(required=True)
    stock_id = Identifier(required=True)


@fleet.command_handler(part_of=StockVehicle)
class ReservationHandler:
    @handle(ReserveVehicle)
    def reserve_vehicle(self, command):
        reservation = reserve(command.order_id, command.stock_id)
        return {
            "order": reservation.order.to_record(),
            "vehicle": reservation.vehicle.to_record(),
        }
