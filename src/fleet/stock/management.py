"""Stock intake and manual status changes — commands, handler and services."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String

from fleet.domain import fleet
from fleet.exceptions import InvalidTransition, PreconditionFailed
from fleet.stock.vehicle import StockVehicle
from fleet.store import Collection, get_store

logger = structlog.get_logger(__name__)


def add_vehicle(vin, model, trim, color, year, price, location, user_id=None, now=None) -> StockVehicle:
    """Validate and store a new available vehicle. VINs are unique across stock."""
    store = get_store()
    if store.list(Collection.STOCK_VEHICLES, where={"vin": vin}, limit=1):
        raise ValidationError({"vin": [f"A vehicle with VIN {vin} is already in stock"]})

    vehicle = StockVehicle.create(
        vin=vin,
        model=model,
        trim=trim,
        color=color,
        year=year,
        price=price,
        location=location,
        user_id=user_id,
        now=now,
    )
    record = vehicle.to_record()
    record.pop("id")
    created = StockVehicle.from_record(store.create(Collection.STOCK_VEHICLES, record))

    logger.info("Stock vehicle added", stock_id=str(created.id), vin=created.vin, model=created.model)
    return created


def set_vehicle_status(stock_id, target_status, now=None) -> StockVehicle:
    """Apply an operator's manual status change to a vehicle."""
    store = get_store()
    vehicle = StockVehicle.from_record(store.get(Collection.STOCK_VEHICLES, stock_id))
    previous_status = vehicle.status

    vehicle.change_status(target_status, now)

    try:
        record = store.update(
            Collection.STOCK_VEHICLES,
            stock_id,
            {"status": vehicle.status, "updated_at": vehicle.updated_at},
            expected={"status": previous_status},
        )
    except PreconditionFailed as exc:
        raise InvalidTransition(
            {"status": [f"Vehicle changed to {exc.actual.get('status')} while moving from {previous_status}"]}
        ) from exc

    logger.info(
        "Stock vehicle status changed",
        stock_id=str(stock_id),
        from_status=previous_status,
        to_status=vehicle.status,
    )
    return StockVehicle.from_record(record)


@fleet.command(part_of="StockVehicle")
class AddStockVehicle:
    vin = String(required=True, max_length=17)
    model = String(required=True, max_length=100)
    trim = String(required=True, max_length=100)
    color = String(required=True, max_length=100)
    year = Integer(required=True)
    price = Float(required=True, min_value=0.0)
    location = String(max_length=255)
    user_id = Identifier()


@fleet.command(part_of="StockVehicle")
class ChangeStockStatus:
    stock_id = Identifier(required=True)
    target_status = String(required=True, max_length=50)


@fleet.command_handler(part_of=StockVehicle)
class StockManagementHandler:
    @handle(AddStockVehicle)
    def add_stock_vehicle(self, command):
        vehicle = add_vehicle(
            vin=command.vin,
            model=command.model,
            trim=command.trim,
            color=command.color,
            year=command.year,
            price=command.price,
            location=command.location,
            user_id=command.user_id,
        )
        return vehicle.to_record()

    @handle(ChangeStockStatus)
    def change_stock_status(self, command):
        return set_vehicle_status(command.stock_id, command.target_status).to_record()
