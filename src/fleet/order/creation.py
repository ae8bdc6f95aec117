"""Order intake — command, handler and the create service."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, String

from fleet.domain import fleet
from fleet.order.order import Order
from fleet.store import Collection, get_store

logger = structlog.get_logger(__name__)


def create_order(
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
) -> Order:
    """Validate a new order and store it as pending."""
    order = Order.create(
        customer_name=customer_name,
        customer_email=customer_email,
        vehicle_model=vehicle_model,
        vehicle_trim=vehicle_trim,
        vehicle_color=vehicle_color,
        order_value=order_value,
        user_id=user_id,
        customer_id=customer_id,
        broker_id=broker_id,
        now=now,
    )
    record = order.to_record()
    record.pop("id")
    created = Order.from_record(get_store().create(Collection.ORDERS, record))

    logger.info(
        "Order created",
        order_id=str(created.id),
        order_number=created.order_number,
        vehicle_model=created.vehicle_model,
    )
    return created


@fleet.command(part_of="Order")
class CreateOrder:
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=255)
    vehicle_model = String(required=True, max_length=100)
    vehicle_trim = String(required=True, max_length=100)
    vehicle_color = String(required=True, max_length=100)
    order_value = Float(required=True, min_value=0.0)
    user_id = Identifier(required=True)
    customer_id = Identifier()
    broker_id = Identifier()


@fleet.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        order = create_order(
            customer_name=command.customer_name,
            customer_email=command.customer_email,
            vehicle_model=command.vehicle_model,
            vehicle_trim=command.vehicle_trim,
            vehicle_color=command.vehicle_color,
            order_value=command.order_value,
            user_id=command.user_id,
            customer_id=command.customer_id,
            broker_id=command.broker_id,
        )
        return order.to_record()
