"""Order status changes — command, handler and the transition service."""

import structlog
from protean import handle
from protean.fields import Identifier, String

from fleet.domain import fleet
from fleet.exceptions import InvalidTransition, PreconditionFailed
from fleet.notification import notify_quietly
from fleet.notification.notification import NotificationType
from fleet.order.order import Order
from fleet.store import Collection, get_store

logger = structlog.get_logger(__name__)


def transition(order_id, target_status, now=None) -> Order:
    """Move an order one step along its lifecycle (or cancel it).

    The write is guarded on the status the order was read with, so a
    concurrent change is reported as InvalidTransition rather than
    overwritten. Associated users get an `order_update` notification once
    the write has landed; a failing notifier does not undo the change.
    """
    store = get_store()
    order = Order.from_record(store.get(Collection.ORDERS, order_id))
    previous_status = order.status

    order.transition_to(target_status, now)

    try:
        record = store.update(
            Collection.ORDERS,
            order_id,
            {"status": order.status, "updated_at": order.updated_at},
            expected={"status": previous_status},
        )
    except PreconditionFailed as exc:
        raise InvalidTransition(
            {"status": [f"Order changed to {exc.actual.get('status')} while moving from {previous_status}"]}
        ) from exc

    updated = Order.from_record(record)
    logger.info(
        "Order status changed",
        order_id=str(order_id),
        order_number=updated.order_number,
        from_status=previous_status,
        to_status=updated.status,
    )

    notify_quietly(
        updated.associated_user_ids(),
        NotificationType.ORDER_UPDATE.value,
        "Order Status Updated",
        f"Order {updated.order_number} is now {updated.status.replace('_', ' ')}",
        order_id=str(order_id),
    )
    return updated


@fleet.command(part_of="Order")
class TransitionOrder:
    order_id = Identifier(required=True)
    target_status = String(required=True, max_length=50)


@fleet.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(TransitionOrder)
    def transition_order(self, command):
        return transition(command.order_id, command.target_status).to_record()
