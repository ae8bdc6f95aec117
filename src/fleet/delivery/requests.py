"""Delivery requests — raising a request against a built order and moving it along."""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Date, Identifier, String, Text

from fleet.communication.communication import MessageType
from fleet.communication.messaging import post_message
from fleet.delivery.delivery import DeliveryRequest, DeliveryStatus
from fleet.domain import fleet
from fleet.exceptions import AdapterUnavailable, InvalidTransition, NotFound, PreconditionFailed
from fleet.notification import notify_quietly
from fleet.notification.notification import NotificationType
from fleet.order.order import Order, OrderStatus
from fleet.store import Collection, get_store

logger = structlog.get_logger(__name__)


def _withdraw(store, request: DeliveryRequest, now) -> None:
    """Reject a request whose follow-up writes failed, so the order can ask again."""
    try:
        store.update(
            Collection.DELIVERY_REQUESTS,
            request.id,
            {"status": DeliveryStatus.REJECTED.value, "updated_at": now or datetime.now(UTC)},
            expected={"status": DeliveryStatus.PENDING.value},
        )
    except (AdapterUnavailable, NotFound, PreconditionFailed) as exc:
        logger.error("Could not withdraw delivery request", delivery_request_id=str(request.id), error=str(exc))
        raise AdapterUnavailable(
            f"Delivery request {request.id} left open without its communication: {exc}",
            step="compensation",
        ) from exc


def request_delivery(
    order_id,
    user_id,
    sender,
    delivery_address,
    contact_name,
    contact_phone,
    preferred_date=None,
    pickup_address=None,
    special_instructions=None,
    now=None,
) -> DeliveryRequest:
    """Raise a pending delivery request for a built order.

    Also logs a `delivery_request` entry on the order's communications and
    notifies the order's users.
    """
    store = get_store()
    order = Order.from_record(store.get(Collection.ORDERS, order_id))
    if order.status != OrderStatus.BUILT.value:
        raise InvalidTransition(
            {"order_id": [f"Delivery can only be requested for built orders, order is {order.status}"]}
        )

    existing = [
        DeliveryRequest.from_record(record)
        for record in store.list(Collection.DELIVERY_REQUESTS, where={"order_id": str(order_id)})
    ]
    if any(request.is_active for request in existing):
        raise ValidationError({"order_id": [f"Order {order.order_number} already has an open delivery request"]})

    request = DeliveryRequest.create(
        order_id=order_id,
        user_id=user_id,
        pickup_address=pickup_address,
        delivery_address=delivery_address,
        contact_name=contact_name,
        contact_phone=contact_phone,
        preferred_date=preferred_date,
        special_instructions=special_instructions,
        now=now,
    )
    record = request.to_record()
    record.pop("id")
    try:
        created = DeliveryRequest.from_record(store.create(Collection.DELIVERY_REQUESTS, record))
    except AdapterUnavailable as exc:
        raise AdapterUnavailable(exc.message, step="request") from exc

    logger.info(
        "Delivery requested",
        order_id=str(order_id),
        order_number=order.order_number,
        delivery_request_id=str(created.id),
    )

    try:
        post_message(
            order_id=order_id,
            user_id=user_id,
            sender=sender,
            message=f"Delivery requested for {order.order_number}",
            message_type=MessageType.DELIVERY_REQUEST.value,
            now=now,
        )
    except AdapterUnavailable as exc:
        _withdraw(store, created, now)
        raise AdapterUnavailable(exc.message, step="communication") from exc

    notify_quietly(
        order.associated_user_ids(),
        NotificationType.DELIVERY_REQUEST.value,
        "Delivery Requested",
        f"Delivery has been requested for order {order.order_number}",
        order_id=str(order_id),
    )
    return created


def advance_delivery(request_id, target_status, now=None) -> DeliveryRequest:
    """Move a delivery request forward (or reject it)."""
    store = get_store()
    request = DeliveryRequest.from_record(store.get(Collection.DELIVERY_REQUESTS, request_id))
    previous_status = request.status

    request.advance_to(target_status, now)

    try:
        record = store.update(
            Collection.DELIVERY_REQUESTS,
            request_id,
            {"status": request.status, "updated_at": request.updated_at},
            expected={"status": previous_status},
        )
    except PreconditionFailed as exc:
        raise InvalidTransition(
            {"status": [f"Delivery request changed to {exc.actual.get('status')} while moving from {previous_status}"]}
        ) from exc

    logger.info(
        "Delivery request status changed",
        delivery_request_id=str(request_id),
        from_status=previous_status,
        to_status=request.status,
    )
    return DeliveryRequest.from_record(record)


@fleet.command(part_of="DeliveryRequest")
class RequestDelivery:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    sender = String(required=True, max_length=255)
    delivery_address = Text(required=True)
    contact_name = String(required=True, max_length=255)
    contact_phone = String(required=True, max_length=50)
    preferred_date = Date()
    pickup_address = Text()
    special_instructions = Text()


@fleet.command(part_of="DeliveryRequest")
class AdvanceDelivery:
    request_id = Identifier(required=True)
    target_status = String(required=True, max_length=50)


@fleet.command_handler(part_of=DeliveryRequest)
class DeliveryRequestHandler:
    @handle(RequestDelivery)
    def request_delivery(self, command):
        request = request_delivery(
            order_id=command.order_id,
            user_id=command.user_id,
            sender=command.sender,
            delivery_address=command.delivery_address,
            contact_name=command.contact_name,
            contact_phone=command.contact_phone,
            preferred_date=command.preferred_date,
            pickup_address=command.pickup_address,
            special_instructions=command.special_instructions,
        )
        return request.to_record()

    @handle(AdvanceDelivery)
    def advance_delivery(self, command):
        return advance_delivery(command.request_id, command.target_status).to_record()
