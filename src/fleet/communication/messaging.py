"""Order messaging — appending to and reading an order's communications log."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text

from fleet.communication.communication import Communication, MessageType
from fleet.domain import fleet
from fleet.store import Collection, get_store

logger = structlog.get_logger(__name__)


def post_message(order_id, user_id, sender, message, message_type=MessageType.MESSAGE.value, now=None) -> Communication:
    """Append a message to an order's log. The order must exist."""
    store = get_store()
    store.get(Collection.ORDERS, order_id)

    communication = Communication.create(
        order_id=order_id,
        user_id=user_id,
        sender=sender,
        message=message,
        message_type=message_type,
        now=now,
    )
    record = communication.to_record()
    record.pop("id")
    created = Communication.from_record(store.create(Collection.COMMUNICATIONS, record))

    logger.info(
        "Communication posted",
        order_id=str(order_id),
        communication_id=str(created.id),
        message_type=created.message_type,
    )
    return created


def list_messages(order_id) -> list[Communication]:
    """An order's log, oldest first."""
    records = get_store().list(
        Collection.COMMUNICATIONS,
        where={"order_id": str(order_id)},
        order_by="created_at",
    )
    return [Communication.from_record(record) for record in records]


@fleet.command(part_of="Communication")
class PostMessage:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    sender = String(required=True, max_length=255)
    message = Text(required=True)
    message_type = String(default=MessageType.MESSAGE.value, max_length=50)


@fleet.command_handler(part_of=Communication)
class MessagingHandler:
    @handle(PostMessage)
    def post_message(self, command):
        communication = post_message(
            order_id=command.order_id,
            user_id=command.user_id,
            sender=command.sender,
            message=command.message,
            message_type=command.message_type,
        )
        return communication.to_record()
