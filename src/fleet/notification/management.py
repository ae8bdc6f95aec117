"""Notification management — marking notifications read."""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import Identifier

from fleet.domain import fleet
from fleet.notification.notification import Notification
from fleet.store import Collection, get_store

logger = structlog.get_logger(__name__)


def mark_read(notification_id, now=None) -> dict:
    """Mark one notification read and return its record."""
    store = get_store()
    notification = Notification.from_record(store.get(Collection.NOTIFICATIONS, notification_id))
    if not notification.mark_read(now):
        return notification.to_record()
    return store.update(
        Collection.NOTIFICATIONS,
        notification_id,
        {"is_read": True, "updated_at": notification.updated_at},
    )


def mark_all_read(user_id, now=None) -> int:
    """Mark every unread notification of `user_id` read. Returns how many changed."""
    store = get_store()
    now = now or datetime.now(UTC)
    unread = store.list(Collection.NOTIFICATIONS, where={"user_id": str(user_id), "is_read": False})
    for record in unread:
        store.update(Collection.NOTIFICATIONS, record["id"], {"is_read": True, "updated_at": now})

    logger.info("Notifications marked read", user_id=str(user_id), count=len(unread))
    return len(unread)


@fleet.command(part_of="Notification")
class MarkNotificationRead:
    notification_id = Identifier(required=True)


@fleet.command(part_of="Notification")
class MarkAllNotificationsRead:
    user_id = Identifier(required=True)


@fleet.command_handler(part_of=Notification)
class NotificationManagementHandler:
    @handle(MarkNotificationRead)
    def mark_notification_read(self, command):
        return mark_read(command.notification_id)

    @handle(MarkAllNotificationsRead)
    def mark_all_notifications_read(self, command):
        return {"marked": mark_all_read(command.user_id)}
