"""Store-backed notifier — writes notifications into the record store."""

from datetime import UTC, datetime

from fleet.notification.notification import Notification
from fleet.notification.port import Notifier
from fleet.store import Collection, get_store


class StoreNotifier(Notifier):
    """Notifier that records each notification in the `notifications` collection."""

    def notify(self, user_ids, notification_type, title, message, order_id=None, priority="medium"):
        store = get_store()
        now = datetime.now(UTC)
        created = []
        for user_id in user_ids:
            notification = Notification.create(
                user_id=user_id,
                notification_type=notification_type,
                title=title,
                message=message,
                order_id=order_id,
                priority=priority,
                now=now,
            )
            record = notification.to_record()
            record.pop("id")
            created.append(store.create(Collection.NOTIFICATIONS, record))
        return created
