"""Notifier registry.

Uses the store-backed notifier by default; NOTIFIER_ADAPTER selects another
one. `notify_quietly` is the fire-and-forget entry point used by the
lifecycle, matching and delivery services: a failing notifier is logged and
never undoes the change that triggered it.
"""

import os

import structlog

from fleet.notification.port import Notifier

logger = structlog.get_logger(__name__)

_notifier_instance: Notifier | None = None


def get_notifier() -> Notifier:
    """Return the configured notifier (singleton)."""
    global _notifier_instance
    if _notifier_instance is None:
        adapter = os.environ.get("NOTIFIER_ADAPTER", "store")
        if adapter == "store":
            from fleet.notification.store_notifier import StoreNotifier

            _notifier_instance = StoreNotifier()
        else:
            raise ValueError(f"Unknown notifier adapter: {adapter}")
    return _notifier_instance


def set_notifier(notifier: Notifier) -> None:
    """Override the active notifier (useful for tests)."""
    global _notifier_instance
    _notifier_instance = notifier


def reset_notifier() -> None:
    """Reset the notifier singleton (useful for testing)."""
    global _notifier_instance
    _notifier_instance = None


def notify_quietly(user_ids, notification_type, title, message, order_id=None, priority="medium") -> list[dict]:
    """Raise notifications, logging instead of raising when the notifier fails."""
    if not user_ids:
        return []
    try:
        return get_notifier().notify(
            user_ids,
            notification_type,
            title,
            message,
            order_id=order_id,
            priority=priority,
        )
    except Exception:
        logger.warning(
            "Notification dispatch failed",
            notification_type=notification_type,
            order_id=order_id,
            user_ids=user_ids,
            exc_info=True,
        )
        return []
