"""Notifier port — abstract interface for raising user notifications."""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Abstract interface for notification adapters."""

    @abstractmethod
    def notify(
        self,
        user_ids: list[str],
        notification_type: str,
        title: str,
        message: str,
        order_id: str | None = None,
        priority: str = "medium",
    ) -> list[dict]:
        """Raise one notification per user.

        Returns:
            The notification records created.
        """
        ...
