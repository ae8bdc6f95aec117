"""Record store port (abstract interface).

Defines the contract every record store adapter must implement. Records
are plain dicts keyed by field name; the store assigns `id` and
`created_at` on create. Each `update` call is atomic for one record, but
there is no transaction spanning several records.
"""

from abc import ABC, abstractmethod
from enum import Enum


class Collection(Enum):
    ORDERS = "orders"
    STOCK_VEHICLES = "stock_vehicles"
    DELIVERY_REQUESTS = "delivery_requests"
    COMMUNICATIONS = "communications"
    NOTIFICATIONS = "notifications"


class RecordStore(ABC):
    """Abstract record store interface."""

    @abstractmethod
    def list(
        self,
        collection: Collection,
        where: dict | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict]:
        """Return records matching every `where` field by equality.

        `order_by` is a field name, prefixed with "-" for descending order.
        """
        ...

    @abstractmethod
    def get(self, collection: Collection, record_id: str) -> dict:
        """Return one record by id.

        Raises:
            NotFound: if no record has this id.
        """
        ...

    @abstractmethod
    def create(self, collection: Collection, record: dict) -> dict:
        """Insert a record and return it with its assigned `id`."""
        ...

    @abstractmethod
    def update(
        self,
        collection: Collection,
        record_id: str,
        patch: dict,
        expected: dict | None = None,
    ) -> dict:
        """Apply `patch` to one record atomically and return the result.

        When `expected` is given the patch lands only if every listed field
        still holds the expected value.

        Raises:
            NotFound: if no record has this id.
            PreconditionFailed: if `expected` does not hold.
        """
        ...
