"""Failures surfaced by the fulfillment engine.

InvalidTransition and StaleMatch are validation failures (HTTP 400),
NotFound maps to 404 and AdapterUnavailable to 503. The engine never
retries any of them; retry policy belongs to the caller.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class InvalidTransition(ValidationError):
    """A status change that the lifecycle graph does not allow."""


class StaleMatch(ValidationError):
    """A reservation lost its race: order or vehicle changed since listing.

    `step` names the write that was refused ("precheck", "stock" or "order")
    so the caller knows nothing was left half-applied.
    """

    def __init__(self, messages, step: str = "precheck"):
        self.step = step
        super().__init__(messages)


class NotFound(ObjectNotFoundError):
    """A referenced record no longer exists in the store."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"`{collection}` record with identifier {record_id} does not exist.")


class AdapterUnavailable(Exception):
    """The record store or identity provider call failed."""

    def __init__(self, message: str, step: str | None = None):
        self.message = message
        self.step = step
        super().__init__(message)


class PreconditionFailed(Exception):
    """A compare-and-set update found the record in an unexpected state."""

    def __init__(self, collection: str, record_id: str, expected: dict, actual: dict):
        self.collection = collection
        self.record_id = record_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"`{collection}` record {record_id} changed: expected {expected}, found {actual}")
