"""Fleet bounded context — vehicle fleet order fulfillment.

Handles the order lifecycle, stock-to-order matching and reservation,
delivery requests, the communications log, notifications and the dashboard
metrics derived from them. Records live in an external record store reached
through `fleet.store`; the domain holds no state between calls.
"""

import structlog
from protean.domain import Domain

fleet = Domain(name="fleet")

logger = structlog.get_logger(__name__)
