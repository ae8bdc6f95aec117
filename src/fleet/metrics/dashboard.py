"""Dashboard service — loads a viewer's records and computes their snapshot."""

import os
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from fleet.communication.communication import Communication
from fleet.delivery.delivery import DeliveryRequest
from fleet.identity.port import User
from fleet.identity.scope import visible_records
from fleet.metrics.aggregator import DashboardMetrics, compute_metrics
from fleet.metrics.cards import MetricCard, cards_for_role
from fleet.order.order import Order
from fleet.stock.vehicle import StockStatus, StockVehicle
from fleet.store import Collection, get_store

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Dashboard:
    role: str
    metrics: DashboardMetrics
    cards: list[MetricCard] = field(default_factory=list)


def default_timezone() -> tzinfo:
    """Viewer calendar used when the caller names none (DASHBOARD_TIMEZONE, else UTC)."""
    name = os.environ.get("DASHBOARD_TIMEZONE")
    if not name:
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown DASHBOARD_TIMEZONE, using UTC", timezone=name)
        return UTC


def dashboard(viewer: User, now: datetime | None = None, tz: tzinfo | None = None) -> Dashboard:
    store = get_store()

    orders = [Order.from_record(r) for r in visible_records(viewer, Collection.ORDERS, order_by="-created_at")]
    requests = [DeliveryRequest.from_record(r) for r in visible_records(viewer, Collection.DELIVERY_REQUESTS)]
    communications = [Communication.from_record(r) for r in visible_records(viewer, Collection.COMMUNICATIONS)]
    stock = [
        StockVehicle.from_record(r)
        for r in store.list(Collection.STOCK_VEHICLES, where={"status": StockStatus.AVAILABLE.value})
    ]

    metrics = compute_metrics(
        orders,
        requests,
        communications,
        now=now or datetime.now(UTC),
        tz=tz or default_timezone(),
        stock=stock,
    )
    return Dashboard(role=viewer.role.value, metrics=metrics, cards=cards_for_role(metrics, viewer.role))
