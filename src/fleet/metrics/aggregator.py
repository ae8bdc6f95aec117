"""Dashboard metrics — counts, sums and a 7-day trend over orders.

`compute_metrics` is a pure function of the snapshots it is given and a
reference `now`; every call starts from scratch.

Calendar policy:
    - monthly revenue and the 7-day trend use the viewer's calendar, `tz`
      (UTC unless the caller says otherwise). A month runs from its first to
      its last calendar day, both inclusive.
    - "communications today" compares UTC dates.
    - an order is dated by `order_date`, falling back to `created_at`.
    - naive datetimes are taken to be UTC; ISO strings are parsed.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta, tzinfo

from fleet.order.order import OrderStatus
from fleet.stock.matching import match_opportunities

TREND_DAYS = 7


@dataclass(frozen=True)
class TrendPoint:
    """Orders placed and revenue booked on one calendar day."""

    date: date
    label: str
    orders: int = 0
    revenue: float = 0.0


@dataclass(frozen=True)
class DashboardMetrics:
    total_orders: int = 0
    pending_orders: int = 0
    in_production_orders: int = 0
    delivered_orders: int = 0
    total_revenue: float = 0.0
    monthly_revenue: float = 0.0
    average_order_value: float = 0.0
    delivery_requests: int = 0
    communications_today: int = 0
    stock_matches: int = 0
    active_customers: int = 0
    trend: list[TrendPoint] = field(default_factory=list)


def as_utc(value) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    elif not isinstance(value, datetime):
        # A bare date is taken as midnight UTC
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def order_day(order, tz: tzinfo) -> date | None:
    """The viewer-local calendar day an order was placed on."""
    placed_at = as_utc(order.order_date or order.created_at)
    if placed_at is None:
        return None
    return placed_at.astimezone(tz).date()


def build_trend(orders, now: datetime, tz: tzinfo = UTC, days: int = TREND_DAYS) -> list[TrendPoint]:
    """One point per day for the `days` days ending today, oldest first, zero-filled."""
    today = as_utc(now).astimezone(tz).date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

    counts = {day: 0 for day in window}
    revenue = {day: 0.0 for day in window}
    for order in orders:
        day = order_day(order, tz)
        if day in counts:
            counts[day] += 1
            revenue[day] += order.order_value or 0.0

    return [TrendPoint(date=day, label=f"{day.day} {day:%b}", orders=counts[day], revenue=revenue[day]) for day in window]


def compute_metrics(orders, delivery_requests, communications, now=None, tz: tzinfo = UTC, stock=()) -> DashboardMetrics:
    """Derive the dashboard snapshot for one viewer's scoped collections."""
    now = as_utc(now or datetime.now(UTC))
    orders = list(orders)

    status_counts = {status: 0 for status in OrderStatus}
    for order in orders:
        status_counts[OrderStatus(order.status)] += 1

    total_orders = len(orders)
    total_revenue = sum(order.order_value or 0.0 for order in orders)

    local_now = now.astimezone(tz)
    monthly_revenue = 0.0
    for order in orders:
        day = order_day(order, tz)
        if day is not None and (day.year, day.month) == (local_now.year, local_now.month):
            monthly_revenue += order.order_value or 0.0

    today_utc = now.date()
    communications_today = 0
    for communication in communications:
        sent_at = as_utc(communication.created_at)
        if sent_at is not None and sent_at.date() == today_utc:
            communications_today += 1

    return DashboardMetrics(
        total_orders=total_orders,
        pending_orders=status_counts[OrderStatus.PENDING],
        in_production_orders=status_counts[OrderStatus.IN_PRODUCTION],
        delivered_orders=status_counts[OrderStatus.DELIVERED],
        total_revenue=total_revenue,
        monthly_revenue=monthly_revenue,
        average_order_value=total_revenue / total_orders if total_orders else 0.0,
        delivery_requests=len(list(delivery_requests)),
        communications_today=communications_today,
        stock_matches=match_opportunities(stock, orders),
        active_customers=len({order.customer_email.lower() for order in orders if order.customer_email}),
        trend=build_trend(orders, now, tz),
    )
