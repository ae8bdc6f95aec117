"""Role-specific dashboard cards."""

from dataclasses import dataclass

from fleet.identity.port import Role
from fleet.metrics.aggregator import DashboardMetrics


@dataclass(frozen=True)
class MetricCard:
    title: str
    value: float


def _sales_cards(metrics: DashboardMetrics) -> list[MetricCard]:
    return [
        MetricCard("Total Orders", metrics.total_orders),
        MetricCard("Pending Orders", metrics.pending_orders),
        MetricCard("In Production", metrics.in_production_orders),
        MetricCard("Delivered", metrics.delivered_orders),
    ]


def _finance_cards(metrics: DashboardMetrics) -> list[MetricCard]:
    return [
        MetricCard("Total Revenue", metrics.total_revenue),
        MetricCard("Monthly Revenue", metrics.monthly_revenue),
        MetricCard("Average Order Value", metrics.average_order_value),
        MetricCard("Delivery Requests", metrics.delivery_requests),
    ]


def _broker_cards(metrics: DashboardMetrics) -> list[MetricCard]:
    return [
        MetricCard("My Orders", metrics.total_orders),
        MetricCard("Pending Delivery", metrics.delivery_requests),
        MetricCard("Communications", metrics.communications_today),
        MetricCard("Active Customers", metrics.active_customers),
    ]


_CARDS_BY_ROLE = {
    Role.FINANCE: _finance_cards,
    Role.BROKER: _broker_cards,
}


def cards_for_role(metrics: DashboardMetrics, role: Role) -> list[MetricCard]:
    """Finance and broker views have their own cards; everyone else sees the sales view."""
    return _CARDS_BY_ROLE.get(role, _sales_cards)(metrics)
