from fleet.api.routes import (
    communications_router,
    dashboard_router,
    deliveries_router,
    notifications_router,
    orders_router,
    stock_router,
)

__all__ = [
    "communications_router",
    "dashboard_router",
    "deliveries_router",
    "notifications_router",
    "orders_router",
    "stock_router",
]
