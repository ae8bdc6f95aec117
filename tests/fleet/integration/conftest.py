import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from fleet.api import (
    communications_router,
    dashboard_router,
    deliveries_router,
    notifications_router,
    orders_router,
    stock_router,
)
from fleet.api.errors import register_fleet_exception_handlers
from fleet.domain import fleet


@pytest.fixture()
def client():
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with fleet.domain_context():
            return await call_next(request)

    for router in (
        orders_router,
        stock_router,
        deliveries_router,
        communications_router,
        notifications_router,
        dashboard_router,
    ):
        app.include_router(router)
    register_fleet_exception_handlers(app)
    return TestClient(app)
