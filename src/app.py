"""Fleet FastAPI application.

Web server for the fleet order fulfillment engine. Commands are processed
synchronously; every request runs inside the fleet domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the logging profile (JSON in production and staging).
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fleet.domain import fleet
from fleet.utils.logging import clear_context, configure_logging

configure_logging()
fleet.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Fleet API",
    description="Vehicle fleet order fulfillment — orders, stock matching, deliveries and dashboards",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the fleet domain context for each request and drop its log context afterwards."""
    clear_context()
    try:
        with fleet.domain_context():
            return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from fleet.api import (  # noqa: E402
    communications_router,
    dashboard_router,
    deliveries_router,
    notifications_router,
    orders_router,
    stock_router,
)
from fleet.api.errors import register_fleet_exception_handlers  # noqa: E402

app.include_router(orders_router)
app.include_router(stock_router)
app.include_router(deliveries_router)
app.include_router(communications_router)
app.include_router(notifications_router)
app.include_router(dashboard_router)

register_fleet_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domains": {"fleet": {"name": fleet.name}}})
