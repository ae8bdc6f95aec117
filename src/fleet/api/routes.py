"""FastAPI routes for the Fleet domain.

Writes go through Protean commands processed synchronously; reads go
straight to the record store, scoped to what the viewer may see.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from fleet.api.dependencies import OPERATOR_ROLES, require_role, require_viewer
from fleet.api.schemas import (
    AddStockVehicleRequest,
    ChangeStatusRequest,
    CommunicationResponse,
    CreateOrderRequest,
    DashboardResponse,
    DeliveryRequestResponse,
    MarkedReadResponse,
    MatchCandidatesResponse,
    MetricCardResponse,
    NotificationResponse,
    OrderProgressResponse,
    OrderResponse,
    PostMessageRequest,
    ProgressStepResponse,
    RequestDeliveryRequest,
    ReservationResponse,
    ReserveRequest,
    StockSummaryResponse,
    StockVehicleResponse,
    TrendPointResponse,
)
from fleet.communication.messaging import PostMessage, list_messages
from fleet.delivery.requests import AdvanceDelivery, RequestDelivery
from fleet.exceptions import NotFound
from fleet.identity import User
from fleet.identity.scope import can_see, visible_records
from fleet.metrics.dashboard import dashboard
from fleet.notification.management import MarkAllNotificationsRead, MarkNotificationRead
from fleet.order.creation import CreateOrder
from fleet.order.lifecycle import TransitionOrder
from fleet.order.order import Order
from fleet.stock.management import AddStockVehicle, ChangeStockStatus
from fleet.stock.matching import find_candidates, summarize_stock
from fleet.stock.reservation import ReserveVehicle
from fleet.stock.vehicle import StockVehicle
from fleet.store import Collection, get_store


def _visible_order(viewer: User, order_id: str) -> dict:
    """Fetch an order the viewer may see; others look exactly like missing ones."""
    record = get_store().get(Collection.ORDERS, order_id)
    if not can_see(viewer, record):
        raise NotFound(Collection.ORDERS.value, order_id)
    return record


def _search(records: list[dict], fields: tuple[str, ...], term: str | None) -> list[dict]:
    """Keep records where any of `fields` contains `term`, ignoring case."""
    if not term:
        return records
    term = term.lower()
    return [record for record in records if any(term in str(record.get(f) or "").lower() for f in fields)]


# ---------------------------------------------------------------------------
# Orders Router
# ---------------------------------------------------------------------------
orders_router = APIRouter(prefix="/orders", tags=["orders"])


@orders_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest, viewer: User = Depends(require_viewer)) -> OrderResponse:
    command = CreateOrder(
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        vehicle_model=body.vehicle_model,
        vehicle_trim=body.vehicle_trim,
        vehicle_color=body.vehicle_color,
        order_value=body.order_value,
        user_id=viewer.id,
        customer_id=body.customer_id,
        broker_id=body.broker_id,
    )
    record = current_domain.process(command, asynchronous=False)
    return OrderResponse.model_validate(record)


@orders_router.get("", response_model=list[OrderResponse])
async def list_orders(
    status: str | None = None, search: str | None = None, viewer: User = Depends(require_viewer)
) -> list[OrderResponse]:
    where = {"status": status} if status else None
    records = visible_records(viewer, Collection.ORDERS, where=where, order_by="-created_at")
    records = _search(records, ("customer_name", "vehicle_model", "order_number"), search)
    return [OrderResponse.model_validate(record) for record in records]


@orders_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, viewer: User = Depends(require_viewer)) -> OrderResponse:
    return OrderResponse.model_validate(_visible_order(viewer, order_id))


@orders_router.get("/{order_id}/progress", response_model=OrderProgressResponse)
async def get_order_progress(order_id: str, viewer: User = Depends(require_viewer)) -> OrderProgressResponse:
    order = Order.from_record(_visible_order(viewer, order_id))
    return OrderProgressResponse(
        order_id=str(order.id),
        status=order.status,
        progress=order.progress,
        steps=[
            ProgressStepResponse(status=s.status, label=s.label, completed=s.completed, current=s.current)
            for s in order.progress_steps()
        ],
    )


@orders_router.put("/{order_id}/status", response_model=OrderResponse)
async def change_order_status(
    order_id: str, body: ChangeStatusRequest, viewer: User = Depends(require_role(*OPERATOR_ROLES))
) -> OrderResponse:
    record = current_domain.process(
        TransitionOrder(order_id=order_id, target_status=body.status),
        asynchronous=False,
    )
    return OrderResponse.model_validate(record)


# ---------------------------------------------------------------------------
# Stock Router
# ---------------------------------------------------------------------------
stock_router = APIRouter(prefix="/stock", tags=["stock"])


@stock_router.post("", status_code=201, response_model=StockVehicleResponse)
async def add_stock_vehicle(
    body: AddStockVehicleRequest, viewer: User = Depends(require_role(*OPERATOR_ROLES))
) -> StockVehicleResponse:
    command = AddStockVehicle(
        vin=body.vin,
        model=body.model,
        trim=body.trim,
        color=body.color,
        year=body.year,
        price=body.price,
        location=body.location,
        user_id=viewer.id,
    )
    record = current_domain.process(command, asynchronous=False)
    return StockVehicleResponse.model_validate(record)


@stock_router.get("", response_model=list[StockVehicleResponse])
async def list_stock(
    status: str | None = None, search: str | None = None, viewer: User = Depends(require_viewer)
) -> list[StockVehicleResponse]:
    where = {"status": status} if status else None
    records = get_store().list(Collection.STOCK_VEHICLES, where=where, order_by="-created_at")
    records = _search(records, ("model", "vin", "trim", "color"), search)
    return [StockVehicleResponse.model_validate(record) for record in records]


@stock_router.get("/summary", response_model=StockSummaryResponse)
async def stock_summary(viewer: User = Depends(require_viewer)) -> StockSummaryResponse:
    vehicles = [StockVehicle.from_record(r) for r in get_store().list(Collection.STOCK_VEHICLES)]
    return StockSummaryResponse(**summarize_stock(vehicles))


@stock_router.get("/matches", response_model=list[MatchCandidatesResponse])
async def list_matches(viewer: User = Depends(require_role(*OPERATOR_ROLES))) -> list[MatchCandidatesResponse]:
    store = get_store()
    vehicles = [StockVehicle.from_record(r) for r in store.list(Collection.STOCK_VEHICLES, order_by="created_at")]
    orders = [Order.from_record(r) for r in store.list(Collection.ORDERS, order_by="created_at")]
    by_id = {str(vehicle.id): vehicle for vehicle in vehicles}

    return [
        MatchCandidatesResponse(
            stock_id=stock_id,
            vin=by_id[stock_id].vin,
            orders=[OrderResponse.model_validate(order.to_record()) for order in candidates],
        )
        for stock_id, candidates in find_candidates(vehicles, orders).items()
    ]


@stock_router.post("/matches", status_code=201, response_model=ReservationResponse)
async def reserve_vehicle(
    body: ReserveRequest, viewer: User = Depends(require_role(*OPERATOR_ROLES))
) -> ReservationResponse:
    result = current_domain.process(
        ReserveVehicle(order_id=body.order_id, stock_id=body.stock_id),
        asynchronous=False,
    )
    return ReservationResponse(
        order=OrderResponse.model_validate(result["order"]),
        vehicle=StockVehicleResponse.model_validate(result["vehicle"]),
    )


@stock_router.put("/{stock_id}/status", response_model=StockVehicleResponse)
async def change_stock_status(
    stock_id: str, body: ChangeStatusRequest, viewer: User = Depends(require_role(*OPERATOR_ROLES))
) -> StockVehicleResponse:
    record = current_domain.process(
        ChangeStockStatus(stock_id=stock_id, target_status=body.status),
        asynchronous=False,
    )
    return StockVehicleResponse.model_validate(record)


# ---------------------------------------------------------------------------
# Delivery Router
# ---------------------------------------------------------------------------
deliveries_router = APIRouter(prefix="/deliveries", tags=["deliveries"])


@deliveries_router.post("", status_code=201, response_model=DeliveryRequestResponse)
async def request_delivery(
    body: RequestDeliveryRequest, viewer: User = Depends(require_viewer)
) -> DeliveryRequestResponse:
    _visible_order(viewer, body.order_id)
    command = RequestDelivery(
        order_id=body.order_id,
        user_id=viewer.id,
        sender=viewer.sender_name,
        delivery_address=body.delivery_address,
        contact_name=body.contact_name,
        contact_phone=body.contact_phone,
        preferred_date=body.preferred_date,
        pickup_address=body.pickup_address,
        special_instructions=body.special_instructions,
    )
    record = current_domain.process(command, asynchronous=False)
    return DeliveryRequestResponse.model_validate(record)


@deliveries_router.get("", response_model=list[DeliveryRequestResponse])
async def list_delivery_requests(viewer: User = Depends(require_viewer)) -> list[DeliveryRequestResponse]:
    records = visible_records(viewer, Collection.DELIVERY_REQUESTS, order_by="-created_at")
    return [DeliveryRequestResponse.model_validate(record) for record in records]


@deliveries_router.put("/{request_id}/status", response_model=DeliveryRequestResponse)
async def advance_delivery(
    request_id: str, body: ChangeStatusRequest, viewer: User = Depends(require_role(*OPERATOR_ROLES))
) -> DeliveryRequestResponse:
    record = current_domain.process(
        AdvanceDelivery(request_id=request_id, target_status=body.status),
        asynchronous=False,
    )
    return DeliveryRequestResponse.model_validate(record)


# ---------------------------------------------------------------------------
# Communications Router
# ---------------------------------------------------------------------------
communications_router = APIRouter(prefix="/communications", tags=["communications"])


@communications_router.post("", status_code=201, response_model=CommunicationResponse)
async def post_message(body: PostMessageRequest, viewer: User = Depends(require_viewer)) -> CommunicationResponse:
    _visible_order(viewer, body.order_id)
    command = PostMessage(
        order_id=body.order_id,
        user_id=viewer.id,
        sender=viewer.sender_name,
        message=body.message,
        message_type=body.message_type,
    )
    record = current_domain.process(command, asynchronous=False)
    return CommunicationResponse.model_validate(record)


@communications_router.get("", response_model=list[CommunicationResponse])
async def list_communications(order_id: str, viewer: User = Depends(require_viewer)) -> list[CommunicationResponse]:
    _visible_order(viewer, order_id)
    return [CommunicationResponse.model_validate(c.to_record()) for c in list_messages(order_id)]


# ---------------------------------------------------------------------------
# Notifications Router
# ---------------------------------------------------------------------------
notifications_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notifications_router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    notification_type: str | None = None,
    viewer: User = Depends(require_viewer),
) -> list[NotificationResponse]:
    where = {"user_id": viewer.id}
    if unread_only:
        where["is_read"] = False
    if notification_type:
        where["notification_type"] = notification_type
    records = get_store().list(Collection.NOTIFICATIONS, where=where, order_by="-created_at")
    return [NotificationResponse.model_validate(record) for record in records]


@notifications_router.put("/read-all", response_model=MarkedReadResponse)
async def mark_all_notifications_read(viewer: User = Depends(require_viewer)) -> MarkedReadResponse:
    result = current_domain.process(MarkAllNotificationsRead(user_id=viewer.id), asynchronous=False)
    return MarkedReadResponse(**result)


@notifications_router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str, viewer: User = Depends(require_viewer)
) -> NotificationResponse:
    record = get_store().get(Collection.NOTIFICATIONS, notification_id)
    if record["user_id"] != viewer.id:
        raise NotFound(Collection.NOTIFICATIONS.value, notification_id)
    record = current_domain.process(MarkNotificationRead(notification_id=notification_id), asynchronous=False)
    return NotificationResponse.model_validate(record)


# ---------------------------------------------------------------------------
# Dashboard Router
# ---------------------------------------------------------------------------
dashboard_router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@dashboard_router.get("", response_model=DashboardResponse)
async def get_dashboard(tz: str | None = None, viewer: User = Depends(require_viewer)) -> DashboardResponse:
    zone = None
    if tz:
        try:
            zone = ZoneInfo(tz)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError({"tz": [f"Unknown time zone `{tz}`"]}) from None

    snapshot = dashboard(viewer, tz=zone)
    metrics = snapshot.metrics
    return DashboardResponse(
        role=snapshot.role,
        total_orders=metrics.total_orders,
        pending_orders=metrics.pending_orders,
        in_production_orders=metrics.in_production_orders,
        delivered_orders=metrics.delivered_orders,
        total_revenue=metrics.total_revenue,
        monthly_revenue=metrics.monthly_revenue,
        average_order_value=metrics.average_order_value,
        delivery_requests=metrics.delivery_requests,
        communications_today=metrics.communications_today,
        stock_matches=metrics.stock_matches,
        active_customers=metrics.active_customers,
        trend=[
            TrendPointResponse(date=p.date, label=p.label, orders=p.orders, revenue=p.revenue)
            for p in metrics.trend
        ],
        cards=[MetricCardResponse(title=c.title, value=c.value) for c in snapshot.cards],
    )
