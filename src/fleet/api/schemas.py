"""Pydantic request/response schemas for the Fleet API.

Field names follow the store records; routes translate request bodies into
Protean commands and records back into responses.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    customer_name: str
    customer_email: str
    vehicle_model: str
    vehicle_trim: str
    vehicle_color: str
    order_value: float = Field(ge=0)
    customer_id: str | None = None
    broker_id: str | None = None


class ChangeStatusRequest(BaseModel):
    status: str


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_name: str
    customer_email: str
    customer_id: str | None = None
    broker_id: str | None = None
    user_id: str
    vehicle_model: str
    vehicle_trim: str
    vehicle_color: str
    order_value: float
    status: str
    vin: str | None = None
    build_date: datetime | None = None
    delivery_date: datetime | None = None
    current_location: str | None = None
    order_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProgressStepResponse(BaseModel):
    status: str
    label: str
    completed: bool
    current: bool


class OrderProgressResponse(BaseModel):
    order_id: str
    status: str
    progress: int
    steps: list[ProgressStepResponse]


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------
class AddStockVehicleRequest(BaseModel):
    vin: str = Field(min_length=1, max_length=17)
    model: str
    trim: str
    color: str
    year: int = Field(ge=1900)
    price: float = Field(ge=0)
    location: str | None = None


class StockVehicleResponse(BaseModel):
    id: str
    vin: str
    model: str
    trim: str
    color: str
    year: int | None = None
    price: float | None = None
    location: str | None = None
    status: str
    user_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StockSummaryResponse(BaseModel):
    available: int = 0
    reserved: int = 0
    sold: int = 0
    damaged: int = 0


class MatchCandidatesResponse(BaseModel):
    stock_id: str
    vin: str
    orders: list[OrderResponse]


class ReserveRequest(BaseModel):
    order_id: str
    stock_id: str


class ReservationResponse(BaseModel):
    order: OrderResponse
    vehicle: StockVehicleResponse


# ---------------------------------------------------------------------------
# Delivery requests
# ---------------------------------------------------------------------------
class RequestDeliveryRequest(BaseModel):
    order_id: str
    delivery_address: str
    contact_name: str
    contact_phone: str
    preferred_date: date | None = None
    pickup_address: str | None = None
    special_instructions: str | None = None


class DeliveryRequestResponse(BaseModel):
    id: str
    order_id: str
    user_id: str
    pickup_address: str | None = None
    delivery_address: str
    contact_name: str
    contact_phone: str
    preferred_date: date | None = None
    special_instructions: str | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Communications
# ---------------------------------------------------------------------------
class PostMessageRequest(BaseModel):
    order_id: str
    message: str = Field(min_length=1)
    message_type: str = "message"


class CommunicationResponse(BaseModel):
    id: str
    order_id: str
    user_id: str
    sender: str
    message: str
    message_type: str
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class NotificationResponse(BaseModel):
    id: str
    user_id: str
    order_id: str | None = None
    title: str
    message: str
    notification_type: str
    priority: str
    is_read: bool
    created_at: datetime | None = None


class MarkedReadResponse(BaseModel):
    marked: int


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------
class TrendPointResponse(BaseModel):
    date: date
    label: str
    orders: int
    revenue: float


class MetricCardResponse(BaseModel):
    title: str
    value: float


class DashboardResponse(BaseModel):
    role: str
    total_orders: int
    pending_orders: int
    in_production_orders: int
    delivered_orders: int
    total_revenue: float
    monthly_revenue: float
    average_order_value: float
    delivery_requests: int
    communications_today: int
    stock_matches: int
    active_customers: int
    trend: list[TrendPointResponse]
    cards: list[MetricCardResponse]
