from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class OrderStatusEnum(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(BaseModel):
    id: int
    order_number: str
    status: OrderStatusEnum
    customer_email: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None


class AutoDeliveryLogEntry(BaseModel):
    id: int
    order_id: int
    order_number: str
    customer_email: str | None = None
    processed_at: datetime


class AutoDeliveryError(BaseModel):
    id: int
    order_id: int | None = None
    order_number: str | None = None
    message: str
    occurred_at: datetime


class SweepResult(BaseModel):
    processed_count: int = 0
    processed_orders: list[str] = []
    errors: list[str] = []


class DeliveryStats(BaseModel):
    total_processed: int = 0
    last_processed: datetime | None = None
    error_count: int = 0


class Address(BaseModel):
    id: int
    user_id: str
    address_line_1: str
    city: str
    state: str
    postal_code: str
    country: str
    barangay: str | None = None
    shipping_region: str | None = None
    is_default: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class HealthReport(BaseModel):
    success: bool
    database_connected: bool
    host: str | None = None
    database: str | None = None
    error: str | None = None
