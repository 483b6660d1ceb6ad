from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from .models import OrderStatus, OutboxStatus


class MenuItemOut(BaseModel):
    id: int
    name: str
    price_cents: int
    image_url: Optional[str] = None
    is_available: bool

    class Config:
        from_attributes = True


class InventoryItemOut(BaseModel):
    id: int
    name: str
    quantity: Decimal
    unit: str
    low_stock_threshold: Decimal
    is_low_stock: bool
    updated_at: datetime

    class Config:
        from_attributes = True


class RecipeLineOut(BaseModel):
    id: int
    menu_item_id: int
    inventory_item_id: int
    item_name: str
    quantity_needed: Decimal
    unit_needed: Optional[str] = None
    current_stock: Decimal
    inventory_unit: str
    low_stock_threshold: Decimal


class OrderLineCreate(BaseModel):
    menu_item_id: int
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    items: list[OrderLineCreate] = Field(..., min_length=1)
    client_total: Optional[Decimal] = Field(
        None, ge=0, description="Total shown on the cashier screen; recorded for reconciliation only."
    )


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemOut(BaseModel):
    id: int
    menu_item_id: Optional[int] = None
    name: str
    unit_price_cents: int
    quantity: int
    line_total_cents: int

    class Config:
        from_attributes = True


class OrderOut(BaseModel):
    id: int
    order_number: str
    status: OrderStatus
    total_amount_cents: int
    client_total_cents: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemOut]

    class Config:
        from_attributes = True


class StockMovementOut(BaseModel):
    id: int
    inventory_item_id: Optional[int] = None
    item_name: str
    quantity: Decimal
    unit: str
    created_at: datetime
    reversed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderDetailOut(OrderOut):
    movements: list[StockMovementOut] = Field(default_factory=list)


class OutboxEventOut(BaseModel):
    id: int
    event_type: str
    topic: str
    payload: dict
    status: OutboxStatus
    publish_attempts: int
    created_at: datetime
    updated_at: datetime


class ErrorOut(BaseModel):
    error_kind: str
    detail: str
