"""Tagged messages exchanged over the POS socket.

Every message carries a ``type`` literal. Inbound payloads are validated
against ``ClientCommand`` and outbound broadcasts against ``BroadcastMessage``
before they reach a socket.
"""

from __future__ import annotations

import enum
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from .models import OrderStatus
from .schemas import OrderLineCreate, OrderOut


class Role(str, enum.Enum):
    kitchen = "kitchen"
    admin = "admin"
    cashier = "cashier"


# Broadcasts


class NewOrderMessage(BaseModel):
    type: Literal["new_order"] = "new_order"
    order: OrderOut


class OrderStatusChangedMessage(BaseModel):
    type: Literal["order_status_changed"] = "order_status_changed"
    order_number: str
    status: OrderStatus
    previous_status: OrderStatus


class LowStockMessage(BaseModel):
    type: Literal["low_stock"] = "low_stock"
    inventory_item_id: int
    item_name: str
    quantity: Decimal
    threshold: Decimal
    unit: str


BroadcastMessage = Annotated[
    Union[NewOrderMessage, OrderStatusChangedMessage, LowStockMessage],
    Field(discriminator="type"),
]
broadcast_adapter: TypeAdapter[BroadcastMessage] = TypeAdapter(BroadcastMessage)


# Direct replies to the submitting socket


class RoomJoinedMessage(BaseModel):
    type: Literal["room_joined"] = "room_joined"
    role: Role


class OrderPlacedMessage(BaseModel):
    type: Literal["order_placed"] = "order_placed"
    order_number: str


class ErrorReply(BaseModel):
    type: Literal["order_error", "status_error", "error"]
    error_kind: str
    detail: str


# Client commands


class JoinRoomCommand(BaseModel):
    type: Literal["join_room"]
    role: Role


class PlaceOrderCommand(BaseModel):
    type: Literal["place_order"]
    items: list[OrderLineCreate] = Field(..., min_length=1)
    client_total: Optional[Decimal] = Field(None, ge=0)


class UpdateOrderStatusCommand(BaseModel):
    type: Literal["update_order_status"]
    order_number: str
    status: OrderStatus


ClientCommand = Annotated[
    Union[JoinRoomCommand, PlaceOrderCommand, UpdateOrderStatusCommand],
    Field(discriminator="type"),
]
command_adapter: TypeAdapter[ClientCommand] = TypeAdapter(ClientCommand)
