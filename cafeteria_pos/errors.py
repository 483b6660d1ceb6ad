"""Domain errors raised by the fulfillment services.

Each error knows the ``error_kind`` reported to clients and the HTTP status the
REST layer answers with. The socket layer sends the same pair back to the
submitting client instead of raising.
"""

from __future__ import annotations

from fastapi import status


class FulfillmentError(Exception):
    error_kind = "FulfillmentError"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def as_dict(self) -> dict[str, str]:
        return {"error_kind": self.error_kind, "detail": self.detail}


class InsufficientStock(FulfillmentError):
    error_kind = "InsufficientStock"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, item_name: str) -> None:
        super().__init__(f"Insufficient stock for {item_name}")
        self.item_name = item_name


class RecipeMissing(FulfillmentError):
    error_kind = "RecipeMissing"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, menu_item_id: int) -> None:
        super().__init__(f"Menu item {menu_item_id} has no recipe")
        self.menu_item_id = menu_item_id


class OrderNotFound(FulfillmentError):
    error_kind = "OrderNotFound"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, order_number: str) -> None:
        super().__init__(f"Order {order_number} not found")
        self.order_number = order_number


class PersistenceFailure(FulfillmentError):
    error_kind = "PersistenceFailure"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class MenuItemNotFound(FulfillmentError):
    error_kind = "MenuItemNotFound"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, menu_item_id: int) -> None:
        super().__init__(f"Menu item {menu_item_id} not found")
        self.menu_item_id = menu_item_id


class MenuItemUnavailable(FulfillmentError):
    error_kind = "MenuItemUnavailable"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is not available")
        self.name = name


class InvalidStatusTransition(FulfillmentError):
    error_kind = "InvalidStatusTransition"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, order_number: str, current: str, requested: str) -> None:
        super().__init__(f"Order {order_number} cannot move from {current} to {requested}")
        self.current = current
        self.requested = requested


class UnitMismatch(FulfillmentError):
    error_kind = "UnitMismatch"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, from_unit: str, to_unit: str) -> None:
        super().__init__(f"Cannot convert {from_unit} to {to_unit}")
        self.from_unit = from_unit
        self.to_unit = to_unit


class InventoryItemNotFound(FulfillmentError):
    error_kind = "InventoryItemNotFound"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Inventory item {item_id} not found")
        self.item_id = item_id


class OutboxEventNotFound(FulfillmentError):
    error_kind = "OutboxEventNotFound"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, event_id: int) -> None:
        super().__init__(f"Outbox event {event_id} not found")
        self.event_id = event_id


class OutboxEventNotRetryable(FulfillmentError):
    error_kind = "OutboxEventNotRetryable"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, event_id: int, current: str) -> None:
        super().__init__(f"Outbox event {event_id} is {current}; only failed events can be retried")
        self.event_id = event_id
        self.current = current
