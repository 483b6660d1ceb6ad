"""Order transaction coordinator.

Placing an order resolves recipes, checks and deducts stock, stores the order
and stages its broadcast events in a single transaction. Cancelling an order
gives back exactly the stock recorded against it.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..core.config import get_settings
from ..errors import (
    FulfillmentError,
    InvalidStatusTransition,
    MenuItemNotFound,
    MenuItemUnavailable,
    OrderNotFound,
    PersistenceFailure,
    RecipeMissing,
)
from ..messages import NewOrderMessage, OrderStatusChangedMessage
from . import ledger
from . import recipes as recipe_service
from .events import enqueue_message

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    models.OrderStatus.pending: {models.OrderStatus.preparing, models.OrderStatus.cancelled},
    models.OrderStatus.preparing: {models.OrderStatus.completed, models.OrderStatus.cancelled},
}


def generate_order_number(prefix: str = "ORD") -> str:
    stamp = models.utcnow().strftime("%Y%m%d%H%M%S%f")
    return f"{prefix}{stamp}-{uuid.uuid4().hex[:6].upper()}"


def place_order(
    db: Session,
    payload: schemas.OrderCreate,
    *,
    require_recipes: bool | None = None,
) -> models.Order:
    settings = get_settings()
    if require_recipes is None:
        require_recipes = settings.REQUIRE_RECIPES
    try:
        order = _place_order(db, payload, require_recipes, settings.ORDER_NUMBER_PREFIX)
        db.commit()
    except FulfillmentError as exc:
        db.rollback()
        logger.warning("Order rejected: %s", exc.detail)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to persist order")
        raise PersistenceFailure("Order could not be saved") from exc
    db.refresh(order)
    logger.info("Order %s placed, total %s cents", order.order_number, order.total_amount_cents)
    return order


def _place_order(
    db: Session, payload: schemas.OrderCreate, require_recipes: bool, prefix: str
) -> models.Order:
    menu_items = _load_menu_items(db, payload.items)

    requirements = []
    for line in payload.items:
        line_requirements = recipe_service.resolve_requirements(db, line.menu_item_id, line.quantity)
        if not line_requirements and require_recipes:
            raise RecipeMissing(line.menu_item_id)
        requirements.extend(line_requirements)
    totals = recipe_service.accumulate(requirements)

    ledger.check_sufficiency(db, totals)
    ledger.deduct(db, totals)

    order = models.Order(
        order_number=generate_order_number(prefix),
        status=models.OrderStatus.pending,
        client_total_cents=_to_cents(payload.client_total),
    )
    for line in payload.items:
        menu_item = menu_items[line.menu_item_id]
        order.items.append(
            models.OrderItem(
                menu_item_id=menu_item.id,
                name=menu_item.name,
                unit_price_cents=menu_item.price_cents,
                quantity=line.quantity,
            )
        )
    order.total_amount_cents = sum(item.line_total_cents for item in order.items)
    for requirement in totals:
        order.movements.append(
            models.StockMovement(
                inventory_item_id=requirement.inventory_item_id,
                item_name=requirement.item_name,
                quantity=requirement.quantity,
                unit=requirement.unit,
            )
        )
    db.add(order)
    db.flush()

    if order.client_total_cents is not None and order.client_total_cents != order.total_amount_cents:
        logger.warning(
            "Order %s client total %s cents differs from computed %s cents",
            order.order_number,
            order.client_total_cents,
            order.total_amount_cents,
        )

    enqueue_message(db, NewOrderMessage(order=schemas.OrderOut.model_validate(order)))
    return order


def _load_menu_items(
    db: Session, lines: Sequence[schemas.OrderLineCreate]
) -> dict[int, models.MenuItem]:
    ids = sorted({line.menu_item_id for line in lines})
    stmt = select(models.MenuItem).where(models.MenuItem.id.in_(ids))
    menu_items = {item.id: item for item in db.scalars(stmt)}
    for line in lines:
        menu_item = menu_items.get(line.menu_item_id)
        if menu_item is None:
            raise MenuItemNotFound(line.menu_item_id)
        if not menu_item.is_available:
            raise MenuItemUnavailable(menu_item.name)
    return menu_items


def _to_cents(amount: Decimal | None) -> int | None:
    if amount is None:
        return None
    return int((amount * 100).quantize(Decimal("1")))


def update_order_status(
    db: Session, order_number: str, new_status: models.OrderStatus
) -> models.Order:
    stmt = (
        select(models.Order)
        .options(selectinload(models.Order.movements))
        .where(models.Order.order_number == order_number)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    order = db.scalars(stmt).first()
    if order is None:
        db.rollback()
        raise OrderNotFound(order_number)

    previous = order.status
    if previous == new_status and previous in models.TERMINAL_STATUSES:
        db.rollback()
        return order
    if new_status not in ALLOWED_TRANSITIONS.get(previous, ()):
        db.rollback()
        raise InvalidStatusTransition(order_number, previous.value, new_status.value)

    try:
        if new_status == models.OrderStatus.cancelled:
            _reverse_stock(db, order)
        order.status = new_status
        enqueue_message(
            db,
            OrderStatusChangedMessage(
                order_number=order.order_number,
                status=new_status,
                previous_status=previous,
            ),
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to update order %s", order_number)
        raise PersistenceFailure(f"Order {order_number} could not be updated") from exc
    db.refresh(order)
    logger.info("Order %s moved from %s to %s", order_number, previous.value, new_status.value)
    return order


def _reverse_stock(db: Session, order: models.Order) -> None:
    now = models.utcnow()
    requirements = []
    for movement in order.movements:
        if movement.reversed_at is not None:
            continue
        movement.reversed_at = now
        if movement.inventory_item_id is None:
            logger.warning(
                "Order %s: %s was removed from inventory, not restoring %s %s",
                order.order_number,
                movement.item_name,
                movement.quantity,
                movement.unit,
            )
            continue
        requirements.append(
            recipe_service.IngredientRequirement(
                inventory_item_id=movement.inventory_item_id,
                item_name=movement.item_name,
                quantity=movement.quantity,
                unit=movement.unit,
            )
        )
    ledger.restore(db, requirements)


def get_order(db: Session, order_number: str) -> models.Order | None:
    stmt = select(models.Order).where(models.Order.order_number == order_number)
    return db.scalars(stmt).first()


def list_orders(
    db: Session,
    *,
    status: models.OrderStatus | None = None,
    created_from: datetime | None = None,
    created_to: datetime | None = None,
) -> Sequence[models.Order]:
    stmt = select(models.Order).options(selectinload(models.Order.items)).order_by(models.Order.created_at.desc())
    if status:
        stmt = stmt.where(models.Order.status == status)
    if created_from:
        stmt = stmt.where(models.Order.created_at >= created_from)
    if created_to:
        stmt = stmt.where(models.Order.created_at <= created_to)
    return db.scalars(stmt).all()
