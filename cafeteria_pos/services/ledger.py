"""Inventory ledger: authoritative stock levels and their mutation.

Nothing here commits. Callers run ``check_sufficiency`` and ``deduct`` inside
the same transaction as the order insert and roll back on any error.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .. import models
from ..errors import InsufficientStock
from ..messages import LowStockMessage
from .events import enqueue_message
from .recipes import IngredientRequirement

logger = logging.getLogger(__name__)


def _lock_items(db: Session, item_ids: Iterable[int]) -> dict[int, models.InventoryItem]:
    # Ascending id order keeps lock acquisition consistent across concurrent orders.
    stmt = (
        select(models.InventoryItem)
        .where(models.InventoryItem.id.in_(sorted(set(item_ids))))
        .order_by(models.InventoryItem.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {item.id: item for item in db.scalars(stmt)}


def check_sufficiency(db: Session, requirements: Sequence[IngredientRequirement]) -> None:
    """Raise ``InsufficientStock`` for the first requirement current stock cannot cover."""
    if not requirements:
        return
    stock = _lock_items(db, (requirement.inventory_item_id for requirement in requirements))
    for requirement in requirements:
        item = stock.get(requirement.inventory_item_id)
        if item is None or item.quantity < requirement.quantity:
            raise InsufficientStock(requirement.item_name)


def deduct(db: Session, requirements: Sequence[IngredientRequirement]) -> list[models.InventoryItem]:
    """Decrement stock for every requirement and return the updated rows.

    Each decrement only applies while stock still covers it, so a concurrent
    order that got there first surfaces as ``InsufficientStock`` rather than a
    negative balance.
    """
    for requirement in sorted(requirements, key=lambda r: r.inventory_item_id):
        result = db.execute(
            update(models.InventoryItem)
            .where(
                models.InventoryItem.id == requirement.inventory_item_id,
                models.InventoryItem.quantity >= requirement.quantity,
            )
            .values(quantity=models.InventoryItem.quantity - requirement.quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InsufficientStock(requirement.item_name)

    items = _lock_items(db, (requirement.inventory_item_id for requirement in requirements))
    updated = [items[requirement.inventory_item_id] for requirement in requirements]
    for item in updated:
        if item.is_low_stock:
            _flag_low_stock(db, item)
    return updated


def restore(db: Session, requirements: Sequence[IngredientRequirement]) -> list[IngredientRequirement]:
    """Give stock back. Returns the requirements skipped because the item no longer exists."""
    skipped = []
    for requirement in sorted(requirements, key=lambda r: r.inventory_item_id):
        result = db.execute(
            update(models.InventoryItem)
            .where(models.InventoryItem.id == requirement.inventory_item_id)
            .values(quantity=models.InventoryItem.quantity + requirement.quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(
                "Skipping restore of %s %s: inventory item %s no longer exists",
                requirement.quantity,
                requirement.unit,
                requirement.item_name,
            )
            skipped.append(requirement)
    return skipped


def _flag_low_stock(db: Session, item: models.InventoryItem) -> None:
    logger.warning(
        "Low stock: %s at %s %s (threshold %s)",
        item.name,
        item.quantity,
        item.unit,
        item.low_stock_threshold,
    )
    enqueue_message(
        db,
        LowStockMessage(
            inventory_item_id=item.id,
            item_name=item.name,
            quantity=item.quantity,
            threshold=item.low_stock_threshold,
            unit=item.unit,
        ),
    )


def list_inventory(db: Session, *, low_stock_only: bool = False) -> Sequence[models.InventoryItem]:
    stmt = select(models.InventoryItem).order_by(models.InventoryItem.name)
    if low_stock_only:
        stmt = stmt.where(models.InventoryItem.quantity <= models.InventoryItem.low_stock_threshold)
    return db.scalars(stmt).all()


def get_inventory_item(db: Session, item_id: int) -> models.InventoryItem | None:
    return db.get(models.InventoryItem, item_id)
