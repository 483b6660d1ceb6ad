"""Recipe resolution: what a menu item consumes from inventory."""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import ROUND_UP, Decimal
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from .. import models
from ..errors import MenuItemNotFound
from ..units import convert_quantity


@dataclass(frozen=True)
class IngredientRequirement:
    inventory_item_id: int
    item_name: str
    quantity: Decimal
    unit: str


def _recipe_lines(db: Session, menu_item_id: int) -> Sequence[models.RecipeIngredient]:
    stmt = (
        select(models.RecipeIngredient)
        .options(joinedload(models.RecipeIngredient.inventory_item))
        .where(models.RecipeIngredient.menu_item_id == menu_item_id)
        .order_by(models.RecipeIngredient.id)
    )
    return db.scalars(stmt).all()


def resolve_requirements(db: Session, menu_item_id: int, quantity: int) -> list[IngredientRequirement]:
    """Inventory needed for ``quantity`` units of a menu item, in each ingredient's stock unit.

    Amounts are rounded up to the scale stock is stored at (three decimal places).

    An empty list means the item has no recipe and consumes nothing.
    """
    requirements = []
    for line in _recipe_lines(db, menu_item_id):
        ingredient = line.inventory_item
        per_unit = convert_quantity(line.quantity_needed, line.unit_needed, ingredient.unit)
        requirements.append(
            IngredientRequirement(
                inventory_item_id=ingredient.id,
                item_name=ingredient.name,
                quantity=(per_unit * quantity).quantize(models.QUANTITY_STEP, rounding=ROUND_UP),
                unit=ingredient.unit,
            )
        )
    return requirements


def accumulate(requirements: Iterable[IngredientRequirement]) -> list[IngredientRequirement]:
    """Merge requirements that share an ingredient, keeping first-seen order."""
    totals: dict[int, IngredientRequirement] = {}
    for requirement in requirements:
        existing = totals.get(requirement.inventory_item_id)
        if existing is None:
            totals[requirement.inventory_item_id] = requirement
        else:
            totals[requirement.inventory_item_id] = replace(
                existing, quantity=existing.quantity + requirement.quantity
            )
    return list(totals.values())


def get_recipe(db: Session, menu_item_id: int) -> Sequence[models.RecipeIngredient]:
    if db.get(models.MenuItem, menu_item_id) is None:
        raise MenuItemNotFound(menu_item_id)
    return _recipe_lines(db, menu_item_id)
