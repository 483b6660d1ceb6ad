from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query

from .. import schemas
from ..errors import InventoryItemNotFound
from ..services import ledger
from .dependencies import DbSession

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get("", response_model=List[schemas.InventoryItemOut])
def list_inventory(
    db: DbSession,
    low_stock_only: bool = Query(False, description="Only items at or below their low-stock threshold."),
):
    return ledger.list_inventory(db, low_stock_only=low_stock_only)


@router.get("/{item_id}", response_model=schemas.InventoryItemOut, responses={404: {"model": schemas.ErrorOut}})
def get_inventory_item(item_id: int, db: DbSession):
    item = ledger.get_inventory_item(db, item_id)
    if item is None:
        raise InventoryItemNotFound(item_id)
    return item
