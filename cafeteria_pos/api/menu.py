from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query

from .. import schemas
from ..services import menu as menu_service
from ..services import recipes as recipe_service
from .dependencies import DbSession
from .serializers import recipe_line as serialize_recipe_line

router = APIRouter(prefix="/menu", tags=["Menu"])


@router.get("", response_model=List[schemas.MenuItemOut])
def list_menu(db: DbSession, available_only: bool = Query(False)):
    return menu_service.list_menu_items(db, available_only=available_only)


@router.get("/{menu_item_id}/recipe", response_model=List[schemas.RecipeLineOut])
def get_recipe(menu_item_id: int, db: DbSession):
    lines = recipe_service.get_recipe(db, menu_item_id)
    return [serialize_recipe_line(line) for line in lines]
