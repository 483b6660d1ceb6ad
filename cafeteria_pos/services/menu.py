from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models


def list_menu_items(db: Session, *, available_only: bool = False) -> Sequence[models.MenuItem]:
    stmt = select(models.MenuItem).order_by(models.MenuItem.name)
    if available_only:
        stmt = stmt.where(models.MenuItem.is_available.is_(True))
    return db.scalars(stmt).all()
