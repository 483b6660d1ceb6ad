from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from cafeteria_pos import schemas
from cafeteria_pos.seed_data import seed
from cafeteria_pos.services import ledger, menu, orders


def test_seed_is_idempotent(db_session: Session) -> None:
    assert seed(db_session) is True
    assert seed(db_session) is False

    assert [item.name for item in menu.list_menu_items(db_session)] == [
        "Burger",
        "Cheeseburger",
        "Garden Salad",
        "Latte",
    ]
    assert len(ledger.list_inventory(db_session)) == 6


def test_seeded_latte_draws_grams_and_millilitres(db_session: Session) -> None:
    seed(db_session)
    latte = next(item for item in menu.list_menu_items(db_session) if item.name == "Latte")

    orders.place_order(
        db_session,
        schemas.OrderCreate(items=[schemas.OrderLineCreate(menu_item_id=latte.id, quantity=2)]),
    )

    stock = {item.name: item.quantity for item in ledger.list_inventory(db_session)}
    assert stock["Coffee Beans"] == Decimal("4.964")
    assert stock["Milk"] == Decimal("9.5")
