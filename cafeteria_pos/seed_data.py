from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from . import database, models
from .services import menu as menu_service

INVENTORY = [
    # name, quantity, unit, low-stock threshold
    ("Bun", "40", "pcs", "10"),
    ("Beef Patty", "30", "pcs", "8"),
    ("Cheddar", "2", "kg", "0.5"),
    ("Lettuce", "3", "kg", "0.5"),
    ("Coffee Beans", "5", "kg", "1"),
    ("Milk", "10", "l", "2"),
]

MENU = [
    # name, price in cents, recipe lines (ingredient, quantity per unit, unit)
    ("Burger", 850, [("Bun", "2", "pcs"), ("Beef Patty", "1", "pcs")]),
    ("Cheeseburger", 950, [("Bun", "2", "pcs"), ("Beef Patty", "1", "pcs"), ("Cheddar", "30", "g")]),
    ("Latte", 400, [("Coffee Beans", "18", "g"), ("Milk", "250", "ml")]),
    ("Garden Salad", 700, []),
]


def seed(db: Session) -> bool:
    if menu_service.list_menu_items(db):
        return False

    stock = {}
    for name, quantity, unit, threshold in INVENTORY:
        item = models.InventoryItem(
            name=name,
            quantity=Decimal(quantity),
            unit=unit,
            low_stock_threshold=Decimal(threshold),
        )
        db.add(item)
        stock[name] = item

    for name, price_cents, recipe in MENU:
        menu_item = models.MenuItem(name=name, price_cents=price_cents)
        for ingredient, quantity_needed, unit_needed in recipe:
            menu_item.ingredients.append(
                models.RecipeIngredient(
                    inventory_item=stock[ingredient],
                    quantity_needed=Decimal(quantity_needed),
                    unit_needed=unit_needed,
                )
            )
        db.add(menu_item)

    db.commit()
    return True


def main() -> None:
    database.Base.metadata.create_all(database.engine)
    db: Session = database.SessionLocal()
    try:
        if seed(db):
            print("Seeded menu, inventory and recipes.")
        else:
            print("Database already seeded; skipping.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
