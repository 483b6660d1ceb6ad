from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cafeteria_pos import models
from cafeteria_pos.database import Base
from cafeteria_pos.main import create_app


@dataclass
class Catalog:
    bun: models.InventoryItem
    patty: models.InventoryItem
    cheddar: models.InventoryItem
    burger: models.MenuItem
    cheeseburger: models.MenuItem
    salad: models.MenuItem


@pytest.fixture()
def session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Session:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def build_catalog(db: Session, *, bun_quantity: str = "10") -> Catalog:
    bun = models.InventoryItem(
        name="Bun", quantity=Decimal(bun_quantity), unit="pcs", low_stock_threshold=Decimal("5")
    )
    patty = models.InventoryItem(
        name="Beef Patty", quantity=Decimal("20"), unit="pcs", low_stock_threshold=Decimal("2")
    )
    cheddar = models.InventoryItem(
        name="Cheddar", quantity=Decimal("1"), unit="kg", low_stock_threshold=Decimal("0.1")
    )
    burger = models.MenuItem(name="Burger", price_cents=850)
    burger.ingredients.append(
        models.RecipeIngredient(inventory_item=bun, quantity_needed=Decimal("2"), unit_needed="pcs")
    )
    cheeseburger = models.MenuItem(name="Cheeseburger", price_cents=950)
    cheeseburger.ingredients.extend(
        [
            models.RecipeIngredient(inventory_item=bun, quantity_needed=Decimal("2"), unit_needed="pcs"),
            models.RecipeIngredient(inventory_item=patty, quantity_needed=Decimal("1"), unit_needed="pcs"),
            models.RecipeIngredient(inventory_item=cheddar, quantity_needed=Decimal("30"), unit_needed="g"),
        ]
    )
    salad = models.MenuItem(name="Salad", price_cents=700)
    db.add_all([bun, patty, cheddar, burger, cheeseburger, salad])
    db.commit()
    return Catalog(
        bun=bun, patty=patty, cheddar=cheddar, burger=burger, cheeseburger=cheeseburger, salad=salad
    )


@pytest.fixture()
def catalog(db_session: Session) -> Catalog:
    return build_catalog(db_session)


@pytest.fixture()
def client(session_factory: sessionmaker) -> TestClient:
    app = create_app(session_factory)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def catalog_builder():
    return build_catalog
