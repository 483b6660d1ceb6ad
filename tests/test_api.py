from __future__ import annotations

from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from cafeteria_pos import models
from cafeteria_pos.services import events


def _place(client: TestClient, *lines: tuple[int, int], client_total: float | None = None):
    body = {"items": [{"menu_item_id": menu_item_id, "quantity": qty} for menu_item_id, qty in lines]}
    if client_total is not None:
        body["client_total"] = client_total
    return client.post("/orders", json=body)


def test_health(client: TestClient) -> None:
    res = client.get("/")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_place_order_returns_order_number(client: TestClient, catalog) -> None:
    res = _place(client, (catalog.burger.id, 3), client_total=25.5)
    assert res.status_code == 201
    body = res.json()
    assert body["order_number"].startswith("ORD")
    assert body["status"] == "pending"
    assert body["total_amount_cents"] == 2550
    assert body["client_total_cents"] == 2550
    assert body["items"][0]["name"] == "Burger"

    bun = client.get(f"/inventory/{catalog.bun.id}").json()
    assert Decimal(bun["quantity"]) == Decimal("4")
    assert bun["is_low_stock"] is True


def test_insufficient_stock_is_reported_as_conflict(client: TestClient, catalog) -> None:
    res = _place(client, (catalog.burger.id, 6))
    assert res.status_code == 409
    assert res.json() == {"error_kind": "InsufficientStock", "detail": "Insufficient stock for Bun"}

    assert client.get("/orders").json() == []
    assert Decimal(client.get(f"/inventory/{catalog.bun.id}").json()["quantity"]) == Decimal("10")


def test_empty_order_is_rejected(client: TestClient, catalog) -> None:
    res = client.post("/orders", json={"items": []})
    assert res.status_code == 422


def test_unknown_menu_item(client: TestClient, catalog) -> None:
    res = _place(client, (4242, 1))
    assert res.status_code == 404
    assert res.json()["error_kind"] == "MenuItemNotFound"


def test_status_flow_and_cancellation(client: TestClient, catalog) -> None:
    number = _place(client, (catalog.burger.id, 3)).json()["order_number"]

    res = client.patch(f"/orders/{number}/status", json={"status": "preparing"})
    assert res.status_code == 200
    assert res.json()["status"] == "preparing"

    res = client.patch(f"/orders/{number}/status", json={"status": "cancelled"})
    assert res.status_code == 200
    assert Decimal(client.get(f"/inventory/{catalog.bun.id}").json()["quantity"]) == Decimal("10")

    detail = client.get(f"/orders/{number}").json()
    assert detail["status"] == "cancelled"
    assert detail["movements"][0]["item_name"] == "Bun"
    assert detail["movements"][0]["reversed_at"] is not None

    res = client.patch(f"/orders/{number}/status", json={"status": "pending"})
    assert res.status_code == 409
    assert res.json()["error_kind"] == "InvalidStatusTransition"


def test_status_update_for_unknown_order(client: TestClient, catalog) -> None:
    res = client.patch("/orders/ORD-nope/status", json={"status": "completed"})
    assert res.status_code == 404
    assert res.json()["error_kind"] == "OrderNotFound"
    missing = client.get("/orders/ORD-nope")
    assert missing.status_code == 404
    assert missing.json() == {"error_kind": "OrderNotFound", "detail": "Order ORD-nope not found"}

    missing_item = client.get("/inventory/4242")
    assert missing_item.status_code == 404
    assert missing_item.json()["error_kind"] == "InventoryItemNotFound"


def test_list_orders_by_status(client: TestClient, catalog) -> None:
    first = _place(client, (catalog.salad.id, 1)).json()["order_number"]
    _place(client, (catalog.salad.id, 1))
    client.patch(f"/orders/{first}/status", json={"status": "preparing"})

    preparing = client.get("/orders", params={"status": "preparing"}).json()
    assert [order["order_number"] for order in preparing] == [first]
    assert len(client.get("/orders").json()) == 2


def test_menu_and_recipe_endpoints(client: TestClient, catalog) -> None:
    menu = client.get("/menu").json()
    assert [item["name"] for item in menu] == ["Burger", "Cheeseburger", "Salad"]

    recipe = client.get(f"/menu/{catalog.cheeseburger.id}/recipe").json()
    cheddar = next(line for line in recipe if line["item_name"] == "Cheddar")
    assert cheddar["unit_needed"] == "g"
    assert cheddar["inventory_unit"] == "kg"
    assert Decimal(cheddar["current_stock"]) == Decimal("1")

    assert client.get(f"/menu/{catalog.salad.id}/recipe").json() == []
    missing = client.get("/menu/777/recipe")
    assert missing.status_code == 404
    assert missing.json()["error_kind"] == "MenuItemNotFound"


def test_low_stock_inventory_listing(client: TestClient, catalog) -> None:
    assert client.get("/inventory", params={"low_stock_only": True}).json() == []
    _place(client, (catalog.burger.id, 3))

    low = client.get("/inventory", params={"low_stock_only": True}).json()
    assert [item["name"] for item in low] == ["Bun"]


def test_published_events_leave_the_pending_outbox(client: TestClient, catalog) -> None:
    _place(client, (catalog.burger.id, 3))

    assert client.get("/events/outbox").json() == []
    published = client.get("/events/outbox", params={"status": "published"}).json()
    assert [event["event_type"] for event in published] == ["inventory.low_stock", "order.created"]
    assert published[1]["payload"]["type"] == "new_order"


def test_failed_event_can_be_retried(client: TestClient, db_session: Session, catalog) -> None:
    _place(client, (catalog.salad.id, 1))
    event_id = client.get("/events/outbox", params={"status": "published"}).json()[0]["id"]
    events.mark_outbox_events(db_session, [event_id], models.OutboxStatus.failed)

    res = client.post(f"/events/outbox/{event_id}/retry")
    assert res.status_code == 200
    assert res.json()["status"] == "published"
    assert res.json()["publish_attempts"] == 3


def test_only_failed_events_can_be_retried(client: TestClient, catalog) -> None:
    _place(client, (catalog.salad.id, 1))
    event_id = client.get("/events/outbox", params={"status": "published"}).json()[0]["id"]

    res = client.post(f"/events/outbox/{event_id}/retry")
    assert res.status_code == 409
    assert res.json()["error_kind"] == "OutboxEventNotRetryable"

    missing = client.post("/events/outbox/9999/retry")
    assert missing.status_code == 404
    assert missing.json()["error_kind"] == "OutboxEventNotFound"
