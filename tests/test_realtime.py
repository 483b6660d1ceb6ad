from __future__ import annotations

from decimal import Decimal

from fastapi.testclient import TestClient


def _join(ws, role: str) -> None:
    ws.send_json({"type": "join_room", "role": role})
    assert ws.receive_json() == {"type": "room_joined", "role": role}


def _place_order(ws, menu_item_id: int, quantity: int) -> None:
    ws.send_json(
        {"type": "place_order", "items": [{"menu_item_id": menu_item_id, "quantity": quantity}]}
    )


def test_new_order_reaches_every_screen_and_low_stock_only_admins(client: TestClient, catalog) -> None:
    with client.websocket_connect("/ws") as kitchen, client.websocket_connect(
        "/ws"
    ) as admin, client.websocket_connect("/ws") as cashier:
        _join(kitchen, "kitchen")
        _join(admin, "admin")

        _place_order(cashier, catalog.burger.id, 3)

        broadcast = cashier.receive_json()
        assert broadcast["type"] == "new_order"
        placed = cashier.receive_json()
        assert placed == {"type": "order_placed", "order_number": broadcast["order"]["order_number"]}

        low_stock = admin.receive_json()
        assert low_stock["type"] == "low_stock"
        assert low_stock["item_name"] == "Bun"
        assert Decimal(low_stock["quantity"]) == Decimal("4")
        assert admin.receive_json()["type"] == "new_order"

        # The next thing the kitchen sees is the order, not the stock warning.
        kitchen_order = kitchen.receive_json()
        assert kitchen_order["type"] == "new_order"
        assert kitchen_order["order"]["items"][0]["quantity"] == 3


def test_status_changes_are_broadcast(client: TestClient, catalog) -> None:
    with client.websocket_connect("/ws") as kitchen, client.websocket_connect("/ws") as cashier:
        _join(kitchen, "kitchen")
        _place_order(cashier, catalog.salad.id, 1)
        order_number = cashier.receive_json()["order"]["order_number"]
        cashier.receive_json()
        kitchen.receive_json()

        kitchen.send_json(
            {"type": "update_order_status", "order_number": order_number, "status": "preparing"}
        )

        expected = {
            "type": "order_status_changed",
            "order_number": order_number,
            "status": "preparing",
            "previous_status": "pending",
        }
        assert kitchen.receive_json() == expected
        assert cashier.receive_json() == expected


def test_rejected_order_is_answered_only_to_submitter(client: TestClient, catalog) -> None:
    with client.websocket_connect("/ws") as cashier:
        _place_order(cashier, catalog.burger.id, 6)

        reply = cashier.receive_json()
        assert reply == {
            "type": "order_error",
            "error_kind": "InsufficientStock",
            "detail": "Insufficient stock for Bun",
        }

    assert client.get("/orders").json() == []
    assert client.get("/events/outbox").json() == []


def test_status_error_for_unknown_order(client: TestClient, catalog) -> None:
    with client.websocket_connect("/ws") as kitchen:
        kitchen.send_json({"type": "update_order_status", "order_number": "ORD-x", "status": "preparing"})

        reply = kitchen.receive_json()
        assert reply["type"] == "status_error"
        assert reply["error_kind"] == "OrderNotFound"


def test_malformed_messages_keep_the_socket_open(client: TestClient, catalog) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.send_text("not json")
        assert ws.receive_json()["error_kind"] == "InvalidMessage"

        ws.send_json({"type": "place_order", "items": []})
        reply = ws.receive_json()
        assert reply["type"] == "error"
        assert reply["error_kind"] == "InvalidMessage"

        _join(ws, "cashier")
