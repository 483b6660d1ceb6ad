from __future__ import annotations

from fastapi import FastAPI

from . import inventory, menu, orders, outbox, ws


def register_routers(app: FastAPI) -> None:
    app.include_router(menu.router)
    app.include_router(inventory.router)
    app.include_router(orders.router)
    app.include_router(outbox.router)
    app.include_router(ws.router)
