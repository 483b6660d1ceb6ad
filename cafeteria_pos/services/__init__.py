"""Fulfillment services: recipe resolution, the inventory ledger and order coordination."""

from . import events, ledger, menu, orders, recipes

__all__ = [
    "events",
    "ledger",
    "menu",
    "orders",
    "recipes",
]
