from __future__ import annotations

import json

from .. import models, schemas


def order(order: models.Order) -> schemas.OrderOut:
    return schemas.OrderOut.model_validate(order, from_attributes=True)


def order_detail(order: models.Order) -> schemas.OrderDetailOut:
    return schemas.OrderDetailOut.model_validate(order, from_attributes=True)


def recipe_line(line: models.RecipeIngredient) -> schemas.RecipeLineOut:
    ingredient = line.inventory_item
    return schemas.RecipeLineOut(
        id=line.id,
        menu_item_id=line.menu_item_id,
        inventory_item_id=ingredient.id,
        item_name=ingredient.name,
        quantity_needed=line.quantity_needed,
        unit_needed=line.unit_needed,
        current_stock=ingredient.quantity,
        inventory_unit=ingredient.unit,
        low_stock_threshold=ingredient.low_stock_threshold,
    )


def outbox_event(event: models.OutboxEvent) -> schemas.OutboxEventOut:
    payload = json.loads(event.payload)
    return schemas.OutboxEventOut(
        id=event.id,
        event_type=event.event_type,
        topic=event.topic,
        payload=payload,
        status=event.status,
        publish_attempts=event.publish_attempts,
        created_at=event.created_at,
        updated_at=event.updated_at,
    )
