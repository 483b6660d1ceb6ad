from __future__ import annotations

import json
import logging
from typing import Sequence

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models
from ..errors import OutboxEventNotRetryable

logger = logging.getLogger(__name__)

ORDERS_TOPIC = "pos.orders"
INVENTORY_TOPIC = "pos.inventory"

# Outbox event type and topic per broadcast message type.
MESSAGE_ROUTES = {
    "new_order": ("order.created", ORDERS_TOPIC),
    "order_status_changed": ("order.status_changed", ORDERS_TOPIC),
    "low_stock": ("inventory.low_stock", INVENTORY_TOPIC),
}


def enqueue_event(
    db: Session,
    *,
    event_type: str,
    topic: str,
    payload: dict,
) -> models.OutboxEvent:
    event = models.OutboxEvent(
        event_type=event_type,
        topic=topic,
        payload=json.dumps(payload),
        status=models.OutboxStatus.pending,
    )
    db.add(event)
    return event


def enqueue_message(db: Session, message: BaseModel) -> models.OutboxEvent:
    """Stage a broadcast message in the current transaction."""
    event_type, topic = MESSAGE_ROUTES[message.type]
    return enqueue_event(
        db,
        event_type=event_type,
        topic=topic,
        payload=message.model_dump(mode="json"),
    )


def list_outbox_events(
    db: Session,
    *,
    status: models.OutboxStatus | None = models.OutboxStatus.pending,
    limit: int = 100,
) -> Sequence[models.OutboxEvent]:
    # Ids follow insertion order, so draining by id keeps per-order commit order.
    stmt = select(models.OutboxEvent).order_by(models.OutboxEvent.id.asc()).limit(limit)
    if status:
        stmt = stmt.where(models.OutboxEvent.status == status)
    return db.scalars(stmt).all()


def get_outbox_event(db: Session, event_id: int) -> models.OutboxEvent | None:
    return db.get(models.OutboxEvent, event_id)


def requeue_outbox_event(db: Session, event: models.OutboxEvent) -> models.OutboxEvent:
    """Put a failed event back in line for the dispatcher."""
    if event.status != models.OutboxStatus.failed:
        raise OutboxEventNotRetryable(event.id, event.status.value)
    event.status = models.OutboxStatus.pending
    db.commit()
    logger.info("Outbox event %s re-queued after %s attempts", event.id, event.publish_attempts)
    return event


def mark_outbox_events(
    db: Session, event_ids: Sequence[int], status: models.OutboxStatus
) -> None:
    if not event_ids:
        return
    stmt = select(models.OutboxEvent).where(models.OutboxEvent.id.in_(tuple(event_ids)))
    for event in db.scalars(stmt):
        event.status = status
        event.publish_attempts += 1
    db.commit()
