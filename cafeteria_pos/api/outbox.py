from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from .. import models, schemas
from ..errors import OutboxEventNotFound
from ..services import events as event_service
from .dependencies import DbSession, Dispatcher
from .serializers import outbox_event as serialize_event

router = APIRouter(prefix="/events/outbox", tags=["Outbox"])


def _requeue(db: Session, event_id: int) -> None:
    event = event_service.get_outbox_event(db, event_id)
    if event is None:
        raise OutboxEventNotFound(event_id)
    event_service.requeue_outbox_event(db, event)


def _reload(db: Session, event_id: int) -> schemas.OutboxEventOut:
    db.expire_all()
    return serialize_event(event_service.get_outbox_event(db, event_id))


@router.get("", response_model=List[schemas.OutboxEventOut])
def list_outbox_events(
    db: DbSession,
    status_filter: Optional[models.OutboxStatus] = Query(
        models.OutboxStatus.pending, alias="status", description="Filter events by status."
    ),
    limit: int = Query(100, ge=1, le=500),
):
    events = event_service.list_outbox_events(db, status=status_filter, limit=limit)
    return [serialize_event(event) for event in events]


@router.post(
    "/{event_id}/retry",
    response_model=schemas.OutboxEventOut,
    responses={404: {"model": schemas.ErrorOut}, 409: {"model": schemas.ErrorOut}},
)
async def retry_outbox_event(event_id: int, db: DbSession, dispatcher: Dispatcher):
    """Re-queue a failed event and publish it straight away."""
    await run_in_threadpool(_requeue, db, event_id)
    await dispatcher.flush()
    return await run_in_threadpool(_reload, db, event_id)
