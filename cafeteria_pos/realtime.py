from __future__ import annotations

import asyncio
import json
import logging
from typing import Iterable

from fastapi import WebSocket
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from . import models
from .messages import Role, broadcast_adapter
from .services import events as event_service

logger = logging.getLogger(__name__)

# Rooms that receive each outbox topic; None means every connected client.
TOPIC_ROOMS: dict[str, frozenset[Role] | None] = {
    event_service.ORDERS_TOPIC: None,
    event_service.INVENTORY_TOPIC: frozenset({Role.admin}),
}


class BroadcastHub:
    """Connected POS sockets and the role rooms they joined."""

    def __init__(self) -> None:
        self._connections: dict[WebSocket, set[Role]] = {}

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections[websocket] = set()

    def join(self, websocket: WebSocket, role: Role) -> None:
        self._connections.setdefault(websocket, set()).add(role)
        logger.info("Socket joined %s room", role.value)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.pop(websocket, None)

    async def send(self, websocket: WebSocket, message: BaseModel) -> None:
        await websocket.send_json(message.model_dump(mode="json"))

    async def broadcast(self, message: BaseModel, rooms: Iterable[Role] | None = None) -> None:
        wanted = set(rooms) if rooms is not None else None
        payload = message.model_dump(mode="json")
        for websocket, roles in list(self._connections.items()):
            if wanted is not None and not roles & wanted:
                continue
            try:
                await websocket.send_json(payload)
            except Exception:
                logger.warning("Dropping socket after failed send", exc_info=True)
                self.disconnect(websocket)


class OutboxDispatcher:
    """Publishes committed outbox events to the hub in id order."""

    def __init__(self, session_factory: sessionmaker, hub: BroadcastHub, batch_size: int = 100) -> None:
        self.session_factory = session_factory
        self.hub = hub
        self.batch_size = batch_size
        self._lock = asyncio.Lock()

    async def flush(self) -> int:
        async with self._lock:
            pending = await run_in_threadpool(self._load_pending)
            published: list[int] = []
            failed: list[int] = []
            for event_id, topic, payload in pending:
                try:
                    message = broadcast_adapter.validate_python(payload)
                except ValidationError:
                    logger.exception("Outbox event %s has an invalid payload", event_id)
                    failed.append(event_id)
                    continue
                await self.hub.broadcast(message, rooms=TOPIC_ROOMS.get(topic))
                published.append(event_id)
            await run_in_threadpool(self._mark, published, failed)
            return len(published)

    def _load_pending(self) -> list[tuple[int, str, dict]]:
        with self.session_factory() as db:
            events = event_service.list_outbox_events(
                db, status=models.OutboxStatus.pending, limit=self.batch_size
            )
            return [(event.id, event.topic, json.loads(event.payload)) for event in events]

    def _mark(self, published: list[int], failed: list[int]) -> None:
        with self.session_factory() as db:
            event_service.mark_outbox_events(db, published, models.OutboxStatus.published)
            event_service.mark_outbox_events(db, failed, models.OutboxStatus.failed)
