from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from .. import models, schemas
from ..errors import FulfillmentError
from ..messages import (
    ErrorReply,
    JoinRoomCommand,
    OrderPlacedMessage,
    PlaceOrderCommand,
    RoomJoinedMessage,
    UpdateOrderStatusCommand,
    command_adapter,
)
from ..services import orders as order_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


def _place(session_factory: sessionmaker, command: PlaceOrderCommand) -> str:
    payload = schemas.OrderCreate(items=command.items, client_total=command.client_total)
    with session_factory() as db:
        return order_service.place_order(db, payload).order_number


def _update_status(session_factory: sessionmaker, order_number: str, new_status: models.OrderStatus) -> None:
    with session_factory() as db:
        order_service.update_order_status(db, order_number, new_status)


@router.websocket("/ws")
async def pos_socket(websocket: WebSocket) -> None:
    """Cashier, kitchen and admin screens connect here.

    Clients join a role room, submit orders and move orders through the
    kitchen. Outcomes of a client's own commands are answered on its socket;
    order and stock events are broadcast through the dispatcher.
    """
    state = websocket.app.state
    hub = state.hub
    await hub.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                command = command_adapter.validate_json(raw)
            except ValidationError as exc:
                await hub.send(
                    websocket,
                    ErrorReply(type="error", error_kind="InvalidMessage", detail=str(exc)),
                )
                continue

            if isinstance(command, JoinRoomCommand):
                hub.join(websocket, command.role)
                await hub.send(websocket, RoomJoinedMessage(role=command.role))
            elif isinstance(command, PlaceOrderCommand):
                try:
                    order_number = await run_in_threadpool(_place, state.session_factory, command)
                except FulfillmentError as exc:
                    await hub.send(websocket, ErrorReply(type="order_error", **exc.as_dict()))
                    continue
                await state.dispatcher.flush()
                await hub.send(websocket, OrderPlacedMessage(order_number=order_number))
            elif isinstance(command, UpdateOrderStatusCommand):
                try:
                    await run_in_threadpool(
                        _update_status, state.session_factory, command.order_number, command.status
                    )
                except FulfillmentError as exc:
                    await hub.send(websocket, ErrorReply(type="status_error", **exc.as_dict()))
                    continue
                await state.dispatcher.flush()
    except WebSocketDisconnect:
        logger.debug("Socket disconnected")
    finally:
        hub.disconnect(websocket)
