from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from .. import models, schemas
from ..errors import OrderNotFound
from ..services import orders as order_service
from .dependencies import DbSession, Dispatcher
from .serializers import order as serialize_order
from .serializers import order_detail as serialize_order_detail

router = APIRouter(prefix="/orders", tags=["Orders"])


def _place(db: Session, payload: schemas.OrderCreate) -> schemas.OrderOut:
    return serialize_order(order_service.place_order(db, payload))


def _update_status(db: Session, order_number: str, new_status: models.OrderStatus) -> schemas.OrderOut:
    return serialize_order(order_service.update_order_status(db, order_number, new_status))


@router.post(
    "",
    response_model=schemas.OrderOut,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": schemas.ErrorOut}, 422: {"model": schemas.ErrorOut}},
)
async def create_order(payload: schemas.OrderCreate, db: DbSession, dispatcher: Dispatcher):
    order = await run_in_threadpool(_place, db, payload)
    await dispatcher.flush()
    return order


@router.get("", response_model=List[schemas.OrderOut])
def list_orders(
    db: DbSession,
    status_filter: Optional[models.OrderStatus] = Query(None, alias="status"),
    created_from: Optional[datetime] = Query(None),
    created_to: Optional[datetime] = Query(None),
):
    orders = order_service.list_orders(
        db, status=status_filter, created_from=created_from, created_to=created_to
    )
    return [serialize_order(order) for order in orders]


@router.get("/{order_number}", response_model=schemas.OrderDetailOut, responses={404: {"model": schemas.ErrorOut}})
def get_order(order_number: str, db: DbSession):
    order = order_service.get_order(db, order_number)
    if order is None:
        raise OrderNotFound(order_number)
    return serialize_order_detail(order)


@router.patch(
    "/{order_number}/status",
    response_model=schemas.OrderOut,
    responses={404: {"model": schemas.ErrorOut}, 409: {"model": schemas.ErrorOut}},
)
async def update_order_status(
    order_number: str, payload: schemas.OrderStatusUpdate, db: DbSession, dispatcher: Dispatcher
):
    order = await run_in_threadpool(_update_status, db, order_number, payload.status)
    await dispatcher.flush()
    return order
