from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..realtime import OutboxDispatcher

DbSession = Annotated[Session, Depends(get_db)]


def get_dispatcher(request: Request) -> OutboxDispatcher:
    return request.app.state.dispatcher


Dispatcher = Annotated[OutboxDispatcher, Depends(get_dispatcher)]
