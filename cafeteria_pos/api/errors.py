from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..errors import FulfillmentError

logger = logging.getLogger(__name__)


async def fulfillment_error_handler(request: Request, exc: FulfillmentError) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.error_kind, exc.detail)
    return JSONResponse(exc.as_dict(), status_code=exc.status_code)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FulfillmentError, fulfillment_error_handler)
