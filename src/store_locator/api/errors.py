"""Translate engine failures into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..errors import StoreLocatorError

logger = logging.getLogger(__name__)


async def store_locator_error_handler(request: Request, exc: StoreLocatorError) -> JSONResponse:
    if exc.client_error:
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        logger.error(f"{exc.kind} while handling {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreLocatorError, store_locator_error_handler)
