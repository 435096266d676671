from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from guestmeals.api.middleware.request_id import get_request_id
from guestmeals.application.ports.repositories import StorageUnavailableError
from guestmeals.application.use_cases.errors import (
    ConflictError,
    DailyBillNotFoundError,
    InvalidOrderTransitionError,
    InvalidPayloadError,
    InvalidTimeSlotError,
    NotFoundError,
    OrderConflictError,
    OrderNotFoundError,
    OrderWindowClosedError,
    SubscriptionNotFoundError,
    TimeSlotNotFoundError,
)
from guestmeals.application.use_cases.kitchen_queue import InvalidKitchenQueueStatusError
from guestmeals.application.use_cases.subscriptions import InvalidSubscriptionTransitionError

logger = logging.getLogger(__name__)


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
        headers=headers,
    )


def _exception_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        if status_code >= 500:
            logger.warning("request_failed", extra={"error_code": code}, exc_info=exc)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
            headers={"Retry-After": "1"} if status_code == 503 else None,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    elif http_exc.status_code == 405:
        code = "METHOD_NOT_ALLOWED"
    elif http_exc.status_code == 409:
        code = "CONFLICT"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": jsonable_encoder(validation_exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    # Handlers resolve along the exception MRO, so the specific codes win over the kind fallbacks.
    mappings: list[tuple[type[Exception], int, str]] = [
        (TimeSlotNotFoundError, 404, "TIME_SLOT_NOT_FOUND"),
        (OrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (SubscriptionNotFoundError, 404, "SUBSCRIPTION_NOT_FOUND"),
        (DailyBillNotFoundError, 404, "DAILY_BILL_NOT_FOUND"),
        (NotFoundError, 404, "NOT_FOUND"),
        (OrderWindowClosedError, 409, "ORDER_WINDOW_CLOSED"),
        (InvalidTimeSlotError, 400, "INVALID_TIME_SLOT"),
        (InvalidKitchenQueueStatusError, 400, "INVALID_KITCHEN_QUEUE_STATUS"),
        (InvalidPayloadError, 400, "INVALID_PAYLOAD"),
        (InvalidOrderTransitionError, 409, "INVALID_ORDER_TRANSITION"),
        (InvalidSubscriptionTransitionError, 409, "INVALID_SUBSCRIPTION_TRANSITION"),
        (OrderConflictError, 409, "CONFLICT"),
        (ConflictError, 409, "CONFLICT"),
        (StorageUnavailableError, 503, "STORAGE_UNAVAILABLE"),
    ]

    for exc_cls, status_code, code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
