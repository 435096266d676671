from __future__ import annotations

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from guestmeals.api.daily_reset import daily_reset_enabled, run_daily_reset
from guestmeals.api.dependencies import Container, build_container
from guestmeals.api.error_handling import register_exception_handlers
from guestmeals.api.middleware.request_id import RequestIDMiddleware
from guestmeals.api.routes.billing import router as billing_router
from guestmeals.api.routes.delivery import router as delivery_router
from guestmeals.api.routes.health import router as health_router
from guestmeals.api.routes.kitchen import router as kitchen_router
from guestmeals.api.routes.metrics import router as metrics_router
from guestmeals.api.routes.orders import router as orders_router
from guestmeals.api.routes.subscriptions import router as subscriptions_router
from guestmeals.api.routes.time_slots import router as time_slots_router
from guestmeals.infrastructure.observability.logging_config import configure_logging
from guestmeals.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("guestmeals.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()

    # Dev/test: unblock everything (no credentials allowed)
    if env in {"dev", "test"}:
        return ["*"]

    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_path(request: Request) -> str:
    # Label metrics by route template so ids in the URL do not explode cardinality.
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            path = _route_path(request)
            REQUEST_COUNT.labels(method=method, path=path, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": request.url.path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        path = _route_path(request)
        REQUEST_COUNT.labels(method=method, path=path, status_code=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "container", None) is None:
        app.state.container = build_container()

    reset_task: asyncio.Task | None = None
    if daily_reset_enabled():
        reset_task = asyncio.create_task(run_daily_reset(app.state.container))
    app.state.daily_reset_task = reset_task
    try:
        yield
    finally:
        if reset_task is not None:
            reset_task.cancel()
            with suppress(asyncio.CancelledError):
                await reset_task


def create_app(container: Container | None = None) -> FastAPI:
    configure_logging()

    app = FastAPI(title="Guest Meals", version="0.1.0", lifespan=lifespan)
    app.state.container = container
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(time_slots_router)
    app.include_router(orders_router)
    app.include_router(kitchen_router)
    app.include_router(delivery_router)
    app.include_router(subscriptions_router)
    app.include_router(billing_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )

    configure_otel(app)
    return app


app = create_app()
