from __future__ import annotations

import os
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from guestmeals.application.ports.repositories import StorageUnavailableError

_DEFAULT_TIMEOUT_SECONDS = 5.0


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


def database_timeout_seconds() -> float:
    raw = os.getenv("DATABASE_TIMEOUT_SECONDS")
    if not raw:
        return _DEFAULT_TIMEOUT_SECONDS
    return max(float(raw), 1.0)


def _engine_options(database_url: str, connect_timeout: int) -> dict[str, Any]:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"timeout": connect_timeout, "check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_timeout": connect_timeout,
        "connect_args": {"connect_timeout": connect_timeout},
    }


@lru_cache(maxsize=8)
def _build_engine(database_url: str, connect_timeout: int) -> Engine:
    return create_engine(database_url, **_engine_options(database_url, connect_timeout))


def get_engine(timeout_seconds: float | None = None) -> Engine:
    seconds = timeout_seconds if timeout_seconds is not None else database_timeout_seconds()
    return _build_engine(_database_url(), max(1, int(seconds)))


@contextmanager
def open_session(engine: Engine) -> Iterator[Session]:
    """Session scope whose driver timeouts and lost connections surface as StorageUnavailableError."""
    try:
        with Session(engine) as session:
            yield session
    except (OperationalError, PoolTimeoutError) as exc:
        raise StorageUnavailableError("database unavailable") from exc


def ping_database(timeout_seconds: float = 1.0) -> bool:
    try:
        with get_engine(timeout_seconds).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
