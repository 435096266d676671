from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Iterator

import pytest
from sqlalchemy import delete
from sqlalchemy.engine import Engine

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from guestmeals.application.use_cases.seed_time_slots import SeedTimeSlots
from guestmeals.infrastructure.db import session as db_session
from guestmeals.infrastructure.db.models.billing import DailyBillModel
from guestmeals.infrastructure.db.models.order import OrderLineModel, OrderModel
from guestmeals.infrastructure.db.models.subscription import SubscriptionModel
from guestmeals.infrastructure.db.models.time_slot import TimeSlotModel
from guestmeals.infrastructure.db.repositories.time_slot_repo import SqlAlchemyTimeSlotRepository

PROJECT_DIR = Path(__file__).resolve().parents[2]


@pytest.fixture(scope="session", autouse=True)
def integration_environment(tmp_path_factory: pytest.TempPathFactory) -> Iterator[None]:
    database_path = tmp_path_factory.mktemp("db") / "guestmeals.sqlite3"
    previous = {key: os.environ.get(key) for key in ("DATABASE_URL", "REDIS_URL", "SITE_TIMEZONE")}

    os.environ["DATABASE_URL"] = f"sqlite:///{database_path}"
    os.environ["SITE_TIMEZONE"] = "Asia/Kolkata"
    os.environ.pop("REDIS_URL", None)
    os.environ.setdefault("OTEL_SERVICE_NAME", "guestmeals-test")
    os.environ.setdefault("OTEL_EXPORTER_OTLP_ENDPOINT", "")
    os.environ["DAILY_RESET_ENABLED"] = "false"

    db_session._build_engine.cache_clear()

    env = os.environ.copy()
    env["PYTHONPATH"] = f"{PROJECT_DIR / 'src'}{os.pathsep}{env.get('PYTHONPATH', '')}".rstrip(
        os.pathsep
    )
    subprocess.run(
        [sys.executable, "-m", "alembic", "-c", "alembic.ini", "upgrade", "head"],
        cwd=PROJECT_DIR,
        env=env,
        check=True,
    )
    subprocess.run(
        [sys.executable, "-m", "guestmeals.tools.seed"],
        cwd=PROJECT_DIR,
        env=env,
        check=True,
    )
    yield

    db_session._build_engine.cache_clear()
    for key, value in previous.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


@pytest.fixture
def engine() -> Iterator[Engine]:
    sql_engine = db_session.get_engine()
    with sql_engine.begin() as connection:
        for model in (OrderLineModel, OrderModel, DailyBillModel, SubscriptionModel, TimeSlotModel):
            connection.execute(delete(model))
    SeedTimeSlots(SqlAlchemyTimeSlotRepository(sql_engine)).execute()
    yield sql_engine
