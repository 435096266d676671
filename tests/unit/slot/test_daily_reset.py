from __future__ import annotations

import asyncio
import sys
from datetime import datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

import guestmeals.api.daily_reset as daily_reset
from guestmeals.api.dependencies import build_memory_container
from guestmeals.application.use_cases.reset_daily_counters import ResetDailyCounters
from guestmeals.domain.common.ids import TimeSlotId
from guestmeals.domain.slot.entities import TimeSlot
from guestmeals.infrastructure.memory.repositories import InMemoryTimeSlotRepository

IST = ZoneInfo("Asia/Kolkata")


class FixedClock:
    def now(self) -> datetime:
        return datetime(2024, 6, 1, 23, 59, 30, tzinfo=IST)


class _Stop(Exception):
    pass


def _slot(slot_id: str, current_orders: int) -> TimeSlot:
    return TimeSlot(
        slot_id=TimeSlotId(slot_id),
        name=slot_id.title(),
        start_time=time(12, 0),
        end_time=time(15, 0),
        cutoff_time=time(10, 0),
        max_orders=10,
        current_orders=current_orders,
    )


def test_seconds_until_midnight_uses_local_zone() -> None:
    assert daily_reset.seconds_until_midnight(datetime(2024, 6, 1, 23, 59, 30, tzinfo=IST)) == 30
    assert daily_reset.seconds_until_midnight(datetime(2024, 6, 1, 0, 0, tzinfo=IST)) == 86400


@pytest.mark.parametrize("value", ["0", "false", "No", " off "])
def test_daily_reset_can_be_disabled(monkeypatch, value: str) -> None:
    monkeypatch.setenv("DAILY_RESET_ENABLED", value)
    assert daily_reset.daily_reset_enabled() is False


def test_daily_reset_is_enabled_by_default(monkeypatch) -> None:
    monkeypatch.delenv("DAILY_RESET_ENABLED", raising=False)
    assert daily_reset.daily_reset_enabled() is True


def test_reset_zeroes_every_counter_and_keeps_config() -> None:
    repository = InMemoryTimeSlotRepository([_slot("lunch", 7), _slot("dinner", 10)])

    response = ResetDailyCounters(time_slot_repository=repository).execute()

    assert response.slotsReset == 2
    slots = repository.list()
    assert [slot.current_orders for slot in slots] == [0, 0]
    assert [slot.max_orders for slot in slots] == [10, 10]


def test_reset_loop_fires_at_midnight(monkeypatch) -> None:
    container = build_memory_container(clock=FixedClock())
    container.time_slot_repository.add(_slot("lunch", 4))
    sleeps: list[float] = []

    async def _fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)
        if len(sleeps) == 3:
            raise _Stop()

    monkeypatch.setattr(daily_reset.asyncio, "sleep", _fake_sleep)

    with pytest.raises(_Stop):
        asyncio.run(daily_reset.run_daily_reset(container))

    assert sleeps == [30, 1.0, 30]
    slot = container.time_slot_repository.get(TimeSlotId("lunch"))
    assert slot is not None
    assert slot.current_orders == 0
