from __future__ import annotations

import sys
from datetime import date, time
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from guestmeals.domain.common.ids import TimeSlotId
from guestmeals.domain.slot.entities import (
    SlotFullError,
    SlotInactiveError,
    TimeSlot,
    default_time_slots,
    format_wall_clock,
    parse_wall_clock,
)

IST = ZoneInfo("Asia/Kolkata")


def _lunch(max_orders: int | None = 2, current_orders: int = 0) -> TimeSlot:
    return TimeSlot(
        slot_id=TimeSlotId("lunch"),
        name="Lunch",
        start_time=time(12, 0),
        end_time=time(15, 0),
        cutoff_time=time(10, 0),
        max_orders=max_orders,
        current_orders=current_orders,
    )


def test_parse_wall_clock_round_trips_minutes() -> None:
    assert parse_wall_clock("07:05") == time(7, 5)
    assert format_wall_clock(time(17, 0)) == "17:00"


@pytest.mark.parametrize("raw", ["7:00", "24:00", "12:60", "noon", "12-00", ""])
def test_parse_wall_clock_rejects_malformed_values(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_wall_clock(raw)


def test_cutoff_must_precede_start() -> None:
    with pytest.raises(ValueError):
        TimeSlot(
            slot_id=TimeSlotId("lunch"),
            name="Lunch",
            start_time=time(12, 0),
            end_time=time(15, 0),
            cutoff_time=time(12, 0),
        )


def test_start_must_precede_end() -> None:
    with pytest.raises(ValueError):
        TimeSlot(
            slot_id=TimeSlotId("dinner"),
            name="Dinner",
            start_time=time(22, 0),
            end_time=time(19, 0),
            cutoff_time=time(17, 0),
        )


def test_counter_cannot_exceed_cap() -> None:
    with pytest.raises(ValueError):
        _lunch(max_orders=2, current_orders=3)


def test_reserve_increments_until_full() -> None:
    slot = _lunch(max_orders=2).reserve().reserve()

    assert slot.current_orders == 2
    assert slot.is_full()
    with pytest.raises(SlotFullError):
        slot.reserve()


def test_inactive_slot_cannot_be_reserved() -> None:
    slot = _lunch().with_config({"is_active": False})

    with pytest.raises(SlotInactiveError):
        slot.reserve()


def test_uncapped_slot_is_never_full() -> None:
    slot = _lunch(max_orders=None)
    for _ in range(500):
        slot = slot.reserve()

    assert not slot.is_capped
    assert not slot.is_full()


def test_release_and_reset_never_go_negative() -> None:
    slot = _lunch().release()
    assert slot.current_orders == 0

    slot = _lunch(current_orders=2).reset()
    assert slot.current_orders == 0


def test_with_config_rejects_unknown_fields() -> None:
    with pytest.raises(ValueError):
        _lunch().with_config({"current_orders": 0})


def test_with_config_removing_cap_keeps_counter() -> None:
    slot = _lunch(current_orders=2).with_config({"max_orders": None})

    assert slot.max_orders is None
    assert slot.current_orders == 2


def test_preparation_deadline_and_delivery_estimate() -> None:
    slot = _lunch()
    service_date = date(2024, 6, 1)

    assert slot.preparation_deadline(service_date, IST).time() == time(11, 30)
    assert slot.estimated_delivery(service_date, IST).time() == time(12, 10)
    assert slot.preparation_deadline(service_date, IST).tzinfo == IST


def test_default_slots_match_guest_house_schedule() -> None:
    slots = default_time_slots()

    assert [str(slot.slot_id) for slot in slots] == [
        "breakfast",
        "lunch",
        "evening-snacks",
        "dinner",
    ]
    assert [slot.max_orders for slot in slots] == [50, 100, 30, 80]
    assert all(slot.current_orders == 0 and slot.is_active for slot in slots)
