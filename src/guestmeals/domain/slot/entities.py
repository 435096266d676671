from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any

from guestmeals.domain.common.ids import TimeSlotId

PREPARATION_LEAD = timedelta(minutes=30)
DELIVERY_OFFSET = timedelta(minutes=10)

_CONFIG_FIELDS = frozenset(
    {"name", "start_time", "end_time", "cutoff_time", "is_active", "max_orders"}
)


def parse_wall_clock(value: str) -> time:
    """Parse ``HH:MM`` into a minute-precision wall-clock time."""
    try:
        hours_raw, minutes_raw = value.split(":")
        hours, minutes = int(hours_raw), int(minutes_raw)
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"invalid wall-clock time {value!r}, expected HH:MM") from exc
    if len(hours_raw) != 2 or len(minutes_raw) != 2:
        raise ValueError(f"invalid wall-clock time {value!r}, expected HH:MM")
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"wall-clock time out of range: {value!r}")
    return time(hour=hours, minute=minutes)


def format_wall_clock(value: time) -> str:
    return value.strftime("%H:%M")


def wall_clock_of(now: datetime) -> time:
    return now.time().replace(second=0, microsecond=0)


@dataclass(frozen=True)
class TimeSlot:
    slot_id: TimeSlotId
    name: str
    start_time: time
    end_time: time
    cutoff_time: time
    is_active: bool = True
    max_orders: int | None = None
    current_orders: int = 0

    def __post_init__(self) -> None:
        if not self.slot_id.strip():
            raise ValueError("slot_id must be non-empty")
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.cutoff_time >= self.start_time:
            raise ValueError("cutoff_time must be before start_time")
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        if self.max_orders is not None and self.max_orders < 1:
            raise ValueError("max_orders must be >= 1 when set")
        if self.current_orders < 0:
            raise ValueError("current_orders must be >= 0")
        if self.max_orders is not None and self.current_orders > self.max_orders:
            raise ValueError(
                f"current_orders ({self.current_orders}) exceeds max_orders ({self.max_orders})"
            )

    @property
    def is_capped(self) -> bool:
        return self.max_orders is not None

    def is_full(self) -> bool:
        return self.max_orders is not None and self.current_orders >= self.max_orders

    def is_before_cutoff(self, moment: time) -> bool:
        return moment < self.cutoff_time

    def accepts_orders_at(self, moment: time) -> bool:
        return self.is_active and self.is_before_cutoff(moment) and not self.is_full()

    def reserve(self) -> TimeSlot:
        if not self.is_active:
            raise SlotInactiveError(f"time slot {self.slot_id} is not active")
        if self.is_full():
            raise SlotFullError(f"time slot {self.slot_id} is fully booked")
        return replace(self, current_orders=self.current_orders + 1)

    def release(self) -> TimeSlot:
        return replace(self, current_orders=max(self.current_orders - 1, 0))

    def reset(self) -> TimeSlot:
        if self.current_orders == 0:
            return self
        return replace(self, current_orders=0)

    def with_config(self, changes: dict[str, Any]) -> TimeSlot:
        unknown = set(changes) - _CONFIG_FIELDS
        if unknown:
            raise ValueError(f"unknown time slot fields: {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def starts_at(self, service_date: date, tz: tzinfo | None) -> datetime:
        return datetime.combine(service_date, self.start_time, tzinfo=tz)

    def preparation_deadline(self, service_date: date, tz: tzinfo | None) -> datetime:
        return self.starts_at(service_date, tz) - PREPARATION_LEAD

    def estimated_delivery(self, service_date: date, tz: tzinfo | None) -> datetime:
        return self.starts_at(service_date, tz) + DELIVERY_OFFSET


class SlotUnavailableError(Exception):
    """The slot cannot take another reservation."""


class SlotFullError(SlotUnavailableError):
    pass


class SlotInactiveError(SlotUnavailableError):
    pass


def default_time_slots() -> list[TimeSlot]:
    return [
        TimeSlot(
            slot_id=TimeSlotId("breakfast"),
            name="Breakfast",
            start_time=time(7, 0),
            end_time=time(10, 0),
            cutoff_time=time(5, 0),
            max_orders=50,
        ),
        TimeSlot(
            slot_id=TimeSlotId("lunch"),
            name="Lunch",
            start_time=time(12, 0),
            end_time=time(15, 0),
            cutoff_time=time(10, 0),
            max_orders=100,
        ),
        TimeSlot(
            slot_id=TimeSlotId("evening-snacks"),
            name="Evening Snacks",
            start_time=time(16, 0),
            end_time=time(18, 0),
            cutoff_time=time(14, 0),
            max_orders=30,
        ),
        TimeSlot(
            slot_id=TimeSlotId("dinner"),
            name="Dinner",
            start_time=time(19, 0),
            end_time=time(22, 0),
            cutoff_time=time(17, 0),
            max_orders=80,
        ),
    ]
