"""Decides whether a new order may be accepted right now.

Everything here is a pure function of the slot configuration, the live
counters and the supplied instant; refusal is an ordinary return value.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Sequence

from guestmeals.domain.slot.entities import TimeSlot, format_wall_clock, wall_clock_of


class RestrictionReason(str, Enum):
    OPEN = "open"
    INACTIVE = "inactive"
    CUTOFF_PASSED = "cutoff_passed"
    FULLY_BOOKED = "fully_booked"
    ALL_CLOSED = "all_closed"


@dataclass(frozen=True)
class OrderRestriction:
    can_order: bool
    message: str
    reason: RestrictionReason
    next_slot: TimeSlot | None = None
    time_remaining: str | None = None


def evaluate_slot(slot: TimeSlot, now: datetime) -> OrderRestriction:
    moment = wall_clock_of(now)
    cutoff = format_wall_clock(slot.cutoff_time)

    if not slot.is_active:
        return OrderRestriction(
            can_order=False,
            message=f"{slot.slot_id} is not available today.",
            reason=RestrictionReason.INACTIVE,
        )

    # Cutoff wins over capacity: a closed window is reported as closed even when full.
    if not slot.is_before_cutoff(moment):
        return OrderRestriction(
            can_order=False,
            message=f"Order cutoff time ({cutoff}) has passed for {slot.name}.",
            reason=RestrictionReason.CUTOFF_PASSED,
        )

    if slot.is_full():
        return fully_booked(slot)

    return OrderRestriction(
        can_order=True,
        message=f"Orders open for {slot.name} until {cutoff}",
        reason=RestrictionReason.OPEN,
        next_slot=slot,
        time_remaining=time_remaining(slot, now),
    )


def fully_booked(slot: TimeSlot) -> OrderRestriction:
    return OrderRestriction(
        can_order=False,
        message=f"{slot.name} is fully booked. Maximum {slot.max_orders} orders reached.",
        reason=RestrictionReason.FULLY_BOOKED,
    )


def evaluate_any(slots: Sequence[TimeSlot], now: datetime) -> OrderRestriction:
    moment = wall_clock_of(now)
    candidates = [slot for slot in slots if slot.accepts_orders_at(moment)]

    if not candidates:
        return OrderRestriction(
            can_order=False,
            message="All meal slots are closed for today.",
            reason=RestrictionReason.ALL_CLOSED,
            next_slot=_first_slot_tomorrow(slots),
        )

    # min() keeps the first of equal keys, so ties fall back to registry order.
    chosen = min(candidates, key=lambda slot: slot.cutoff_time)
    return OrderRestriction(
        can_order=True,
        message=f"Orders open for {chosen.name}",
        reason=RestrictionReason.OPEN,
        next_slot=chosen,
        time_remaining=time_remaining(chosen, now),
    )


def time_remaining(slot: TimeSlot, now: datetime) -> str:
    cutoff = datetime.combine(now.date(), slot.cutoff_time, tzinfo=now.tzinfo)
    if cutoff < now:
        cutoff += timedelta(days=1)

    total_minutes = int((cutoff - now).total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m"


def _first_slot_tomorrow(slots: Sequence[TimeSlot]) -> TimeSlot | None:
    active = [slot for slot in slots if slot.is_active]
    if active:
        return min(active, key=lambda slot: slot.cutoff_time)
    return slots[0] if slots else None
