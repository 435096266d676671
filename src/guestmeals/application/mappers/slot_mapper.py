from __future__ import annotations

from guestmeals.application.dto.responses import OrderRestrictionResponse, TimeSlotResponse
from guestmeals.domain.slot.availability import OrderRestriction
from guestmeals.domain.slot.entities import TimeSlot, format_wall_clock


def to_time_slot_response(slot: TimeSlot) -> TimeSlotResponse:
    return TimeSlotResponse(
        id=str(slot.slot_id),
        name=slot.name,
        startTime=format_wall_clock(slot.start_time),
        endTime=format_wall_clock(slot.end_time),
        cutoffTime=format_wall_clock(slot.cutoff_time),
        isActive=slot.is_active,
        maxOrders=slot.max_orders,
        currentOrders=slot.current_orders,
    )


def to_restriction_response(restriction: OrderRestriction) -> OrderRestrictionResponse:
    return OrderRestrictionResponse(
        canOrder=restriction.can_order,
        message=restriction.message,
        reason=restriction.reason.value,
        nextSlot=(
            to_time_slot_response(restriction.next_slot)
            if restriction.next_slot is not None
            else None
        ),
        timeRemaining=restriction.time_remaining,
    )
