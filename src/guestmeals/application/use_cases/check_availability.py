from __future__ import annotations

from guestmeals.application.dto.responses import OrderRestrictionResponse
from guestmeals.application.mappers.slot_mapper import to_restriction_response
from guestmeals.application.ports.clock import Clock
from guestmeals.application.ports.repositories import TimeSlotRepository
from guestmeals.application.use_cases.errors import TimeSlotNotFoundError
from guestmeals.domain.common.ids import TimeSlotId
from guestmeals.domain.slot.availability import evaluate_any, evaluate_slot


class CheckOrderAvailability:
    def __init__(self, time_slot_repository: TimeSlotRepository, clock: Clock) -> None:
        self._time_slot_repository = time_slot_repository
        self._clock = clock

    def execute(self, slot_id: TimeSlotId | None = None) -> OrderRestrictionResponse:
        now = self._clock.now()
        if slot_id is None:
            return to_restriction_response(evaluate_any(self._time_slot_repository.list(), now))

        slot = self._time_slot_repository.get(slot_id)
        if slot is None:
            raise TimeSlotNotFoundError(f"time slot {slot_id} not found")
        return to_restriction_response(evaluate_slot(slot, now))
