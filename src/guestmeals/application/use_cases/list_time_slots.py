from __future__ import annotations

from guestmeals.application.dto.responses import TimeSlotResponse
from guestmeals.application.mappers.slot_mapper import to_time_slot_response
from guestmeals.application.ports.repositories import TimeSlotRepository


class ListTimeSlots:
    def __init__(self, time_slot_repository: TimeSlotRepository) -> None:
        self._time_slot_repository = time_slot_repository

    def execute(self) -> list[TimeSlotResponse]:
        return [to_time_slot_response(slot) for slot in self._time_slot_repository.list()]
