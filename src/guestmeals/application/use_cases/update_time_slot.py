from __future__ import annotations

import logging
from typing import Any

from guestmeals.application.dto.requests import UpdateTimeSlotRequest
from guestmeals.application.dto.responses import TimeSlotResponse
from guestmeals.application.mappers.slot_mapper import to_time_slot_response
from guestmeals.application.ports.repositories import TimeSlotRepository
from guestmeals.application.use_cases.errors import InvalidPayloadError, TimeSlotNotFoundError
from guestmeals.domain.common.ids import TimeSlotId
from guestmeals.domain.slot.entities import parse_wall_clock

logger = logging.getLogger(__name__)

_TIME_FIELDS = ("start_time", "end_time", "cutoff_time")
_NON_NULLABLE = ("name", "start_time", "end_time", "cutoff_time", "is_active")


class UpdateTimeSlot:
    def __init__(self, time_slot_repository: TimeSlotRepository) -> None:
        self._time_slot_repository = time_slot_repository

    def execute(self, slot_id: TimeSlotId, request_dto: UpdateTimeSlotRequest) -> TimeSlotResponse:
        changes = _config_changes(request_dto)
        try:
            persisted = self._time_slot_repository.update_config(slot_id, changes)
        except ValueError as exc:
            raise InvalidPayloadError(str(exc)) from exc
        if persisted is None:
            raise TimeSlotNotFoundError(f"time slot {slot_id} not found")

        logger.info(
            "time_slot_updated",
            extra={"time_slot_id": str(slot_id), "fields": sorted(changes)},
        )
        return to_time_slot_response(persisted)


def _config_changes(request_dto: UpdateTimeSlotRequest) -> dict[str, Any]:
    # Only fields present in the payload are merged; an explicit null maxOrders lifts the cap.
    changes = request_dto.model_dump(exclude_unset=True)
    for field_name in _NON_NULLABLE:
        if field_name in changes and changes[field_name] is None:
            raise InvalidPayloadError(f"{field_name} cannot be null")
    for field_name in _TIME_FIELDS:
        if field_name in changes:
            try:
                changes[field_name] = parse_wall_clock(changes[field_name])
            except ValueError as exc:
                raise InvalidPayloadError(str(exc)) from exc
    return changes
