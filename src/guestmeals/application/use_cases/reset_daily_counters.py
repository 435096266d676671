from __future__ import annotations

import logging

from guestmeals.application.dto.responses import ResetCountersResponse
from guestmeals.application.metrics.order_lifecycle import (
    record_counter_reset,
    record_slot_occupancy,
)
from guestmeals.application.ports.repositories import TimeSlotRepository

logger = logging.getLogger(__name__)


class ResetDailyCounters:
    def __init__(self, time_slot_repository: TimeSlotRepository) -> None:
        self._time_slot_repository = time_slot_repository

    def execute(self) -> ResetCountersResponse:
        reset = self._time_slot_repository.reset_counters()
        for slot in self._time_slot_repository.list():
            record_slot_occupancy(slot)
        record_counter_reset()
        logger.info("slot_counters_reset", extra={"slots_reset": reset})
        return ResetCountersResponse(slotsReset=reset)
