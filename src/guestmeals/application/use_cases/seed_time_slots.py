from __future__ import annotations

import logging

from guestmeals.application.ports.repositories import TimeSlotRepository
from guestmeals.domain.slot.entities import default_time_slots

logger = logging.getLogger(__name__)


class SeedTimeSlots:
    """Installs the standard meal windows into an empty registry."""

    def __init__(self, time_slot_repository: TimeSlotRepository) -> None:
        self._time_slot_repository = time_slot_repository

    def execute(self) -> int:
        if self._time_slot_repository.list():
            return 0
        slots = default_time_slots()
        for slot in slots:
            self._time_slot_repository.add(slot)
        logger.info("time_slots_seeded", extra={"slots_seeded": len(slots)})
        return len(slots)
