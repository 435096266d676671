from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from guestmeals.api.dependencies import Container, get_container
from guestmeals.application.dto.requests import UpdateTimeSlotRequest
from guestmeals.application.dto.responses import (
    OrderRestrictionResponse,
    ResetCountersResponse,
    TimeSlotResponse,
)
from guestmeals.application.use_cases.check_availability import CheckOrderAvailability
from guestmeals.application.use_cases.list_time_slots import ListTimeSlots
from guestmeals.application.use_cases.reset_daily_counters import ResetDailyCounters
from guestmeals.application.use_cases.update_time_slot import UpdateTimeSlot
from guestmeals.domain.common.ids import TimeSlotId

router = APIRouter()


@router.get("/v1/time-slots", response_model=list[TimeSlotResponse])
def list_time_slots(container: Container = Depends(get_container)) -> list[TimeSlotResponse]:
    return ListTimeSlots(time_slot_repository=container.time_slot_repository).execute()


@router.patch("/v1/time-slots/{slot_id}", response_model=TimeSlotResponse)
def update_time_slot(
    slot_id: str,
    request_dto: UpdateTimeSlotRequest,
    container: Container = Depends(get_container),
) -> TimeSlotResponse:
    use_case = UpdateTimeSlot(time_slot_repository=container.time_slot_repository)
    return use_case.execute(slot_id=TimeSlotId(slot_id), request_dto=request_dto)


@router.post("/v1/time-slots/reset-counters", response_model=ResetCountersResponse)
def reset_counters(container: Container = Depends(get_container)) -> ResetCountersResponse:
    return ResetDailyCounters(time_slot_repository=container.time_slot_repository).execute()


@router.get("/v1/availability", response_model=OrderRestrictionResponse)
def check_availability(
    slot: str | None = Query(default=None),
    container: Container = Depends(get_container),
) -> OrderRestrictionResponse:
    use_case = CheckOrderAvailability(
        time_slot_repository=container.time_slot_repository,
        clock=container.clock,
    )
    return use_case.execute(slot_id=TimeSlotId(slot) if slot else None)
