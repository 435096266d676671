from __future__ import annotations

from typing import Any


class NotFoundError(Exception):
    pass


class InvalidPayloadError(Exception):
    pass


class ConflictError(Exception):
    pass


class OrderWindowClosedError(Exception):
    def __init__(self, message: str, reason: str, time_slot_id: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.time_slot_id = time_slot_id

    @property
    def details(self) -> dict[str, Any]:
        return {"reason": self.reason, "timeSlotId": self.time_slot_id}


class TimeSlotNotFoundError(NotFoundError):
    pass


class OrderNotFoundError(NotFoundError):
    pass


class SubscriptionNotFoundError(NotFoundError):
    pass


class DailyBillNotFoundError(NotFoundError):
    pass


class InvalidTimeSlotError(InvalidPayloadError):
    pass


class InvalidOrderTransitionError(ConflictError):
    pass


class OrderConflictError(ConflictError):
    pass
