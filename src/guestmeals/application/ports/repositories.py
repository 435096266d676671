from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Protocol

from guestmeals.domain.billing.entities import DailyBillHeader
from guestmeals.domain.common.ids import CustomerId, OrderId, SubscriptionId, TimeSlotId
from guestmeals.domain.order.entities import Order, OrderStatus
from guestmeals.domain.slot.entities import TimeSlot
from guestmeals.domain.subscription.entities import Subscription


class TimeSlotRepository(Protocol):
    def list(self) -> list[TimeSlot]: ...

    def get(self, slot_id: TimeSlotId) -> TimeSlot | None: ...

    def add(self, slot: TimeSlot) -> None: ...

    def update_config(self, slot_id: TimeSlotId, changes: dict[str, Any]) -> TimeSlot | None:
        """Apply config changes to the stored slot under its lock.

        Returns None for an unknown slot; raises ValueError when the merged slot is invalid.
        """
        ...

    def try_reserve(self, slot_id: TimeSlotId) -> TimeSlot | None:
        """Increment the slot counter unless it is inactive or at capacity, as one atomic step.

        Returns the updated slot, or None when the slot cannot take the order.
        """
        ...

    def release(self, slot_id: TimeSlotId) -> None: ...

    def reset_counters(self) -> int: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> None: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def get_by_qr_code(self, qr_code: str) -> Order | None: ...

    def list_for_customer(self, customer_id: CustomerId) -> list[Order]: ...

    def list_by_status(self, statuses: frozenset[OrderStatus]) -> list[Order]: ...

    def list_for_service(self, service_date: date, time_slot_id: TimeSlotId) -> list[Order]: ...

    def summarize(self) -> OrderTotalsData: ...

    def update_status_with_version(
        self,
        order: Order,
        expected_version: int,
    ) -> Order: ...


class DailyBillRepository(Protocol):
    def get_or_create(
        self,
        bill_date: date,
        time_slot_id: TimeSlotId,
        preparation_deadline: datetime,
        now: datetime,
    ) -> DailyBillHeader: ...

    def get(self, bill_date: date, time_slot_id: TimeSlotId) -> DailyBillHeader | None: ...

    def list_for_date(self, bill_date: date) -> list[DailyBillHeader]: ...


class SubscriptionRepository(Protocol):
    def add(self, subscription: Subscription) -> None: ...

    def get(self, subscription_id: SubscriptionId) -> Subscription | None: ...

    def get_by_qr_code(self, qr_code: str) -> Subscription | None: ...

    def list_for_customer(self, customer_id: CustomerId) -> list[Subscription]: ...

    def list_active(self) -> list[Subscription]: ...

    def update(self, subscription: Subscription) -> None: ...


class OptimisticConcurrencyError(Exception):
    pass


class StorageUnavailableError(Exception):
    """The backing store did not answer in time; callers may retry."""


@dataclass(frozen=True)
class OrderTotalsData:
    orders_total: int
    revenue: int
