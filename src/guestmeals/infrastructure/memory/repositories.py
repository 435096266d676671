from __future__ import annotations

import threading
from contextlib import ExitStack
from dataclasses import replace
from datetime import date, datetime
from typing import Any

from guestmeals.application.ports.repositories import (
    DailyBillRepository,
    OptimisticConcurrencyError,
    OrderRepository,
    OrderTotalsData,
    SubscriptionRepository,
    TimeSlotRepository,
)
from guestmeals.domain.billing.entities import DailyBillHeader
from guestmeals.domain.common.ids import CustomerId, OrderId, SubscriptionId, TimeSlotId
from guestmeals.domain.order.entities import Order, OrderStatus
from guestmeals.domain.slot.entities import SlotUnavailableError, TimeSlot
from guestmeals.domain.subscription.entities import Subscription, SubscriptionStatus


class InMemoryTimeSlotRepository(TimeSlotRepository):
    """Slots keyed by id in insertion order, each guarded by its own lock.

    Reservation, release and config writes hold the slot's lock; a counter
    reset holds every lock at once so it cannot interleave with a placement.
    """

    def __init__(self, slots: list[TimeSlot] | None = None) -> None:
        self._slots: dict[str, TimeSlot] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        for slot in slots or []:
            self.add(slot)

    def list(self) -> list[TimeSlot]:
        with self._registry_lock:
            return list(self._slots.values())

    def get(self, slot_id: TimeSlotId) -> TimeSlot | None:
        with self._registry_lock:
            return self._slots.get(str(slot_id))

    def add(self, slot: TimeSlot) -> None:
        with self._registry_lock:
            key = str(slot.slot_id)
            if key in self._slots:
                raise ValueError(f"time slot {key} already exists")
            self._slots[key] = slot
            self._locks[key] = threading.Lock()

    def update_config(self, slot_id: TimeSlotId, changes: dict[str, Any]) -> TimeSlot | None:
        key = str(slot_id)
        try:
            lock = self._lock_for(key)
        except KeyError:
            return None
        with lock:
            updated = self._slots[key].with_config(changes)
            self._slots[key] = updated
            return updated

    def try_reserve(self, slot_id: TimeSlotId) -> TimeSlot | None:
        key = str(slot_id)
        with self._lock_for(key):
            try:
                reserved = self._slots[key].reserve()
            except SlotUnavailableError:
                return None
            self._slots[key] = reserved
            return reserved

    def release(self, slot_id: TimeSlotId) -> None:
        key = str(slot_id)
        with self._lock_for(key):
            self._slots[key] = self._slots[key].release()

    def reset_counters(self) -> int:
        with self._registry_lock:
            keys = sorted(self._slots)
        with ExitStack() as stack:
            for key in keys:
                stack.enter_context(self._locks[key])
            for key in keys:
                self._slots[key] = self._slots[key].reset()
        return len(keys)

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
        if lock is None:
            raise KeyError(f"time slot {key} not found")
        return lock


class InMemoryOrderRepository(OrderRepository):
    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._by_qr_code: dict[str, str] = {}
        self._lock = threading.Lock()

    def add(self, order: Order) -> None:
        with self._lock:
            key = str(order.order_id)
            if key in self._orders:
                raise ValueError(f"order {key} already exists")
            if order.qr_code in self._by_qr_code:
                raise ValueError("qr code already issued")
            self._orders[key] = order
            self._by_qr_code[order.qr_code] = key

    def get(self, order_id: OrderId) -> Order | None:
        with self._lock:
            return self._orders.get(str(order_id))

    def get_by_qr_code(self, qr_code: str) -> Order | None:
        with self._lock:
            order_key = self._by_qr_code.get(qr_code)
            return self._orders.get(order_key) if order_key else None

    def list_for_customer(self, customer_id: CustomerId) -> list[Order]:
        with self._lock:
            return [order for order in self._orders.values() if order.customer_id == customer_id]

    def list_by_status(self, statuses: frozenset[OrderStatus]) -> list[Order]:
        with self._lock:
            return [order for order in self._orders.values() if order.status in statuses]

    def list_for_service(self, service_date: date, time_slot_id: TimeSlotId) -> list[Order]:
        with self._lock:
            return [
                order
                for order in self._orders.values()
                if order.service_date == service_date and order.time_slot_id == time_slot_id
            ]

    def summarize(self) -> OrderTotalsData:
        with self._lock:
            orders = list(self._orders.values())
        return OrderTotalsData(
            orders_total=len(orders),
            revenue=sum(order.total.amount for order in orders),
        )

    def update_status_with_version(self, order: Order, expected_version: int) -> Order:
        key = str(order.order_id)
        with self._lock:
            current = self._orders.get(key)
            if current is None or current.version != expected_version:
                raise OptimisticConcurrencyError(f"order {key} version conflict")
            updated = replace(
                current,
                status=order.status,
                delivered_by=order.delivered_by,
                delivered_at=order.delivered_at,
                version=current.version + 1,
            )
            self._orders[key] = updated
            return updated


class InMemoryDailyBillRepository(DailyBillRepository):
    def __init__(self) -> None:
        self._headers: dict[tuple[date, str], DailyBillHeader] = {}
        self._lock = threading.Lock()

    def get_or_create(
        self,
        bill_date: date,
        time_slot_id: TimeSlotId,
        preparation_deadline: datetime,
        now: datetime,
    ) -> DailyBillHeader:
        key = (bill_date, str(time_slot_id))
        with self._lock:
            header = self._headers.get(key)
            if header is None:
                header = DailyBillHeader(
                    bill_date=bill_date,
                    time_slot_id=time_slot_id,
                    preparation_deadline=preparation_deadline,
                    created_at=now,
                )
                self._headers[key] = header
            return header

    def get(self, bill_date: date, time_slot_id: TimeSlotId) -> DailyBillHeader | None:
        with self._lock:
            return self._headers.get((bill_date, str(time_slot_id)))

    def list_for_date(self, bill_date: date) -> list[DailyBillHeader]:
        with self._lock:
            return [header for (day, _), header in self._headers.items() if day == bill_date]


class InMemorySubscriptionRepository(SubscriptionRepository):
    def __init__(self) -> None:
        self._subscriptions: dict[str, Subscription] = {}
        self._lock = threading.Lock()

    def add(self, subscription: Subscription) -> None:
        with self._lock:
            key = str(subscription.subscription_id)
            if key in self._subscriptions:
                raise ValueError(f"subscription {key} already exists")
            self._subscriptions[key] = subscription

    def get(self, subscription_id: SubscriptionId) -> Subscription | None:
        with self._lock:
            return self._subscriptions.get(str(subscription_id))

    def get_by_qr_code(self, qr_code: str) -> Subscription | None:
        with self._lock:
            for subscription in self._subscriptions.values():
                if subscription.qr_code == qr_code:
                    return subscription
        return None

    def list_for_customer(self, customer_id: CustomerId) -> list[Subscription]:
        with self._lock:
            return [
                subscription
                for subscription in self._subscriptions.values()
                if subscription.customer_id == customer_id
            ]

    def list_active(self) -> list[Subscription]:
        with self._lock:
            return [
                subscription
                for subscription in self._subscriptions.values()
                if subscription.status == SubscriptionStatus.ACTIVE
            ]

    def update(self, subscription: Subscription) -> None:
        with self._lock:
            key = str(subscription.subscription_id)
            if key not in self._subscriptions:
                raise KeyError(f"subscription {key} not found")
            self._subscriptions[key] = subscription
