from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from guestmeals.domain.common.ids import TimeSlotId
from guestmeals.domain.order.entities import Order


@dataclass(frozen=True)
class DailyBillHeader:
    """Identity of a bill; written once, on the first order for its date and slot."""

    bill_date: date
    time_slot_id: TimeSlotId
    preparation_deadline: datetime
    created_at: datetime


@dataclass(frozen=True)
class DailyBill:
    header: DailyBillHeader
    orders: tuple[Order, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for order in self.orders:
            if order.time_slot_id != self.header.time_slot_id:
                raise ValueError(f"order {order.order_id} belongs to another time slot")
            if order.service_date != self.header.bill_date:
                raise ValueError(f"order {order.order_id} belongs to another date")

    @property
    def bill_date(self) -> date:
        return self.header.bill_date

    @property
    def time_slot_id(self) -> TimeSlotId:
        return self.header.time_slot_id

    @property
    def preparation_deadline(self) -> datetime:
        return self.header.preparation_deadline

    @property
    def total_orders(self) -> int:
        return len(self.orders)

    @property
    def total_revenue(self) -> int:
        return sum(order.total.amount for order in self.orders)
