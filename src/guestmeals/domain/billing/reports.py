"""Read-only folds over daily bills for the kitchen and the admin dashboard."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Sequence

from guestmeals.domain.billing.entities import DailyBill
from guestmeals.domain.common.ids import OrderId, TimeSlotId

POPULAR_ITEMS_LIMIT = 10


@dataclass(frozen=True)
class PreparationEntry:
    order_id: OrderId
    customer_name: str
    room_number: str
    items: list[tuple[str, int]]
    quantity_by_item: dict[str, int]


@dataclass(frozen=True)
class PreparationList:
    time_slot_id: TimeSlotId
    preparation_deadline: datetime
    orders: list[PreparationEntry]
    total_orders: int
    total_items: int
    item_breakdown: dict[str, int]


@dataclass(frozen=True)
class DayTotals:
    day: date
    orders: int
    revenue: int


@dataclass(frozen=True)
class PopularItem:
    name: str
    quantity: int
    orders: int


@dataclass(frozen=True)
class OrderAnalytics:
    total_orders: int
    total_revenue: int
    orders_by_time_slot: dict[str, int] = field(default_factory=dict)
    revenue_by_time_slot: dict[str, int] = field(default_factory=dict)
    daily_breakdown: list[DayTotals] = field(default_factory=list)
    popular_items: list[PopularItem] = field(default_factory=list)


def build_preparation_list(bill: DailyBill) -> PreparationList:
    item_breakdown: dict[str, int] = {}
    entries: list[PreparationEntry] = []
    for order in bill.orders:
        quantity_by_item: dict[str, int] = {}
        for line in order.lines:
            item_breakdown[line.name] = item_breakdown.get(line.name, 0) + line.quantity
            quantity_by_item[line.name] = quantity_by_item.get(line.name, 0) + line.quantity
        entries.append(
            PreparationEntry(
                order_id=order.order_id,
                customer_name=order.delivery.name,
                room_number=order.delivery.room_number,
                items=[(line.name, line.quantity) for line in order.lines],
                quantity_by_item=quantity_by_item,
            )
        )

    return PreparationList(
        time_slot_id=bill.time_slot_id,
        preparation_deadline=bill.preparation_deadline,
        orders=entries,
        total_orders=bill.total_orders,
        total_items=sum(item_breakdown.values()),
        item_breakdown=item_breakdown,
    )


def date_range(start: date, end: date) -> list[date]:
    days = (end - start).days
    return [start + timedelta(days=offset) for offset in range(days + 1)]


def build_order_analytics(
    days: Sequence[date],
    bills_by_day: Mapping[date, Iterable[DailyBill]],
) -> OrderAnalytics:
    orders_by_slot: dict[str, int] = {}
    revenue_by_slot: dict[str, int] = {}
    breakdown: list[DayTotals] = []
    item_quantities: Counter[str] = Counter()
    item_orders: Counter[str] = Counter()

    for day in days:
        day_orders = 0
        day_revenue = 0
        for bill in bills_by_day.get(day, ()):
            slot_key = str(bill.time_slot_id)
            day_orders += bill.total_orders
            day_revenue += bill.total_revenue
            orders_by_slot[slot_key] = orders_by_slot.get(slot_key, 0) + bill.total_orders
            revenue_by_slot[slot_key] = revenue_by_slot.get(slot_key, 0) + bill.total_revenue
            for order in bill.orders:
                for line in order.lines:
                    item_quantities[line.name] += line.quantity
                    item_orders[line.name] += 1
        breakdown.append(DayTotals(day=day, orders=day_orders, revenue=day_revenue))

    # sorted() is stable, so equal quantities keep first-seen order.
    ranked = sorted(item_quantities.items(), key=lambda entry: entry[1], reverse=True)
    popular = [
        PopularItem(name=name, quantity=quantity, orders=item_orders[name])
        for name, quantity in ranked[:POPULAR_ITEMS_LIMIT]
    ]

    return OrderAnalytics(
        total_orders=sum(day.orders for day in breakdown),
        total_revenue=sum(day.revenue for day in breakdown),
        orders_by_time_slot=orders_by_slot,
        revenue_by_time_slot=revenue_by_slot,
        daily_breakdown=breakdown,
        popular_items=popular,
    )
