from __future__ import annotations

import sys
from datetime import date, datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from guestmeals.application.dto.requests import (
    CustomerDetailsRequest,
    OrderItemRequest,
    PlaceTimedOrderRequest,
)
from guestmeals.application.use_cases.billing import (
    GeneratePreparationList,
    GetBusinessSummary,
    GetDailyBill,
    GetOrderAnalytics,
)
from guestmeals.application.use_cases.context import TraceContext
from guestmeals.application.use_cases.errors import DailyBillNotFoundError, InvalidPayloadError
from guestmeals.application.use_cases.ledger import LedgerReader
from guestmeals.application.use_cases.place_timed_order import PlaceTimedOrder
from guestmeals.domain.common.ids import TimeSlotId
from guestmeals.domain.slot.entities import TimeSlot
from guestmeals.infrastructure.memory.repositories import (
    InMemoryDailyBillRepository,
    InMemoryOrderRepository,
    InMemorySubscriptionRepository,
    InMemoryTimeSlotRepository,
)

IST = ZoneInfo("Asia/Kolkata")
SERVICE_DATE = date(2024, 6, 1)


class FixedClock:
    def now(self) -> datetime:
        return datetime(2024, 6, 1, 6, 0, tzinfo=IST)


class NullPublisher:
    def publish(self, channel: str, message: str) -> None:
        return None


def _breakfast() -> TimeSlot:
    return TimeSlot(
        slot_id=TimeSlotId("breakfast"),
        name="Breakfast",
        start_time=time(7, 0),
        end_time=time(10, 0),
        cutoff_time=time(6, 30),
        max_orders=50,
    )


@pytest.fixture
def booked():
    slots = InMemoryTimeSlotRepository([_breakfast()])
    orders = InMemoryOrderRepository()
    bills = InMemoryDailyBillRepository()
    use_case = PlaceTimedOrder(
        time_slot_repository=slots,
        order_repository=orders,
        daily_bill_repository=bills,
        publisher=NullPublisher(),
        clock=FixedClock(),
    )
    for room in ("101", "204"):
        use_case.execute(
            request_dto=PlaceTimedOrderRequest(
                customer_id=f"cus_{room}",
                time_slot_id="breakfast",
                items=[OrderItemRequest(id="poha", name="Poha", quantity=2, price=40)],
                total_amount=80,
                customer_details=CustomerDetailsRequest(name=f"Guest {room}", room_number=room),
            ),
            trace_ctx=TraceContext(),
        )
    return orders, LedgerReader(daily_bill_repository=bills, order_repository=orders)


def test_preparation_list_for_breakfast(booked) -> None:
    _, ledger = booked

    response = GeneratePreparationList(ledger=ledger).execute(SERVICE_DATE, TimeSlotId("breakfast"))

    assert response.timeSlot == "breakfast"
    assert response.preparationDeadline == datetime(2024, 6, 1, 6, 30, tzinfo=IST)
    assert response.summary.itemBreakdown == {"Poha": 4}
    assert response.summary.totalItems == 4
    assert response.summary.totalOrders == 2
    assert sorted(order.roomNumber for order in response.orders) == ["101", "204"]


def test_preparation_list_without_orders_is_not_found(booked) -> None:
    _, ledger = booked

    with pytest.raises(DailyBillNotFoundError):
        GeneratePreparationList(ledger=ledger).execute(SERVICE_DATE, TimeSlotId("lunch"))
    with pytest.raises(DailyBillNotFoundError):
        GeneratePreparationList(ledger=ledger).execute(date(2024, 6, 2), TimeSlotId("breakfast"))


def test_daily_bill_lists_slots_for_the_day(booked) -> None:
    _, ledger = booked

    response = GetDailyBill(ledger=ledger).execute(SERVICE_DATE)
    empty = GetDailyBill(ledger=ledger).execute(date(2024, 6, 2))

    assert [bill.timeSlot for bill in response.bills] == ["breakfast"]
    assert response.bills[0].totalOrders == 2
    assert response.bills[0].totalRevenue == 160
    assert empty.bills == []


def test_analytics_defaults_end_to_start(booked) -> None:
    _, ledger = booked

    response = GetOrderAnalytics(ledger=ledger).execute(SERVICE_DATE)

    assert response.endDate == SERVICE_DATE
    assert response.totalOrders == 2
    assert response.ordersByTimeSlot == {"breakfast": 2}
    assert response.popularItems[0].name == "Poha"
    assert response.popularItems[0].quantity == 4
    assert response.popularItems[0].orders == 2


def test_analytics_rejects_bad_ranges(booked) -> None:
    _, ledger = booked
    use_case = GetOrderAnalytics(ledger=ledger)

    with pytest.raises(InvalidPayloadError):
        use_case.execute(date(2024, 6, 2), date(2024, 6, 1))
    with pytest.raises(InvalidPayloadError):
        use_case.execute(date(2023, 1, 1), date(2024, 1, 2))
    with pytest.raises(InvalidPayloadError):
        use_case.execute(date(1, 1, 1), date(9999, 12, 31))


def test_analytics_accepts_a_full_366_day_range(booked) -> None:
    _, ledger = booked

    response = GetOrderAnalytics(ledger=ledger).execute(date(2023, 6, 2), date(2024, 6, 1))

    assert len(response.dailyBreakdown) == 366
    assert response.totalOrders == 2


def test_business_summary_counts_all_orders(booked) -> None:
    orders, _ = booked

    summary = GetBusinessSummary(
        order_repository=orders,
        subscription_repository=InMemorySubscriptionRepository(),
    ).execute()

    assert summary.totalOrders == 2
    assert summary.totalRevenue == 160
    assert summary.activeSubscriptions == 0
    assert summary.monthlyRevenue == 0
