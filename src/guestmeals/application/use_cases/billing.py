from __future__ import annotations

from datetime import date

from guestmeals.application.dto.responses import (
    BusinessSummaryResponse,
    DailyBillsResponse,
    OrderAnalyticsResponse,
    PreparationListResponse,
)
from guestmeals.application.mappers.billing_mapper import (
    to_analytics_response,
    to_daily_bill_response,
    to_preparation_list_response,
)
from guestmeals.application.ports.repositories import OrderRepository, SubscriptionRepository
from guestmeals.application.use_cases.errors import DailyBillNotFoundError, InvalidPayloadError
from guestmeals.application.use_cases.ledger import LedgerReader
from guestmeals.domain.billing.reports import (
    build_order_analytics,
    build_preparation_list,
    date_range,
)
from guestmeals.domain.common.ids import TimeSlotId

MAX_ANALYTICS_DAYS = 366


class GetDailyBill:
    def __init__(self, ledger: LedgerReader) -> None:
        self._ledger = ledger

    def execute(self, bill_date: date) -> DailyBillsResponse:
        return DailyBillsResponse(
            date=bill_date,
            bills=[to_daily_bill_response(bill) for bill in self._ledger.bills_for_date(bill_date)],
        )


class GeneratePreparationList:
    def __init__(self, ledger: LedgerReader) -> None:
        self._ledger = ledger

    def execute(self, bill_date: date, time_slot_id: TimeSlotId) -> PreparationListResponse:
        bill = self._ledger.bill(bill_date, time_slot_id)
        if bill is None:
            raise DailyBillNotFoundError(
                f"no orders found for date {bill_date.isoformat()} and time slot {time_slot_id}"
            )
        return to_preparation_list_response(bill_date, build_preparation_list(bill))


class GetOrderAnalytics:
    def __init__(self, ledger: LedgerReader) -> None:
        self._ledger = ledger

    def execute(self, start_date: date, end_date: date | None = None) -> OrderAnalyticsResponse:
        end = end_date or start_date
        if end < start_date:
            raise InvalidPayloadError("endDate must not be before startDate")
        if (end - start_date).days + 1 > MAX_ANALYTICS_DAYS:
            raise InvalidPayloadError(f"analytics range is limited to {MAX_ANALYTICS_DAYS} days")
        days = date_range(start_date, end)

        bills_by_day = {day: self._ledger.bills_for_date(day) for day in days}
        return to_analytics_response(start_date, end, build_order_analytics(days, bills_by_day))


class GetBusinessSummary:
    def __init__(
        self,
        order_repository: OrderRepository,
        subscription_repository: SubscriptionRepository,
    ) -> None:
        self._order_repository = order_repository
        self._subscription_repository = subscription_repository

    def execute(self) -> BusinessSummaryResponse:
        totals = self._order_repository.summarize()
        active = self._subscription_repository.list_active()
        return BusinessSummaryResponse(
            totalOrders=totals.orders_total,
            totalRevenue=totals.revenue,
            activeSubscriptions=len(active),
            monthlyRevenue=sum(subscription.price.amount for subscription in active),
        )
