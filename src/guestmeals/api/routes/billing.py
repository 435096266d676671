from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from guestmeals.api.dependencies import Container, get_container
from guestmeals.application.dto.responses import (
    BusinessSummaryResponse,
    DailyBillsResponse,
    OrderAnalyticsResponse,
    PreparationListResponse,
)
from guestmeals.application.use_cases.billing import (
    GeneratePreparationList,
    GetBusinessSummary,
    GetDailyBill,
    GetOrderAnalytics,
)
from guestmeals.domain.common.ids import TimeSlotId

router = APIRouter()


@router.get("/v1/billing/daily/{bill_date}", response_model=DailyBillsResponse)
def get_daily_bill(
    bill_date: date,
    container: Container = Depends(get_container),
) -> DailyBillsResponse:
    return GetDailyBill(ledger=container.ledger).execute(bill_date=bill_date)


@router.get(
    "/v1/billing/daily/{bill_date}/{slot_id}/preparation-list",
    response_model=PreparationListResponse,
)
def generate_preparation_list(
    bill_date: date,
    slot_id: str,
    container: Container = Depends(get_container),
) -> PreparationListResponse:
    use_case = GeneratePreparationList(ledger=container.ledger)
    return use_case.execute(bill_date=bill_date, time_slot_id=TimeSlotId(slot_id))


@router.get("/v1/analytics/orders", response_model=OrderAnalyticsResponse)
def get_order_analytics(
    start_date: date = Query(alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    container: Container = Depends(get_container),
) -> OrderAnalyticsResponse:
    use_case = GetOrderAnalytics(ledger=container.ledger)
    return use_case.execute(start_date=start_date, end_date=end_date)


@router.get("/v1/analytics/summary", response_model=BusinessSummaryResponse)
def get_business_summary(container: Container = Depends(get_container)) -> BusinessSummaryResponse:
    use_case = GetBusinessSummary(
        order_repository=container.order_repository,
        subscription_repository=container.subscription_repository,
    )
    return use_case.execute()
