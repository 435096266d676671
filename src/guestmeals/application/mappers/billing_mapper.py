from __future__ import annotations

from datetime import date

from guestmeals.application.dto.responses import (
    DailyBillResponse,
    DailyBreakdownResponse,
    OrderAnalyticsResponse,
    PopularItemResponse,
    PreparationItemResponse,
    PreparationListResponse,
    PreparationOrderResponse,
    PreparationSummaryResponse,
)
from guestmeals.application.mappers.order_mapper import to_order_response
from guestmeals.domain.billing.entities import DailyBill
from guestmeals.domain.billing.reports import OrderAnalytics, PreparationList


def to_daily_bill_response(bill: DailyBill) -> DailyBillResponse:
    return DailyBillResponse(
        date=bill.bill_date,
        timeSlot=str(bill.time_slot_id),
        orders=[to_order_response(order) for order in bill.orders],
        totalOrders=bill.total_orders,
        totalRevenue=bill.total_revenue,
        preparationDeadline=bill.preparation_deadline,
    )


def to_preparation_list_response(bill_date: date, prep: PreparationList) -> PreparationListResponse:
    return PreparationListResponse(
        date=bill_date,
        timeSlot=str(prep.time_slot_id),
        preparationDeadline=prep.preparation_deadline,
        orders=[
            PreparationOrderResponse(
                orderId=str(entry.order_id),
                customerName=entry.customer_name,
                roomNumber=entry.room_number,
                items=[
                    PreparationItemResponse(name=name, quantity=quantity)
                    for name, quantity in entry.items
                ],
                totalQuantityByItem=entry.quantity_by_item,
            )
            for entry in prep.orders
        ],
        summary=PreparationSummaryResponse(
            totalOrders=prep.total_orders,
            totalItems=prep.total_items,
            itemBreakdown=prep.item_breakdown,
        ),
    )


def to_analytics_response(
    start_date: date,
    end_date: date,
    analytics: OrderAnalytics,
) -> OrderAnalyticsResponse:
    return OrderAnalyticsResponse(
        startDate=start_date,
        endDate=end_date,
        totalOrders=analytics.total_orders,
        totalRevenue=analytics.total_revenue,
        ordersByTimeSlot=analytics.orders_by_time_slot,
        revenueByTimeSlot=analytics.revenue_by_time_slot,
        dailyBreakdown=[
            DailyBreakdownResponse(date=day.day, orders=day.orders, revenue=day.revenue)
            for day in analytics.daily_breakdown
        ],
        popularItems=[
            PopularItemResponse(name=item.name, quantity=item.quantity, orders=item.orders)
            for item in analytics.popular_items
        ],
    )
