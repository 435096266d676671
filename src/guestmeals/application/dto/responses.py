from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field


class TimeSlotResponse(BaseModel):
    id: str
    name: str
    startTime: str
    endTime: str
    cutoffTime: str
    isActive: bool
    maxOrders: int | None = None
    currentOrders: int


class OrderRestrictionResponse(BaseModel):
    canOrder: bool
    message: str
    reason: str
    nextSlot: TimeSlotResponse | None = None
    timeRemaining: str | None = None


class ResetCountersResponse(BaseModel):
    slotsReset: int


class OrderItemResponse(BaseModel):
    id: str
    name: str
    quantity: int
    price: int
    lineTotal: int


class OrderResponse(BaseModel):
    orderId: str
    customerId: str
    customerName: str
    roomNumber: str
    phoneNumber: str | None = None
    items: list[OrderItemResponse] = Field(default_factory=list)
    totalAmount: int
    currency: str
    orderType: str
    status: str
    createdAt: dt.datetime
    estimatedDelivery: dt.datetime | None = None
    qrCode: str
    timeSlotId: str | None = None
    serviceDate: dt.date | None = None
    deliveredBy: str | None = None
    deliveredAt: dt.datetime | None = None


class TimedOrderPlacedResponse(BaseModel):
    orderId: str
    preparationDeadline: str
    estimatedDelivery: str
    qrCode: str


class EmergencyOrderPlacedResponse(BaseModel):
    orderId: str
    warning: str
    qrCode: str


class KitchenQueueResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)


class CustomerOrdersResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)


class MealPreferencesResponse(BaseModel):
    mainCarb: str
    mealTimes: list[str]
    startDate: dt.date


class SubscriptionResponse(BaseModel):
    id: str
    customerId: str
    planId: str
    planName: str
    price: int
    preferences: MealPreferencesResponse
    status: str
    subscribedAt: dt.datetime
    validUntil: dt.datetime
    qrCode: str


class CustomerSubscriptionsResponse(BaseModel):
    subscriptions: list[SubscriptionResponse] = Field(default_factory=list)


class QrVerificationResponse(BaseModel):
    valid: bool
    type: str | None = None
    message: str
    data: OrderResponse | SubscriptionResponse | None = None


class DailyBillResponse(BaseModel):
    date: dt.date
    timeSlot: str
    orders: list[OrderResponse] = Field(default_factory=list)
    totalOrders: int
    totalRevenue: int
    preparationDeadline: dt.datetime


class DailyBillsResponse(BaseModel):
    date: dt.date
    bills: list[DailyBillResponse] = Field(default_factory=list)


class PreparationItemResponse(BaseModel):
    name: str
    quantity: int


class PreparationOrderResponse(BaseModel):
    orderId: str
    customerName: str
    roomNumber: str
    items: list[PreparationItemResponse] = Field(default_factory=list)
    totalQuantityByItem: dict[str, int] = Field(default_factory=dict)


class PreparationSummaryResponse(BaseModel):
    totalOrders: int
    totalItems: int
    itemBreakdown: dict[str, int] = Field(default_factory=dict)


class PreparationListResponse(BaseModel):
    date: dt.date
    timeSlot: str
    preparationDeadline: dt.datetime
    orders: list[PreparationOrderResponse] = Field(default_factory=list)
    summary: PreparationSummaryResponse


class DailyBreakdownResponse(BaseModel):
    date: dt.date
    orders: int
    revenue: int


class PopularItemResponse(BaseModel):
    name: str
    quantity: int
    orders: int


class OrderAnalyticsResponse(BaseModel):
    startDate: dt.date
    endDate: dt.date
    totalOrders: int
    totalRevenue: int
    ordersByTimeSlot: dict[str, int] = Field(default_factory=dict)
    revenueByTimeSlot: dict[str, int] = Field(default_factory=dict)
    dailyBreakdown: list[DailyBreakdownResponse] = Field(default_factory=list)
    popularItems: list[PopularItemResponse] = Field(default_factory=list)


class BusinessSummaryResponse(BaseModel):
    totalOrders: int
    totalRevenue: int
    activeSubscriptions: int
    monthlyRevenue: int
