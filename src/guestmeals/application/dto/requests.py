from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class OrderItemRequest(CamelBaseModel):
    item_id: str = Field(alias="id")
    name: str
    quantity: int
    price: int


class CustomerDetailsRequest(CamelBaseModel):
    name: str
    room_number: str
    phone_number: str | None = None


class PlaceTimedOrderRequest(CamelBaseModel):
    customer_id: str
    time_slot_id: str
    items: list[OrderItemRequest] = Field(min_length=1)
    total_amount: int
    customer_details: CustomerDetailsRequest


class EmergencyOrderRequest(PlaceTimedOrderRequest):
    admin_id: str


class CreateOrderRequest(CamelBaseModel):
    customer_id: str
    customer_name: str
    room_number: str
    phone_number: str | None = None
    items: list[OrderItemRequest] = Field(min_length=1)
    total_amount: int
    order_type: Literal["regular", "monthly"] = "regular"


class UpdateTimeSlotRequest(CamelBaseModel):
    name: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    cutoff_time: str | None = None
    is_active: bool | None = None
    max_orders: int | None = None


class UpdateOrderStatusRequest(CamelBaseModel):
    status: str


class MarkDeliveredRequest(CamelBaseModel):
    agent_id: str


class VerifyQrCodeRequest(CamelBaseModel):
    qr_code: str


class MealPreferencesRequest(CamelBaseModel):
    main_carb: str
    meal_times: list[str] = Field(min_length=1)
    start_date: date


class CreateSubscriptionRequest(CamelBaseModel):
    customer_id: str
    plan_id: str
    plan_name: str
    price: int
    preferences: MealPreferencesRequest
