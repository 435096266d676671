from __future__ import annotations

from typing import Sequence

from guestmeals.application.dto.requests import OrderItemRequest
from guestmeals.application.use_cases.errors import InvalidPayloadError
from guestmeals.domain.common.ids import MenuItemId
from guestmeals.domain.common.money import Money
from guestmeals.domain.order.entities import DeliveryDetails, OrderLine, build_lines


def build_order_lines(items: Sequence[OrderItemRequest]) -> list[OrderLine]:
    if not items:
        raise InvalidPayloadError("order must contain at least one item")
    for item in items:
        if item.quantity < 1:
            raise InvalidPayloadError(f"quantity must be >= 1 for item {item.item_id}")
        if item.price < 0:
            raise InvalidPayloadError(f"price must be >= 0 for item {item.item_id}")
    try:
        return build_lines(
            [
                (MenuItemId(item.item_id), item.name, item.quantity, Money(amount=item.price))
                for item in items
            ]
        )
    except ValueError as exc:
        raise InvalidPayloadError(str(exc)) from exc


def declared_total(lines: Sequence[OrderLine], total_amount: int) -> Money:
    expected = sum(line.line_total.amount for line in lines)
    if total_amount != expected:
        raise InvalidPayloadError(
            f"totalAmount {total_amount} does not match the sum of item subtotals {expected}"
        )
    return Money(amount=total_amount)


def delivery_details(name: str, room_number: str, phone_number: str | None) -> DeliveryDetails:
    try:
        return DeliveryDetails(name=name, room_number=room_number, phone_number=phone_number)
    except ValueError as exc:
        raise InvalidPayloadError(str(exc)) from exc
