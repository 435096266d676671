from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum

from guestmeals.domain.common.ids import AgentId, CustomerId, MenuItemId, OrderId, TimeSlotId
from guestmeals.domain.common.money import Money


class OrderStatus(str, Enum):
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = (
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
)

# The kitchen moves an order one step at a time; delivery is confirmed by an agent.
KITCHEN_TRANSITIONS = {
    OrderStatus.CONFIRMED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
}


class OrderType(str, Enum):
    REGULAR = "regular"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class OrderLine:
    item_id: MenuItemId
    name: str
    quantity: int
    unit_price: Money
    line_total: Money

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("item name must be non-empty")
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1 for item {self.item_id}")
        if self.unit_price.currency != self.line_total.currency:
            raise ValueError("line_total currency must match unit_price currency")
        if self.line_total.amount != self.unit_price.amount * self.quantity:
            raise ValueError("line_total must equal unit_price * quantity")


@dataclass(frozen=True)
class DeliveryDetails:
    name: str
    room_number: str
    phone_number: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("customer name must be non-empty")
        if not self.room_number.strip():
            raise ValueError("room number must be non-empty")


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    customer_id: CustomerId
    delivery: DeliveryDetails
    lines: list[OrderLine]
    total: Money
    order_type: OrderType
    status: OrderStatus
    created_at: datetime
    qr_code: str
    estimated_delivery: datetime | None = None
    time_slot_id: TimeSlotId | None = None
    service_date: date | None = None
    version: int = 1
    delivered_by: AgentId | None = None
    delivered_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValueError("order must contain at least one line")
        line_currency = self.lines[0].line_total.currency
        if self.total.currency != line_currency:
            raise ValueError("order total currency must match line currency")
        expected_total = sum(line.line_total.amount for line in self.lines)
        if self.total.amount != expected_total:
            raise ValueError(
                f"order total {self.total.amount} must equal sum of line totals {expected_total}"
            )
        if (self.time_slot_id is None) != (self.service_date is None):
            raise ValueError("time_slot_id and service_date must be set together")
        if not self.qr_code:
            raise ValueError("qr_code must be non-empty")

    @property
    def is_slot_order(self) -> bool:
        return self.time_slot_id is not None

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def advance_in_kitchen(self, target: OrderStatus) -> Order:
        if target == OrderStatus.DELIVERED:
            raise OrderTransitionError("delivered is only reachable through delivery confirmation")
        if KITCHEN_TRANSITIONS.get(self.status) != target:
            raise OrderTransitionError(
                f"cannot move order from status={self.status.value} to status={target.value}"
            )
        return replace(self, status=target)

    def mark_delivered(self, agent_id: AgentId, now: datetime) -> Order:
        if self.status == OrderStatus.DELIVERED:
            raise OrderTransitionError(f"order {self.order_id} is already delivered")
        return replace(
            self,
            status=OrderStatus.DELIVERED,
            delivered_by=agent_id,
            delivered_at=now,
        )


def build_lines(
    items: list[tuple[MenuItemId, str, int, Money]],
) -> list[OrderLine]:
    return [
        OrderLine(
            item_id=item_id,
            name=name,
            quantity=quantity,
            unit_price=unit_price,
            line_total=unit_price.times(quantity),
        )
        for item_id, name, quantity, unit_price in items
    ]


def create_confirmed_order(
    order_id: OrderId,
    customer_id: CustomerId,
    delivery: DeliveryDetails,
    lines: list[OrderLine],
    declared_total: Money,
    order_type: OrderType,
    qr_code: str,
    now: datetime,
    estimated_delivery: datetime | None = None,
    time_slot_id: TimeSlotId | None = None,
    service_date: date | None = None,
) -> Order:
    """Build a freshly confirmed order, rejecting a declared total that disagrees with the lines."""
    if not lines:
        raise ValueError("order must contain at least one line")
    return Order(
        order_id=order_id,
        customer_id=customer_id,
        delivery=delivery,
        lines=lines,
        total=declared_total,
        order_type=order_type,
        status=OrderStatus.CONFIRMED,
        created_at=now,
        qr_code=qr_code,
        estimated_delivery=estimated_delivery,
        time_slot_id=time_slot_id,
        service_date=service_date,
    )


class OrderTransitionError(Exception):
    pass
