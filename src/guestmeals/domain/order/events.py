from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from guestmeals.domain.common.ids import AgentId, OrderId, TimeSlotId
from guestmeals.domain.common.money import Money
from guestmeals.domain.order.entities import OrderStatus


@dataclass(frozen=True)
class OrderPlaced:
    order_id: OrderId
    time_slot_id: TimeSlotId | None
    total: Money
    created_at: datetime


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: OrderId
    from_status: OrderStatus
    to_status: OrderStatus
    occurred_at: datetime


@dataclass(frozen=True)
class OrderDelivered:
    order_id: OrderId
    agent_id: AgentId
    occurred_at: datetime
