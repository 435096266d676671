from __future__ import annotations

from typing import NewType

CustomerId = NewType("CustomerId", str)
AgentId = NewType("AgentId", str)
AdminId = NewType("AdminId", str)
TimeSlotId = NewType("TimeSlotId", str)
MenuItemId = NewType("MenuItemId", str)
OrderId = NewType("OrderId", str)
SubscriptionId = NewType("SubscriptionId", str)
PlanId = NewType("PlanId", str)
