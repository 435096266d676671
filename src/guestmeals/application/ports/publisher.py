from __future__ import annotations

from typing import Protocol

ORDER_EVENTS_CHANNEL = "events:orders"
SUBSCRIPTION_EVENTS_CHANNEL = "events:subscriptions"


class EventPublisher(Protocol):
    def publish(self, channel: str, message: str) -> None: ...
