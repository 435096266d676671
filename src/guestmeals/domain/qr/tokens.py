"""Opaque QR payloads handed to customers and scanned by delivery agents.

Tokens are unsigned weak references into the order and subscription stores:
their only guarantees are uniqueness and a prefix naming the store they point
into. Integrity protection (e.g. an HMAC over the id and issue time) belongs
in a layer in front of verification.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import uuid4

from guestmeals.domain.common.ids import OrderId, SubscriptionId


class TokenNamespace(str, Enum):
    ORDER = "order"
    SUBSCRIPTION = "subscription"


ORDER_TOKEN_PREFIX = "QR-"
SUBSCRIPTION_TOKEN_PREFIX = "MONTHLY-QR-"


def _epoch_millis(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def new_order_id(now: datetime, prefix: str = "ORD") -> OrderId:
    return OrderId(f"{prefix}-{_epoch_millis(now)}-{uuid4().hex[:6]}")


def new_subscription_id(now: datetime) -> SubscriptionId:
    return SubscriptionId(f"SUB-{_epoch_millis(now)}-{uuid4().hex[:6]}")


def issue_order_token(order_id: OrderId) -> str:
    return f"{ORDER_TOKEN_PREFIX}{order_id}-{uuid4().hex[:12]}"


def issue_subscription_token(subscription_id: SubscriptionId) -> str:
    return f"{SUBSCRIPTION_TOKEN_PREFIX}{subscription_id}-{uuid4().hex[:12]}"


def token_namespace(token: str) -> TokenNamespace | None:
    if token.startswith(SUBSCRIPTION_TOKEN_PREFIX):
        return TokenNamespace.SUBSCRIPTION
    if token.startswith(ORDER_TOKEN_PREFIX):
        return TokenNamespace.ORDER
    return None
