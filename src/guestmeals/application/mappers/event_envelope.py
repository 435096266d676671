from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from guestmeals.domain.order.entities import Order
from guestmeals.domain.subscription.entities import Subscription


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    payload: dict[str, Any],
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def serialize_order_event(
    *,
    event_type: str,
    occurred_at: datetime,
    order: Order,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    return _serialize_event(
        event_type=event_type,
        occurred_at=occurred_at,
        trace_id=trace_id,
        request_id=request_id,
        payload={
            "orderId": str(order.order_id),
            "customerId": str(order.customer_id),
            "roomNumber": order.delivery.room_number,
            "status": order.status.value,
            "orderType": order.order_type.value,
            "timeSlotId": str(order.time_slot_id) if order.time_slot_id else None,
            "serviceDate": order.service_date.isoformat() if order.service_date else None,
            "totalAmount": order.total.amount,
            "currency": order.total.currency,
            "createdAt": order.created_at.isoformat(),
            "deliveredBy": str(order.delivered_by) if order.delivered_by else None,
            "items": [
                {
                    "id": str(line.item_id),
                    "name": line.name,
                    "quantity": line.quantity,
                    "price": line.unit_price.amount,
                }
                for line in order.lines
            ],
        },
    )


def serialize_subscription_event(
    *,
    event_type: str,
    occurred_at: datetime,
    subscription: Subscription,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    return _serialize_event(
        event_type=event_type,
        occurred_at=occurred_at,
        trace_id=trace_id,
        request_id=request_id,
        payload={
            "subscriptionId": str(subscription.subscription_id),
            "customerId": str(subscription.customer_id),
            "planId": str(subscription.plan_id),
            "status": subscription.status.value,
            "validUntil": subscription.valid_until.isoformat(),
        },
    )
