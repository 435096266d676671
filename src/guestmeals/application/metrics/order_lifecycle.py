from __future__ import annotations

from datetime import datetime

from prometheus_client import Counter, Gauge, Histogram

from guestmeals.domain.order.entities import Order, OrderStatus
from guestmeals.domain.slot.availability import RestrictionReason
from guestmeals.domain.slot.entities import TimeSlot

ORDERS_TOTAL = Counter(
    "guestmeals_orders_total",
    "Total number of orders created, by entry point and time slot.",
    ["entry_point", "time_slot"],
)

ORDER_REVENUE_TOTAL = Counter(
    "guestmeals_order_revenue_total",
    "Order revenue in whole currency units.",
    ["entry_point"],
)

ORDER_REFUSALS_TOTAL = Counter(
    "guestmeals_order_refusals_total",
    "Timed orders refused by the availability window.",
    ["time_slot", "reason"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "guestmeals_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDER_TIME_TO_DELIVERY_SECONDS = Histogram(
    "guestmeals_order_time_to_delivery_seconds",
    "Time between order creation and delivery confirmation.",
)

QR_VERIFICATIONS_TOTAL = Counter(
    "guestmeals_qr_verifications_total",
    "QR token verifications by matched store and outcome.",
    ["type", "valid"],
)

SLOT_OCCUPANCY = Gauge(
    "guestmeals_slot_current_orders",
    "Orders currently booked against a time slot.",
    ["time_slot"],
)

SUBSCRIPTIONS_TOTAL = Counter(
    "guestmeals_subscription_events_total",
    "Subscription lifecycle events.",
    ["event"],
)

COUNTER_RESETS_TOTAL = Counter(
    "guestmeals_slot_counter_resets_total",
    "Number of daily slot counter resets.",
)


def record_order_created(order: Order, entry_point: str) -> None:
    ORDERS_TOTAL.labels(
        entry_point=entry_point,
        time_slot=str(order.time_slot_id or "none"),
    ).inc()
    ORDER_REVENUE_TOTAL.labels(entry_point=entry_point).inc(order.total.amount)


def record_refusal(time_slot: str, reason: RestrictionReason) -> None:
    ORDER_REFUSALS_TOTAL.labels(time_slot=time_slot, reason=reason.value).inc()


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_time_to_delivery(order: Order, now: datetime) -> None:
    ORDER_TIME_TO_DELIVERY_SECONDS.observe(max((now - order.created_at).total_seconds(), 0.0))


def record_qr_verification(token_type: str | None, valid: bool) -> None:
    QR_VERIFICATIONS_TOTAL.labels(type=token_type or "unknown", valid=str(valid).lower()).inc()


def record_slot_occupancy(slot: TimeSlot) -> None:
    SLOT_OCCUPANCY.labels(time_slot=str(slot.slot_id)).set(slot.current_orders)


def record_subscription_event(event: str) -> None:
    SUBSCRIPTIONS_TOTAL.labels(event=event).inc()


def record_counter_reset() -> None:
    COUNTER_RESETS_TOTAL.inc()
