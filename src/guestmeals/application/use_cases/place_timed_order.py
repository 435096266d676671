from __future__ import annotations

import logging
from datetime import datetime
from typing import NoReturn

from guestmeals.application.dto.requests import EmergencyOrderRequest, PlaceTimedOrderRequest
from guestmeals.application.dto.responses import (
    EmergencyOrderPlacedResponse,
    TimedOrderPlacedResponse,
)
from guestmeals.application.mappers.event_envelope import serialize_order_event
from guestmeals.application.mappers.order_mapper import to_display_time
from guestmeals.application.metrics.order_lifecycle import (
    record_order_created,
    record_refusal,
    record_slot_occupancy,
)
from guestmeals.application.ports.clock import Clock
from guestmeals.application.ports.publisher import ORDER_EVENTS_CHANNEL, EventPublisher
from guestmeals.application.ports.repositories import (
    DailyBillRepository,
    OrderRepository,
    TimeSlotRepository,
)
from guestmeals.application.use_cases.context import TraceContext, publish_event
from guestmeals.application.use_cases.errors import (
    InvalidPayloadError,
    InvalidTimeSlotError,
    OrderWindowClosedError,
)
from guestmeals.application.use_cases.order_payload import (
    build_order_lines,
    declared_total,
    delivery_details,
)
from guestmeals.domain.common.ids import CustomerId, TimeSlotId
from guestmeals.domain.order.entities import Order, OrderType, create_confirmed_order
from guestmeals.domain.order.events import OrderPlaced
from guestmeals.domain.qr.tokens import issue_order_token, new_order_id
from guestmeals.domain.slot.availability import (
    OrderRestriction,
    evaluate_slot,
    fully_booked,
)
from guestmeals.domain.slot.entities import TimeSlot

logger = logging.getLogger(__name__)

EMERGENCY_WARNING = (
    "Emergency order placed outside normal time restrictions. Kitchen staff notified."
)


class PlaceTimedOrder:
    """Slot-gated placement: cutoff and capacity are enforced before the order reaches the ledger."""

    def __init__(
        self,
        time_slot_repository: TimeSlotRepository,
        order_repository: OrderRepository,
        daily_bill_repository: DailyBillRepository,
        publisher: EventPublisher,
        clock: Clock,
    ) -> None:
        self._time_slot_repository = time_slot_repository
        self._order_repository = order_repository
        self._daily_bill_repository = daily_bill_repository
        self._publisher = publisher
        self._clock = clock

    def execute(
        self,
        request_dto: PlaceTimedOrderRequest,
        trace_ctx: TraceContext,
    ) -> TimedOrderPlacedResponse:
        slot_id = TimeSlotId(request_dto.time_slot_id)
        slot = self._time_slot_repository.get(slot_id)
        if slot is None:
            raise InvalidTimeSlotError(f"invalid time slot {slot_id}")

        now = self._clock.now()
        order = _build_slot_order(request_dto, slot, now, id_prefix="ORD")

        restriction = evaluate_slot(slot, now)
        if not restriction.can_order:
            self._refuse(slot, restriction)

        reserved = self._time_slot_repository.try_reserve(slot_id)
        if reserved is None:
            # The slot filled up or was deactivated between the check above and the reservation.
            current = self._time_slot_repository.get(slot_id) or slot
            restriction = evaluate_slot(current, now)
            self._refuse(current, restriction if not restriction.can_order else fully_booked(current))

        try:
            record_in_ledger(self._daily_bill_repository, self._order_repository, slot, order, now)
        except Exception:
            self._time_slot_repository.release(slot_id)
            raise

        record_order_created(order, entry_point="timed")
        record_slot_occupancy(reserved)
        logger.info(
            "timed_order_placed",
            extra={
                "order_id": str(order.order_id),
                "time_slot_id": str(slot_id),
                "current_orders": reserved.current_orders,
            },
        )
        publish_placed(self._publisher, order, trace_ctx)

        tz = now.tzinfo
        return TimedOrderPlacedResponse(
            orderId=str(order.order_id),
            preparationDeadline=to_display_time(slot.preparation_deadline(now.date(), tz)),
            estimatedDelivery=to_display_time(slot.estimated_delivery(now.date(), tz)),
            qrCode=order.qr_code,
        )

    def _refuse(self, slot: TimeSlot, restriction: OrderRestriction) -> NoReturn:
        record_refusal(str(slot.slot_id), restriction.reason)
        logger.info(
            "timed_order_refused",
            extra={"time_slot_id": str(slot.slot_id), "reason": restriction.reason.value},
        )
        raise OrderWindowClosedError(
            restriction.message,
            reason=restriction.reason.value,
            time_slot_id=str(slot.slot_id),
        )


class PlaceEmergencyOrder:
    """Admin override that books into a slot's daily bill without cutoff or capacity checks.

    The slot counter is left untouched so the capacity invariant still holds for
    regular placements.
    """

    def __init__(
        self,
        time_slot_repository: TimeSlotRepository,
        order_repository: OrderRepository,
        daily_bill_repository: DailyBillRepository,
        publisher: EventPublisher,
        clock: Clock,
    ) -> None:
        self._time_slot_repository = time_slot_repository
        self._order_repository = order_repository
        self._daily_bill_repository = daily_bill_repository
        self._publisher = publisher
        self._clock = clock

    def execute(
        self,
        request_dto: EmergencyOrderRequest,
        trace_ctx: TraceContext,
    ) -> EmergencyOrderPlacedResponse:
        if not request_dto.admin_id.strip():
            raise InvalidPayloadError("adminId must be non-empty")
        slot_id = TimeSlotId(request_dto.time_slot_id)
        slot = self._time_slot_repository.get(slot_id)
        if slot is None:
            raise InvalidTimeSlotError(f"invalid time slot {slot_id}")

        now = self._clock.now()
        order = _build_slot_order(request_dto, slot, now, id_prefix="EMERGENCY")
        record_in_ledger(self._daily_bill_repository, self._order_repository, slot, order, now)

        record_order_created(order, entry_point="emergency")
        logger.warning(
            "emergency_order_placed",
            extra={
                "order_id": str(order.order_id),
                "time_slot_id": str(slot_id),
                "admin_id": request_dto.admin_id,
            },
        )
        publish_placed(self._publisher, order, trace_ctx)
        return EmergencyOrderPlacedResponse(
            orderId=str(order.order_id),
            warning=EMERGENCY_WARNING,
            qrCode=order.qr_code,
        )


def record_in_ledger(
    daily_bill_repository: DailyBillRepository,
    order_repository: OrderRepository,
    slot: TimeSlot,
    order: Order,
    now: datetime,
) -> None:
    service_date = now.date()
    daily_bill_repository.get_or_create(
        bill_date=service_date,
        time_slot_id=slot.slot_id,
        preparation_deadline=slot.preparation_deadline(service_date, now.tzinfo),
        now=now,
    )
    order_repository.add(order)


def publish_placed(publisher: EventPublisher, order: Order, trace_ctx: TraceContext) -> None:
    event = OrderPlaced(
        order_id=order.order_id,
        time_slot_id=order.time_slot_id,
        total=order.total,
        created_at=order.created_at,
    )
    message = serialize_order_event(
        event_type="order.placed",
        occurred_at=event.created_at,
        order=order,
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
    )
    publish_event(publisher, ORDER_EVENTS_CHANNEL, message, event_type="order.placed")


def _build_slot_order(
    request_dto: PlaceTimedOrderRequest,
    slot: TimeSlot,
    now: datetime,
    id_prefix: str,
) -> Order:
    lines = build_order_lines(request_dto.items)
    total = declared_total(lines, request_dto.total_amount)
    details = request_dto.customer_details
    delivery = delivery_details(details.name, details.room_number, details.phone_number)
    if not request_dto.customer_id.strip():
        raise InvalidPayloadError("customerId must be non-empty")

    order_id = new_order_id(now, prefix=id_prefix)
    try:
        return create_confirmed_order(
            order_id=order_id,
            customer_id=CustomerId(request_dto.customer_id),
            delivery=delivery,
            lines=lines,
            declared_total=total,
            order_type=OrderType.REGULAR,
            qr_code=issue_order_token(order_id),
            now=now,
            estimated_delivery=slot.estimated_delivery(now.date(), now.tzinfo),
            time_slot_id=slot.slot_id,
            service_date=now.date(),
        )
    except ValueError as exc:
        raise InvalidPayloadError(str(exc)) from exc
