from __future__ import annotations

import logging
from datetime import timedelta

from guestmeals.application.dto.requests import CreateOrderRequest
from guestmeals.application.dto.responses import OrderResponse
from guestmeals.application.mappers.order_mapper import to_order_response
from guestmeals.application.metrics.order_lifecycle import record_order_created
from guestmeals.application.ports.clock import Clock
from guestmeals.application.ports.publisher import EventPublisher
from guestmeals.application.ports.repositories import OrderRepository
from guestmeals.application.use_cases.context import TraceContext
from guestmeals.application.use_cases.errors import InvalidPayloadError
from guestmeals.application.use_cases.order_payload import (
    build_order_lines,
    declared_total,
    delivery_details,
)
from guestmeals.application.use_cases.place_timed_order import publish_placed
from guestmeals.domain.common.ids import CustomerId
from guestmeals.domain.order.entities import OrderType, create_confirmed_order
from guestmeals.domain.qr.tokens import issue_order_token, new_order_id

logger = logging.getLogger(__name__)

CART_DELIVERY_ESTIMATE = timedelta(minutes=30)


class CreateOrder:
    """Cart checkout: no slot, no cutoff, no capacity; always confirmed."""

    def __init__(
        self,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        clock: Clock,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._clock = clock

    def execute(self, request_dto: CreateOrderRequest, trace_ctx: TraceContext) -> OrderResponse:
        if not request_dto.customer_id.strip():
            raise InvalidPayloadError("customerId must be non-empty")
        lines = build_order_lines(request_dto.items)
        total = declared_total(lines, request_dto.total_amount)
        delivery = delivery_details(
            request_dto.customer_name,
            request_dto.room_number,
            request_dto.phone_number,
        )

        now = self._clock.now()
        order_id = new_order_id(now)
        try:
            order = create_confirmed_order(
                order_id=order_id,
                customer_id=CustomerId(request_dto.customer_id),
                delivery=delivery,
                lines=lines,
                declared_total=total,
                order_type=OrderType(request_dto.order_type),
                qr_code=issue_order_token(order_id),
                now=now,
                estimated_delivery=now + CART_DELIVERY_ESTIMATE,
            )
        except ValueError as exc:
            raise InvalidPayloadError(str(exc)) from exc

        self._order_repository.add(order)
        record_order_created(order, entry_point="cart")
        logger.info(
            "cart_order_created",
            extra={"order_id": str(order.order_id), "customer_id": str(order.customer_id)},
        )
        publish_placed(self._publisher, order, trace_ctx)
        return to_order_response(order)
