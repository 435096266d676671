from __future__ import annotations

import logging

from guestmeals.application.dto.responses import OrderResponse
from guestmeals.application.mappers.event_envelope import serialize_order_event
from guestmeals.application.mappers.order_mapper import to_order_response
from guestmeals.application.metrics.order_lifecycle import record_transition
from guestmeals.application.ports.clock import Clock
from guestmeals.application.ports.publisher import ORDER_EVENTS_CHANNEL, EventPublisher
from guestmeals.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from guestmeals.application.use_cases.context import TraceContext, publish_event
from guestmeals.application.use_cases.errors import (
    InvalidOrderTransitionError,
    InvalidPayloadError,
    OrderConflictError,
    OrderNotFoundError,
)
from guestmeals.domain.common.ids import OrderId
from guestmeals.domain.order.entities import OrderStatus, OrderTransitionError
from guestmeals.domain.order.events import OrderStatusChanged

logger = logging.getLogger(__name__)


class UpdateOrderStatus:
    """Kitchen-side progress: confirmed -> preparing -> ready, one step at a time."""

    def __init__(
        self,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        clock: Clock,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._clock = clock

    def execute(self, order_id: OrderId, status: str, trace_ctx: TraceContext) -> OrderResponse:
        try:
            target = OrderStatus(status.lower())
        except ValueError as exc:
            raise InvalidPayloadError(f"invalid order status: {status}") from exc

        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")

        if order.status == target:
            return to_order_response(order)
        if target.rank < order.status.rank:
            raise InvalidOrderTransitionError(
                f"cannot move order back from status={order.status.value} to status={target.value}"
            )

        try:
            advanced = order.advance_in_kitchen(target)
        except OrderTransitionError as exc:
            raise InvalidOrderTransitionError(str(exc)) from exc

        try:
            persisted = self._order_repository.update_status_with_version(
                order=advanced,
                expected_version=order.version,
            )
        except OptimisticConcurrencyError:
            current = self._order_repository.get(order_id)
            if current is None:
                raise OrderNotFoundError(f"order {order_id} not found")
            if current.status == target:
                return to_order_response(current)
            raise OrderConflictError(f"order {order_id} status update conflict")

        event = OrderStatusChanged(
            order_id=persisted.order_id,
            from_status=order.status,
            to_status=persisted.status,
            occurred_at=self._clock.now(),
        )
        record_transition(from_status=event.from_status, to_status=event.to_status)
        logger.info(
            "order_status_changed",
            extra={
                "order_id": str(order_id),
                "from_status": event.from_status.value,
                "to_status": event.to_status.value,
            },
        )
        message = serialize_order_event(
            event_type=f"order.{persisted.status.value}",
            occurred_at=event.occurred_at,
            order=persisted,
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        )
        publish_event(
            self._publisher,
            ORDER_EVENTS_CHANNEL,
            message,
            event_type=f"order.{persisted.status.value}",
        )
        return to_order_response(persisted)
