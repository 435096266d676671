from __future__ import annotations

import logging

from guestmeals.application.dto.responses import OrderResponse
from guestmeals.application.mappers.event_envelope import serialize_order_event
from guestmeals.application.mappers.order_mapper import to_order_response
from guestmeals.application.metrics.order_lifecycle import (
    record_time_to_delivery,
    record_transition,
)
from guestmeals.application.ports.clock import Clock
from guestmeals.application.ports.publisher import ORDER_EVENTS_CHANNEL, EventPublisher
from guestmeals.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from guestmeals.application.use_cases.context import TraceContext, publish_event
from guestmeals.application.use_cases.errors import (
    InvalidPayloadError,
    OrderConflictError,
    OrderNotFoundError,
)
from guestmeals.domain.common.ids import AgentId, OrderId
from guestmeals.domain.order.entities import OrderStatus
from guestmeals.domain.order.events import OrderDelivered

logger = logging.getLogger(__name__)


class MarkDelivered:
    """Agent confirmation at the door. Repeating it for a delivered order is a no-op."""

    def __init__(
        self,
        order_repository: OrderRepository,
        publisher: EventPublisher,
        clock: Clock,
    ) -> None:
        self._order_repository = order_repository
        self._publisher = publisher
        self._clock = clock

    def execute(self, order_id: OrderId, agent_id: AgentId, trace_ctx: TraceContext) -> OrderResponse:
        if not agent_id.strip():
            raise InvalidPayloadError("agentId must be non-empty")

        order = self._order_repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        if order.status == OrderStatus.DELIVERED:
            logger.info(
                "order_already_delivered",
                extra={"order_id": str(order_id), "agent_id": str(agent_id)},
            )
            return to_order_response(order)

        now = self._clock.now()
        delivered = order.mark_delivered(agent_id, now)
        try:
            persisted = self._order_repository.update_status_with_version(
                order=delivered,
                expected_version=order.version,
            )
        except OptimisticConcurrencyError:
            current = self._order_repository.get(order_id)
            if current is None:
                raise OrderNotFoundError(f"order {order_id} not found")
            if current.status == OrderStatus.DELIVERED:
                return to_order_response(current)
            raise OrderConflictError(f"order {order_id} status update conflict")

        event = OrderDelivered(order_id=persisted.order_id, agent_id=agent_id, occurred_at=now)
        record_transition(from_status=order.status, to_status=OrderStatus.DELIVERED)
        record_time_to_delivery(persisted, now=event.occurred_at)
        logger.info(
            "order_delivered",
            extra={"order_id": str(order_id), "agent_id": str(agent_id)},
        )
        message = serialize_order_event(
            event_type="order.delivered",
            occurred_at=event.occurred_at,
            order=persisted,
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        )
        publish_event(self._publisher, ORDER_EVENTS_CHANNEL, message, event_type="order.delivered")
        return to_order_response(persisted)
