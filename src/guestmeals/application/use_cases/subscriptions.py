from __future__ import annotations

import logging
from datetime import datetime

from guestmeals.application.dto.requests import CreateSubscriptionRequest
from guestmeals.application.dto.responses import (
    CustomerSubscriptionsResponse,
    SubscriptionResponse,
)
from guestmeals.application.mappers.event_envelope import serialize_subscription_event
from guestmeals.application.mappers.subscription_mapper import to_subscription_response
from guestmeals.application.metrics.order_lifecycle import record_subscription_event
from guestmeals.application.ports.clock import Clock
from guestmeals.application.ports.publisher import SUBSCRIPTION_EVENTS_CHANNEL, EventPublisher
from guestmeals.application.ports.repositories import SubscriptionRepository
from guestmeals.application.use_cases.context import TraceContext, publish_event
from guestmeals.application.use_cases.errors import (
    ConflictError,
    InvalidPayloadError,
    SubscriptionNotFoundError,
)
from guestmeals.domain.common.ids import CustomerId, PlanId, SubscriptionId
from guestmeals.domain.common.money import Money
from guestmeals.domain.qr.tokens import issue_subscription_token, new_subscription_id
from guestmeals.domain.subscription.entities import (
    MealPreferences,
    Subscription,
    SubscriptionTransitionError,
    create_active_subscription,
)

logger = logging.getLogger(__name__)


class InvalidSubscriptionTransitionError(ConflictError):
    pass


class CreateSubscription:
    def __init__(
        self,
        subscription_repository: SubscriptionRepository,
        publisher: EventPublisher,
        clock: Clock,
    ) -> None:
        self._subscription_repository = subscription_repository
        self._publisher = publisher
        self._clock = clock

    def execute(
        self,
        request_dto: CreateSubscriptionRequest,
        trace_ctx: TraceContext,
    ) -> SubscriptionResponse:
        if not request_dto.customer_id.strip():
            raise InvalidPayloadError("customerId must be non-empty")
        now = self._clock.now()
        subscription_id = new_subscription_id(now)
        preferences = request_dto.preferences
        try:
            subscription = create_active_subscription(
                subscription_id=subscription_id,
                customer_id=CustomerId(request_dto.customer_id),
                plan_id=PlanId(request_dto.plan_id),
                plan_name=request_dto.plan_name,
                price=Money(amount=request_dto.price),
                preferences=MealPreferences(
                    main_carb=preferences.main_carb,
                    meal_times=tuple(preferences.meal_times),
                    start_date=preferences.start_date,
                ),
                qr_code=issue_subscription_token(subscription_id),
                now=now,
            )
        except ValueError as exc:
            raise InvalidPayloadError(str(exc)) from exc

        self._subscription_repository.add(subscription)
        record_subscription_event("created")
        logger.info(
            "subscription_created",
            extra={
                "subscription_id": str(subscription_id),
                "customer_id": str(subscription.customer_id),
            },
        )
        _publish(self._publisher, "subscription.created", subscription, now, trace_ctx)
        return to_subscription_response(subscription)


class GetSubscription:
    def __init__(self, subscription_repository: SubscriptionRepository) -> None:
        self._subscription_repository = subscription_repository

    def execute(self, subscription_id: SubscriptionId) -> SubscriptionResponse:
        subscription = self._subscription_repository.get(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(f"subscription {subscription_id} not found")
        return to_subscription_response(subscription)


class ListCustomerSubscriptions:
    def __init__(self, subscription_repository: SubscriptionRepository) -> None:
        self._subscription_repository = subscription_repository

    def execute(self, customer_id: CustomerId) -> CustomerSubscriptionsResponse:
        subscriptions = self._subscription_repository.list_for_customer(customer_id)
        return CustomerSubscriptionsResponse(
            subscriptions=[to_subscription_response(item) for item in subscriptions]
        )


class ChangeSubscriptionStatus:
    """Pause, resume or cancel. Cancellation is terminal."""

    _ACTIONS = ("pause", "resume", "cancel")

    def __init__(
        self,
        subscription_repository: SubscriptionRepository,
        publisher: EventPublisher,
        clock: Clock,
    ) -> None:
        self._subscription_repository = subscription_repository
        self._publisher = publisher
        self._clock = clock

    def execute(
        self,
        subscription_id: SubscriptionId,
        action: str,
        trace_ctx: TraceContext,
    ) -> SubscriptionResponse:
        if action not in self._ACTIONS:
            raise InvalidPayloadError(f"unknown subscription action: {action}")

        subscription = self._subscription_repository.get(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(f"subscription {subscription_id} not found")

        try:
            changed = getattr(subscription, action)()
        except SubscriptionTransitionError as exc:
            raise InvalidSubscriptionTransitionError(str(exc)) from exc

        if changed == subscription:
            return to_subscription_response(subscription)

        self._subscription_repository.update(changed)
        record_subscription_event(changed.status.value)
        logger.info(
            "subscription_status_changed",
            extra={
                "subscription_id": str(subscription_id),
                "from_status": subscription.status.value,
                "to_status": changed.status.value,
            },
        )
        _publish(
            self._publisher,
            f"subscription.{changed.status.value}",
            changed,
            self._clock.now(),
            trace_ctx,
        )
        return to_subscription_response(changed)


def _publish(
    publisher: EventPublisher,
    event_type: str,
    subscription: Subscription,
    occurred_at: datetime,
    trace_ctx: TraceContext,
) -> None:
    message = serialize_subscription_event(
        event_type=event_type,
        occurred_at=occurred_at,
        subscription=subscription,
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
    )
    publish_event(publisher, SUBSCRIPTION_EVENTS_CHANNEL, message, event_type=event_type)
