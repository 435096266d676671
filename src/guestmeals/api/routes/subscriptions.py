from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from guestmeals.api.dependencies import Container, current_trace_context, get_container
from guestmeals.application.dto.requests import CreateSubscriptionRequest
from guestmeals.application.dto.responses import (
    CustomerSubscriptionsResponse,
    SubscriptionResponse,
)
from guestmeals.application.use_cases.subscriptions import (
    ChangeSubscriptionStatus,
    CreateSubscription,
    GetSubscription,
    ListCustomerSubscriptions,
)
from guestmeals.domain.common.ids import CustomerId, SubscriptionId

router = APIRouter()


def _change_status(container: Container, subscription_id: str, action: str) -> SubscriptionResponse:
    use_case = ChangeSubscriptionStatus(
        subscription_repository=container.subscription_repository,
        publisher=container.publisher,
        clock=container.clock,
    )
    return use_case.execute(
        subscription_id=SubscriptionId(subscription_id),
        action=action,
        trace_ctx=current_trace_context(),
    )


@router.post(
    "/v1/subscriptions",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_subscription(
    request_dto: CreateSubscriptionRequest,
    container: Container = Depends(get_container),
) -> SubscriptionResponse:
    use_case = CreateSubscription(
        subscription_repository=container.subscription_repository,
        publisher=container.publisher,
        clock=container.clock,
    )
    return use_case.execute(request_dto=request_dto, trace_ctx=current_trace_context())


@router.get("/v1/subscriptions", response_model=CustomerSubscriptionsResponse)
def list_customer_subscriptions(
    customer_id: str = Query(alias="customerId", min_length=1),
    container: Container = Depends(get_container),
) -> CustomerSubscriptionsResponse:
    use_case = ListCustomerSubscriptions(subscription_repository=container.subscription_repository)
    return use_case.execute(customer_id=CustomerId(customer_id))


@router.get("/v1/subscriptions/{subscription_id}", response_model=SubscriptionResponse)
def get_subscription(
    subscription_id: str,
    container: Container = Depends(get_container),
) -> SubscriptionResponse:
    use_case = GetSubscription(subscription_repository=container.subscription_repository)
    return use_case.execute(subscription_id=SubscriptionId(subscription_id))


@router.post("/v1/subscriptions/{subscription_id}/pause", response_model=SubscriptionResponse)
def pause_subscription(
    subscription_id: str,
    container: Container = Depends(get_container),
) -> SubscriptionResponse:
    return _change_status(container, subscription_id, "pause")


@router.post("/v1/subscriptions/{subscription_id}/resume", response_model=SubscriptionResponse)
def resume_subscription(
    subscription_id: str,
    container: Container = Depends(get_container),
) -> SubscriptionResponse:
    return _change_status(container, subscription_id, "resume")


@router.post("/v1/subscriptions/{subscription_id}/cancel", response_model=SubscriptionResponse)
def cancel_subscription(
    subscription_id: str,
    container: Container = Depends(get_container),
) -> SubscriptionResponse:
    return _change_status(container, subscription_id, "cancel")
