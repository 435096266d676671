from __future__ import annotations

import json
import sys
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from guestmeals.application.dto.requests import (
    CreateSubscriptionRequest,
    MealPreferencesRequest,
)
from guestmeals.application.use_cases.billing import GetBusinessSummary
from guestmeals.application.use_cases.context import TraceContext
from guestmeals.application.use_cases.errors import InvalidPayloadError, SubscriptionNotFoundError
from guestmeals.application.use_cases.subscriptions import (
    ChangeSubscriptionStatus,
    CreateSubscription,
    GetSubscription,
    InvalidSubscriptionTransitionError,
    ListCustomerSubscriptions,
)
from guestmeals.domain.common.ids import CustomerId, SubscriptionId
from guestmeals.domain.subscription.entities import SubscriptionStatus
from guestmeals.infrastructure.memory.repositories import (
    InMemoryOrderRepository,
    InMemorySubscriptionRepository,
)

IST = ZoneInfo("Asia/Kolkata")
NOW = datetime(2024, 5, 30, 18, 0, tzinfo=IST)


class FixedClock:
    def now(self) -> datetime:
        return NOW


class RecordingPublisher:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def publish(self, channel: str, message: str) -> None:
        self.messages.append((channel, message))


def _request(customer_id: str = "cus_001", price: int = 4500) -> CreateSubscriptionRequest:
    return CreateSubscriptionRequest(
        customer_id=customer_id,
        plan_id="plan_veg",
        plan_name="Veg Monthly",
        price=price,
        preferences=MealPreferencesRequest(
            main_carb="rice",
            meal_times=["lunch", "dinner"],
            start_date=date(2024, 6, 1),
        ),
    )


def _setup():
    repository = InMemorySubscriptionRepository()
    publisher = RecordingPublisher()
    create = CreateSubscription(
        subscription_repository=repository,
        publisher=publisher,
        clock=FixedClock(),
    )
    change = ChangeSubscriptionStatus(
        subscription_repository=repository,
        publisher=publisher,
        clock=FixedClock(),
    )
    return repository, publisher, create, change


def test_create_subscription_is_active_for_thirty_days() -> None:
    repository, publisher, create, _ = _setup()

    response = create.execute(_request(), TraceContext())

    assert response.id.startswith("SUB-")
    assert response.status == "active"
    assert response.qrCode.startswith(f"MONTHLY-QR-{response.id}-")
    assert response.subscribedAt == NOW
    assert response.validUntil == datetime(2024, 7, 1, 0, 0, tzinfo=IST)
    assert response.preferences.mealTimes == ["lunch", "dinner"]
    assert repository.get(SubscriptionId(response.id)) is not None

    channel, message = publisher.messages[0]
    assert channel == "events:subscriptions"
    assert json.loads(message)["event_type"] == "subscription.created"


def test_create_subscription_rejects_blank_fields() -> None:
    _, _, create, _ = _setup()

    with pytest.raises(InvalidPayloadError):
        create.execute(_request(customer_id=" "), TraceContext())

    request_dto = _request()
    request_dto.preferences.main_carb = ""
    with pytest.raises(InvalidPayloadError):
        create.execute(request_dto, TraceContext())


def test_pause_resume_cancel() -> None:
    repository, publisher, create, change = _setup()
    created = create.execute(_request(), TraceContext())
    subscription_id = SubscriptionId(created.id)

    assert change.execute(subscription_id, "pause", TraceContext()).status == "paused"
    assert change.execute(subscription_id, "pause", TraceContext()).status == "paused"
    assert change.execute(subscription_id, "resume", TraceContext()).status == "active"
    assert change.execute(subscription_id, "cancel", TraceContext()).status == "cancelled"

    stored = repository.get(subscription_id)
    assert stored is not None
    assert stored.status == SubscriptionStatus.CANCELLED
    event_types = [json.loads(message)["event_type"] for _, message in publisher.messages]
    assert event_types == [
        "subscription.created",
        "subscription.paused",
        "subscription.active",
        "subscription.cancelled",
    ]


def test_cancelled_subscription_cannot_come_back() -> None:
    _, _, create, change = _setup()
    created = create.execute(_request(), TraceContext())
    subscription_id = SubscriptionId(created.id)
    change.execute(subscription_id, "cancel", TraceContext())

    with pytest.raises(InvalidSubscriptionTransitionError):
        change.execute(subscription_id, "resume", TraceContext())
    with pytest.raises(InvalidSubscriptionTransitionError):
        change.execute(subscription_id, "pause", TraceContext())
    assert change.execute(subscription_id, "cancel", TraceContext()).status == "cancelled"


def test_unknown_subscription_and_action() -> None:
    _, _, create, change = _setup()
    created = create.execute(_request(), TraceContext())

    with pytest.raises(SubscriptionNotFoundError):
        change.execute(SubscriptionId("SUB-404"), "pause", TraceContext())
    with pytest.raises(InvalidPayloadError):
        change.execute(SubscriptionId(created.id), "renew", TraceContext())


def test_lookup_and_list_for_customer() -> None:
    repository, _, create, _ = _setup()
    first = create.execute(_request(), TraceContext())
    create.execute(_request(customer_id="cus_002"), TraceContext())

    fetched = GetSubscription(subscription_repository=repository).execute(SubscriptionId(first.id))
    listed = ListCustomerSubscriptions(subscription_repository=repository).execute(
        CustomerId("cus_001")
    )

    assert fetched.id == first.id
    assert [item.id for item in listed.subscriptions] == [first.id]
    with pytest.raises(SubscriptionNotFoundError):
        GetSubscription(subscription_repository=repository).execute(SubscriptionId("SUB-404"))


def test_business_summary_counts_active_subscriptions_only() -> None:
    repository, _, create, change = _setup()
    create.execute(_request(price=4500), TraceContext())
    paused = create.execute(_request(customer_id="cus_002", price=3000), TraceContext())
    change.execute(SubscriptionId(paused.id), "pause", TraceContext())

    summary = GetBusinessSummary(
        order_repository=InMemoryOrderRepository(),
        subscription_repository=repository,
    ).execute()

    assert summary.totalOrders == 0
    assert summary.activeSubscriptions == 1
    assert summary.monthlyRevenue == 4500
