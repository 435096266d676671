from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from enum import Enum

from guestmeals.domain.common.ids import CustomerId, PlanId, SubscriptionId
from guestmeals.domain.common.money import Money

SUBSCRIPTION_PERIOD = timedelta(days=30)


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class MealPreferences:
    main_carb: str
    meal_times: tuple[str, ...]
    start_date: date

    def __post_init__(self) -> None:
        if not self.main_carb.strip():
            raise ValueError("main_carb must be non-empty")
        if not self.meal_times:
            raise ValueError("at least one meal time is required")


@dataclass(frozen=True)
class Subscription:
    subscription_id: SubscriptionId
    customer_id: CustomerId
    plan_id: PlanId
    plan_name: str
    price: Money
    preferences: MealPreferences
    status: SubscriptionStatus
    subscribed_at: datetime
    valid_until: datetime
    qr_code: str

    def __post_init__(self) -> None:
        if not self.plan_name.strip():
            raise ValueError("plan_name must be non-empty")
        if not self.qr_code:
            raise ValueError("qr_code must be non-empty")

    def is_redeemable(self, now: datetime) -> bool:
        return self.status == SubscriptionStatus.ACTIVE and now < self.valid_until

    def pause(self) -> Subscription:
        if self.status == SubscriptionStatus.PAUSED:
            return self
        if self.status != SubscriptionStatus.ACTIVE:
            raise SubscriptionTransitionError(
                f"cannot pause subscription from status={self.status.value}"
            )
        return replace(self, status=SubscriptionStatus.PAUSED)

    def resume(self) -> Subscription:
        if self.status == SubscriptionStatus.ACTIVE:
            return self
        if self.status != SubscriptionStatus.PAUSED:
            raise SubscriptionTransitionError(
                f"cannot resume subscription from status={self.status.value}"
            )
        return replace(self, status=SubscriptionStatus.ACTIVE)

    def cancel(self) -> Subscription:
        if self.status == SubscriptionStatus.CANCELLED:
            return self
        return replace(self, status=SubscriptionStatus.CANCELLED)


def subscription_valid_until(start_date: date, now: datetime) -> datetime:
    """Start of the first day after the 30-day period, in the same zone as ``now``."""
    return datetime.combine(start_date, time.min, tzinfo=now.tzinfo) + SUBSCRIPTION_PERIOD


def create_active_subscription(
    subscription_id: SubscriptionId,
    customer_id: CustomerId,
    plan_id: PlanId,
    plan_name: str,
    price: Money,
    preferences: MealPreferences,
    qr_code: str,
    now: datetime,
) -> Subscription:
    return Subscription(
        subscription_id=subscription_id,
        customer_id=customer_id,
        plan_id=plan_id,
        plan_name=plan_name,
        price=price,
        preferences=preferences,
        status=SubscriptionStatus.ACTIVE,
        subscribed_at=now,
        valid_until=subscription_valid_until(preferences.start_date, now),
        qr_code=qr_code,
    )


class SubscriptionTransitionError(Exception):
    pass
