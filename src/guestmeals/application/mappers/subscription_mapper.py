from __future__ import annotations

from guestmeals.application.dto.responses import MealPreferencesResponse, SubscriptionResponse
from guestmeals.domain.subscription.entities import Subscription


def to_subscription_response(subscription: Subscription) -> SubscriptionResponse:
    preferences = subscription.preferences
    return SubscriptionResponse(
        id=str(subscription.subscription_id),
        customerId=str(subscription.customer_id),
        planId=str(subscription.plan_id),
        planName=subscription.plan_name,
        price=subscription.price.amount,
        preferences=MealPreferencesResponse(
            mainCarb=preferences.main_carb,
            mealTimes=list(preferences.meal_times),
            startDate=preferences.start_date,
        ),
        status=subscription.status.value,
        subscribedAt=subscription.subscribed_at,
        validUntil=subscription.valid_until,
        qrCode=subscription.qr_code,
    )
