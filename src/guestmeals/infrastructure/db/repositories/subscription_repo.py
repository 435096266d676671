from __future__ import annotations

from datetime import tzinfo

from sqlalchemy import Engine, select

from guestmeals.application.ports.repositories import SubscriptionRepository
from guestmeals.domain.common.ids import CustomerId, PlanId, SubscriptionId
from guestmeals.domain.common.money import Money
from guestmeals.domain.subscription.entities import (
    MealPreferences,
    Subscription,
    SubscriptionStatus,
)
from guestmeals.infrastructure.clock import site_timezone
from guestmeals.infrastructure.db.models.subscription import SubscriptionModel
from guestmeals.infrastructure.db.repositories.datetimes import from_storage, to_storage
from guestmeals.infrastructure.db.session import get_engine, open_session


class SqlAlchemySubscriptionRepository(SubscriptionRepository):
    def __init__(self, engine: Engine | None = None, tz: tzinfo | None = None) -> None:
        self._engine = engine or get_engine()
        self._tz = tz or site_timezone()

    def add(self, subscription: Subscription) -> None:
        with open_session(self._engine) as session:
            session.add(self._to_model(subscription))
            session.commit()

    def get(self, subscription_id: SubscriptionId) -> Subscription | None:
        with open_session(self._engine) as session:
            model = session.get(SubscriptionModel, str(subscription_id))
            if model is None:
                return None
            return self._to_domain(model)

    def get_by_qr_code(self, qr_code: str) -> Subscription | None:
        statement = select(SubscriptionModel).where(SubscriptionModel.qr_code == qr_code).limit(1)
        with open_session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def list_for_customer(self, customer_id: CustomerId) -> list[Subscription]:
        statement = (
            select(SubscriptionModel)
            .where(SubscriptionModel.customer_id == str(customer_id))
            .order_by(SubscriptionModel.subscribed_at, SubscriptionModel.id)
        )
        with open_session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            return [self._to_domain(model) for model in models]

    def list_active(self) -> list[Subscription]:
        statement = (
            select(SubscriptionModel)
            .where(SubscriptionModel.status == SubscriptionStatus.ACTIVE.value)
            .order_by(SubscriptionModel.subscribed_at, SubscriptionModel.id)
        )
        with open_session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            return [self._to_domain(model) for model in models]

    def update(self, subscription: Subscription) -> None:
        with open_session(self._engine) as session:
            model = session.get(SubscriptionModel, str(subscription.subscription_id))
            if model is None:
                raise KeyError(f"subscription {subscription.subscription_id} not found")
            model.status = subscription.status.value
            model.valid_until = to_storage(subscription.valid_until)
            session.commit()

    def _to_model(self, subscription: Subscription) -> SubscriptionModel:
        return SubscriptionModel(
            id=str(subscription.subscription_id),
            customer_id=str(subscription.customer_id),
            plan_id=str(subscription.plan_id),
            plan_name=subscription.plan_name,
            price=subscription.price.amount,
            currency=subscription.price.currency,
            main_carb=subscription.preferences.main_carb,
            meal_times=list(subscription.preferences.meal_times),
            start_date=subscription.preferences.start_date,
            status=subscription.status.value,
            subscribed_at=to_storage(subscription.subscribed_at),
            valid_until=to_storage(subscription.valid_until),
            qr_code=subscription.qr_code,
        )

    def _to_domain(self, model: SubscriptionModel) -> Subscription:
        return Subscription(
            subscription_id=SubscriptionId(model.id),
            customer_id=CustomerId(model.customer_id),
            plan_id=PlanId(model.plan_id),
            plan_name=model.plan_name,
            price=Money(amount=model.price, currency=model.currency),
            preferences=MealPreferences(
                main_carb=model.main_carb,
                meal_times=tuple(model.meal_times),
                start_date=model.start_date,
            ),
            status=SubscriptionStatus(model.status),
            subscribed_at=from_storage(model.subscribed_at, self._tz),
            valid_until=from_storage(model.valid_until, self._tz),
            qr_code=model.qr_code,
        )
