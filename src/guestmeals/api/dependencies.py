from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from opentelemetry import trace
from starlette.requests import Request

from guestmeals.api.middleware.request_id import get_request_id
from guestmeals.application.ports.clock import Clock
from guestmeals.application.ports.publisher import EventPublisher
from guestmeals.application.ports.repositories import (
    DailyBillRepository,
    OrderRepository,
    SubscriptionRepository,
    TimeSlotRepository,
)
from guestmeals.application.use_cases.context import TraceContext
from guestmeals.application.use_cases.ledger import LedgerReader
from guestmeals.application.use_cases.seed_time_slots import SeedTimeSlots
from guestmeals.infrastructure.clock import SystemClock
from guestmeals.infrastructure.db.repositories.billing_repo import SqlAlchemyDailyBillRepository
from guestmeals.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from guestmeals.infrastructure.db.repositories.subscription_repo import (
    SqlAlchemySubscriptionRepository,
)
from guestmeals.infrastructure.db.repositories.time_slot_repo import SqlAlchemyTimeSlotRepository
from guestmeals.infrastructure.db.schema import migrate_schema
from guestmeals.infrastructure.db.session import get_engine
from guestmeals.infrastructure.memory.repositories import (
    InMemoryDailyBillRepository,
    InMemoryOrderRepository,
    InMemorySubscriptionRepository,
    InMemoryTimeSlotRepository,
)
from guestmeals.infrastructure.messaging.redis_client import redis_configured
from guestmeals.infrastructure.messaging.redis_publisher import (
    LoggingEventPublisher,
    RedisEventPublisher,
)

logger = logging.getLogger(__name__)


@dataclass
class Container:
    time_slot_repository: TimeSlotRepository
    order_repository: OrderRepository
    daily_bill_repository: DailyBillRepository
    subscription_repository: SubscriptionRepository
    publisher: EventPublisher
    clock: Clock
    storage: str = "memory"

    @property
    def ledger(self) -> LedgerReader:
        return LedgerReader(
            daily_bill_repository=self.daily_bill_repository,
            order_repository=self.order_repository,
        )


def build_memory_container(
    publisher: EventPublisher | None = None,
    clock: Clock | None = None,
) -> Container:
    return Container(
        time_slot_repository=InMemoryTimeSlotRepository(),
        order_repository=InMemoryOrderRepository(),
        daily_bill_repository=InMemoryDailyBillRepository(),
        subscription_repository=InMemorySubscriptionRepository(),
        publisher=publisher or LoggingEventPublisher(),
        clock=clock or SystemClock(),
    )


def build_sql_container(publisher: EventPublisher, clock: Clock) -> Container:
    engine = get_engine()
    migrate_schema(engine)
    return Container(
        time_slot_repository=SqlAlchemyTimeSlotRepository(engine),
        order_repository=SqlAlchemyOrderRepository(engine),
        daily_bill_repository=SqlAlchemyDailyBillRepository(engine),
        subscription_repository=SqlAlchemySubscriptionRepository(engine),
        publisher=publisher,
        clock=clock,
        storage="sql",
    )


def build_container() -> Container:
    publisher: EventPublisher = (
        RedisEventPublisher() if redis_configured() else LoggingEventPublisher()
    )
    clock = SystemClock()
    if os.getenv("DATABASE_URL"):
        container = build_sql_container(publisher=publisher, clock=clock)
    else:
        container = build_memory_container(publisher=publisher, clock=clock)

    seeded = SeedTimeSlots(container.time_slot_repository).execute()
    logger.info(
        "container_ready",
        extra={"storage": container.storage, "slots_seeded": seeded},
    )
    return container


def get_container(request: Request) -> Container:
    return request.app.state.container


def current_trace_context() -> TraceContext:
    span_context = trace.get_current_span().get_span_context()
    trace_id = format(span_context.trace_id, "032x") if span_context.is_valid else None
    return TraceContext(trace_id=trace_id, request_id=get_request_id())
