from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, func, or_, select, update

from guestmeals.application.ports.repositories import TimeSlotRepository
from guestmeals.domain.common.ids import TimeSlotId
from guestmeals.domain.slot.entities import TimeSlot, format_wall_clock, parse_wall_clock
from guestmeals.infrastructure.db.models.time_slot import TimeSlotModel
from guestmeals.infrastructure.db.session import get_engine, open_session


class SqlAlchemyTimeSlotRepository(TimeSlotRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list(self) -> list[TimeSlot]:
        statement = select(TimeSlotModel).order_by(TimeSlotModel.position, TimeSlotModel.id)
        with open_session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def get(self, slot_id: TimeSlotId) -> TimeSlot | None:
        with open_session(self._engine) as session:
            model = session.get(TimeSlotModel, str(slot_id))
            if model is None:
                return None
            return self._to_domain(model)

    def add(self, slot: TimeSlot) -> None:
        with open_session(self._engine) as session:
            position = session.execute(
                select(func.coalesce(func.max(TimeSlotModel.position), -1))
            ).scalar_one()
            session.add(
                TimeSlotModel(
                    id=str(slot.slot_id),
                    position=int(position) + 1,
                    name=slot.name,
                    start_time=format_wall_clock(slot.start_time),
                    end_time=format_wall_clock(slot.end_time),
                    cutoff_time=format_wall_clock(slot.cutoff_time),
                    is_active=slot.is_active,
                    max_orders=slot.max_orders,
                    current_orders=slot.current_orders,
                )
            )
            session.commit()

    def update_config(self, slot_id: TimeSlotId, changes: dict[str, Any]) -> TimeSlot | None:
        statement = (
            select(TimeSlotModel).where(TimeSlotModel.id == str(slot_id)).with_for_update()
        )
        with open_session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None

            # Merged against the locked row; raises ValueError on a cap below the live counter.
            updated = self._to_domain(model).with_config(changes)
            model.name = updated.name
            model.start_time = format_wall_clock(updated.start_time)
            model.end_time = format_wall_clock(updated.end_time)
            model.cutoff_time = format_wall_clock(updated.cutoff_time)
            model.is_active = updated.is_active
            model.max_orders = updated.max_orders
            session.commit()
        return updated

    def try_reserve(self, slot_id: TimeSlotId) -> TimeSlot | None:
        statement = (
            update(TimeSlotModel)
            .where(
                TimeSlotModel.id == str(slot_id),
                TimeSlotModel.is_active.is_(True),
                or_(
                    TimeSlotModel.max_orders.is_(None),
                    TimeSlotModel.current_orders < TimeSlotModel.max_orders,
                ),
            )
            .values(current_orders=TimeSlotModel.current_orders + 1)
        )
        with open_session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                return None
            model = session.execute(
                select(TimeSlotModel).where(TimeSlotModel.id == str(slot_id))
            ).scalar_one()
            reserved = self._to_domain(model)
            session.commit()
        return reserved

    def release(self, slot_id: TimeSlotId) -> None:
        statement = (
            update(TimeSlotModel)
            .where(TimeSlotModel.id == str(slot_id), TimeSlotModel.current_orders > 0)
            .values(current_orders=TimeSlotModel.current_orders - 1)
        )
        with open_session(self._engine) as session:
            session.execute(statement)
            session.commit()

    def reset_counters(self) -> int:
        with open_session(self._engine) as session:
            result = session.execute(update(TimeSlotModel).values(current_orders=0))
            session.commit()
        return int(result.rowcount or 0)

    def _to_domain(self, model: TimeSlotModel) -> TimeSlot:
        return TimeSlot(
            slot_id=TimeSlotId(model.id),
            name=model.name,
            start_time=parse_wall_clock(model.start_time),
            end_time=parse_wall_clock(model.end_time),
            cutoff_time=parse_wall_clock(model.cutoff_time),
            is_active=model.is_active,
            max_orders=model.max_orders,
            current_orders=model.current_orders,
        )
