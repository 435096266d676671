from __future__ import annotations

from datetime import date, datetime, tzinfo

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError

from guestmeals.application.ports.repositories import DailyBillRepository
from guestmeals.domain.billing.entities import DailyBillHeader
from guestmeals.domain.common.ids import TimeSlotId
from guestmeals.infrastructure.clock import site_timezone
from guestmeals.infrastructure.db.models.billing import DailyBillModel
from guestmeals.infrastructure.db.repositories.datetimes import from_storage, to_storage
from guestmeals.infrastructure.db.session import get_engine, open_session


class SqlAlchemyDailyBillRepository(DailyBillRepository):
    def __init__(self, engine: Engine | None = None, tz: tzinfo | None = None) -> None:
        self._engine = engine or get_engine()
        self._tz = tz or site_timezone()

    def get_or_create(
        self,
        bill_date: date,
        time_slot_id: TimeSlotId,
        preparation_deadline: datetime,
        now: datetime,
    ) -> DailyBillHeader:
        existing = self.get(bill_date, time_slot_id)
        if existing is not None:
            return existing

        with open_session(self._engine) as session:
            session.add(
                DailyBillModel(
                    bill_date=bill_date,
                    time_slot_id=str(time_slot_id),
                    preparation_deadline=to_storage(preparation_deadline),
                    created_at=to_storage(now),
                )
            )
            try:
                session.commit()
            except IntegrityError:
                # Another placement created the header first.
                session.rollback()

        created = self.get(bill_date, time_slot_id)
        if created is None:
            raise RuntimeError(f"daily bill {bill_date}/{time_slot_id} not found after insert")
        return created

    def get(self, bill_date: date, time_slot_id: TimeSlotId) -> DailyBillHeader | None:
        with open_session(self._engine) as session:
            model = session.get(DailyBillModel, (bill_date, str(time_slot_id)))
            if model is None:
                return None
            return self._to_domain(model)

    def list_for_date(self, bill_date: date) -> list[DailyBillHeader]:
        statement = (
            select(DailyBillModel)
            .where(DailyBillModel.bill_date == bill_date)
            .order_by(DailyBillModel.created_at, DailyBillModel.time_slot_id)
        )
        with open_session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            return [self._to_domain(model) for model in models]

    def _to_domain(self, model: DailyBillModel) -> DailyBillHeader:
        return DailyBillHeader(
            bill_date=model.bill_date,
            time_slot_id=TimeSlotId(model.time_slot_id),
            preparation_deadline=from_storage(model.preparation_deadline, self._tz),
            created_at=from_storage(model.created_at, self._tz),
        )
