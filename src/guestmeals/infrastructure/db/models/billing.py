from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from guestmeals.infrastructure.db.models.base import Base


class DailyBillModel(Base):
    __tablename__ = "daily_bills"

    bill_date: Mapped[date] = mapped_column(Date, primary_key=True)
    time_slot_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    preparation_deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
