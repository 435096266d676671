from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from guestmeals.infrastructure.db.models.base import Base


class TimeSlotModel(Base):
    __tablename__ = "time_slots"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    cutoff_time: Mapped[str] = mapped_column(String(5), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    max_orders: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
