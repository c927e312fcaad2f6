from __future__ import annotations

from datetime import date, datetime
from sqlalchemy import Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.core.db import Base, utcnow

SCHEDULE_STATUSES = ("planned", "completed", "skipped")


class WorkoutScheduleItem(Base):
    __tablename__ = "workout_schedule"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    template_id: Mapped[int] = mapped_column(
        ForeignKey("workout_templates.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    scheduled_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="planned")  # planned/completed/skipped

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
