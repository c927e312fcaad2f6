from __future__ import annotations

from datetime import datetime
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.core.db import Base, utcnow


class Exercise(Base):
    __tablename__ = "exercises"
    __table_args__ = (UniqueConstraint("user_id", "name", name="exercises_user_name_unique"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # NULL for system exercises shared by everyone
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=True,
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    category: Mapped[str | None] = mapped_column(String(60), nullable=True)

    track_weight: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    track_reps: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    track_time: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    track_distance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    weight_unit: Mapped[str] = mapped_column(String(10), nullable=False, default="lbs")
    distance_unit: Mapped[str] = mapped_column(String(10), nullable=False, default="mi")
    time_unit: Mapped[str] = mapped_column(String(10), nullable=False, default="sec")

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
