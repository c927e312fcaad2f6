from __future__ import annotations

from sqlalchemy import Boolean, Float, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.core.db import Base


class PlannedSet(Base):
    __tablename__ = "planned_sets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    template_exercise_id: Mapped[int] = mapped_column(
        ForeignKey("workout_template_exercises.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    set_number: Mapped[int] = mapped_column(Integer, nullable=False)
    target_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    target_time_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_distance: Mapped[float | None] = mapped_column(Float, nullable=True)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_warmup: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
