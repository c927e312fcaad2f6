from __future__ import annotations

from datetime import datetime
from sqlalchemy import DateTime, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.core.db import Base, utcnow


class CircuitExercise(Base):
    __tablename__ = "circuit_exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    circuit_id: Mapped[int] = mapped_column(
        ForeignKey("circuits.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    exercise_id: Mapped[int] = mapped_column(
        ForeignKey("exercises.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    position: Mapped[int] = mapped_column(Integer, nullable=False)

    default_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    default_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    default_time_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rest_after_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
