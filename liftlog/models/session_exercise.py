from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.core.db import Base


class SessionExercise(Base):
    """Per-run copy of a template row.

    ``exercise_name`` is captured when the row is created so history still
    reads correctly after the exercise is renamed or deleted.
    """

    __tablename__ = "session_exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    session_id: Mapped[int] = mapped_column(
        ForeignKey("workout_sessions.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    exercise_id: Mapped[int | None] = mapped_column(
        ForeignKey("exercises.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
    exercise_name: Mapped[str] = mapped_column(String(120), nullable=False)

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    circuit_block_id: Mapped[int | None] = mapped_column(
        ForeignKey("session_circuit_blocks.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    circuit_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    circuit_rounds: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # template row this was copied from, used to look up planned sets
    source_template_exercise_id: Mapped[int | None] = mapped_column(
        ForeignKey("workout_template_exercises.id", ondelete="SET NULL"),
        nullable=True,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
