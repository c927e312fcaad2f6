from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.core.db import Base


class HiddenSystemExercise(Base):
    __tablename__ = "hidden_system_exercises"
    __table_args__ = (UniqueConstraint("user_id", "exercise_id", name="hidden_exercises_user_exercise_unique"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False)
