from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.core.db import Base


class SessionCircuitBlock(Base):
    __tablename__ = "session_circuit_blocks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    session_id: Mapped[int] = mapped_column(
        ForeignKey("workout_sessions.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    circuit_id: Mapped[int | None] = mapped_column(
        ForeignKey("circuits.id", ondelete="SET NULL"),
        nullable=True,
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    rounds: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    rest_between_exercises_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rest_between_rounds_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
