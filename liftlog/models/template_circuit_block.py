from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.core.db import Base


class TemplateCircuitBlock(Base):
    """A circuit expanded into a template.

    Member rows point at the block through ``circuit_block_id``; the block
    owns the round count so updating or removing a circuit never depends on
    which rows happen to sit next to each other.
    """

    __tablename__ = "template_circuit_blocks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    template_id: Mapped[int] = mapped_column(
        ForeignKey("workout_templates.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    # source circuit; cleared if the user deletes the circuit itself
    circuit_id: Mapped[int | None] = mapped_column(
        ForeignKey("circuits.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    rounds: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    rest_between_exercises_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rest_between_rounds_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
