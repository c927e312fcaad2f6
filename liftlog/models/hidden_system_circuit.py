from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from liftlog.core.db import Base


class HiddenSystemCircuit(Base):
    __tablename__ = "hidden_system_circuits"
    __table_args__ = (UniqueConstraint("user_id", "circuit_id", name="hidden_circuits_user_circuit_unique"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    circuit_id: Mapped[int] = mapped_column(ForeignKey("circuits.id", ondelete="CASCADE"), nullable=False)
