"""Position bookkeeping for ordered child rows.

Template rows, session rows and circuit members all keep a 1-based
``position``; these helpers keep it dense after inserts and deletes and drop
circuit blocks that no longer have members.
"""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.exceptions import BadRequestException
from liftlog.models.circuit_exercise import CircuitExercise
from liftlog.models.session_circuit_block import SessionCircuitBlock
from liftlog.models.session_exercise import SessionExercise
from liftlog.models.template_circuit_block import TemplateCircuitBlock
from liftlog.models.workout_template_exercise import WorkoutTemplateExercise


def ensure_permutation(ids: list[int], existing_ids: list[int], what: str = "ids") -> None:
    if len(ids) != len(existing_ids) or set(ids) != set(existing_ids):
        raise BadRequestException(f"{what} must list every row exactly once")


async def _renumber(db: AsyncSession, model, parent_col, parent_id: int) -> list:
    res = await db.execute(
        select(model).where(parent_col == parent_id).order_by(model.position.asc(), model.id.asc())
    )
    rows = list(res.scalars().all())
    for i, row in enumerate(rows, start=1):
        row.position = i
    await db.flush()
    return rows


async def _shift(db: AsyncSession, model, parent_col, parent_id: int, from_position: int, by: int) -> None:
    await db.execute(
        update(model)
        .where(parent_col == parent_id, model.position >= from_position)
        .values(position=model.position + by)
    )


async def renumber_template_rows(db: AsyncSession, template_id: int) -> list[WorkoutTemplateExercise]:
    return await _renumber(db, WorkoutTemplateExercise, WorkoutTemplateExercise.template_id, template_id)


async def renumber_session_rows(db: AsyncSession, session_id: int) -> list[SessionExercise]:
    return await _renumber(db, SessionExercise, SessionExercise.session_id, session_id)


async def renumber_circuit_members(db: AsyncSession, circuit_id: int) -> list[CircuitExercise]:
    return await _renumber(db, CircuitExercise, CircuitExercise.circuit_id, circuit_id)


async def shift_template_rows(db: AsyncSession, template_id: int, from_position: int, by: int) -> None:
    await _shift(db, WorkoutTemplateExercise, WorkoutTemplateExercise.template_id, template_id, from_position, by)


async def shift_session_rows(db: AsyncSession, session_id: int, from_position: int, by: int) -> None:
    await _shift(db, SessionExercise, SessionExercise.session_id, session_id, from_position, by)


async def shift_circuit_members(db: AsyncSession, circuit_id: int, from_position: int, by: int) -> None:
    await _shift(db, CircuitExercise, CircuitExercise.circuit_id, circuit_id, from_position, by)


async def prune_template_blocks(db: AsyncSession, template_id: int) -> None:
    in_use = select(WorkoutTemplateExercise.circuit_block_id).where(
        WorkoutTemplateExercise.template_id == template_id,
        WorkoutTemplateExercise.circuit_block_id.is_not(None),
    )
    await db.execute(
        delete(TemplateCircuitBlock).where(
            TemplateCircuitBlock.template_id == template_id,
            TemplateCircuitBlock.id.not_in(in_use),
        )
    )


async def prune_session_blocks(db: AsyncSession, session_id: int) -> None:
    in_use = select(SessionExercise.circuit_block_id).where(
        SessionExercise.session_id == session_id,
        SessionExercise.circuit_block_id.is_not(None),
    )
    await db.execute(
        delete(SessionCircuitBlock).where(
            SessionCircuitBlock.session_id == session_id,
            SessionCircuitBlock.id.not_in(in_use),
        )
    )
