import csv
import io

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import utcnow
from liftlog.core.exceptions import (
    ActiveSessionExistsException,
    BadRequestException,
    NotFoundException,
    ScheduleNotFoundException,
    SessionNotFoundException,
)
from liftlog.models.exercise import Exercise
from liftlog.models.performed_set import PerformedSet
from liftlog.models.planned_set import PlannedSet
from liftlog.models.session_circuit_block import SessionCircuitBlock
from liftlog.models.session_exercise import SessionExercise
from liftlog.models.workout_schedule import WorkoutScheduleItem
from liftlog.models.workout_session import WorkoutSession
from liftlog.models.workout_template import WorkoutTemplate
from liftlog.schemas.sessions import (
    PerformedSetCreate,
    PerformedSetUpdate,
    SessionCircuitCreate,
    SessionExerciseCreate,
    SessionExerciseUpdate,
    SessionUpdate,
)
from liftlog.services.circuit_service import CircuitService
from liftlog.services.exercise_service import ExerciseService
from liftlog.services.ordering import (
    ensure_permutation,
    prune_session_blocks,
    renumber_session_rows,
    shift_session_rows,
)
from liftlog.services.template_service import TemplateService
from liftlog.workout_calculation import (
    blocks_are_contiguous,
    current_round,
    elapsed_seconds,
    prefill_next_set,
    splits_block,
    total_volume,
)

logger = structlog.get_logger(__name__)

CSV_COLUMNS = [
    "session_id",
    "started_at",
    "ended_at",
    "template",
    "exercise",
    "set_number",
    "reps",
    "weight",
    "time_seconds",
    "distance",
    "rest_seconds",
    "is_warmup",
]


def _as_dict(row) -> dict:
    return {c.name: getattr(row, c.name) for c in row.__table__.columns}


class SessionService:
    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id

    async def get_session(self, session_id: int) -> WorkoutSession:
        res = await self.db.execute(
            select(WorkoutSession).where(
                WorkoutSession.id == session_id,
                WorkoutSession.user_id == self.user_id,
            )
        )
        session = res.scalar_one_or_none()
        if not session:
            raise SessionNotFoundException(session_id)
        return session

    async def get_active(self) -> WorkoutSession | None:
        res = await self.db.execute(
            select(WorkoutSession)
            .where(WorkoutSession.user_id == self.user_id, WorkoutSession.ended_at.is_(None))
            .order_by(WorkoutSession.started_at.desc())
            .limit(1)
        )
        return res.scalar_one_or_none()

    async def _ensure_no_active(self) -> None:
        active = await self.get_active()
        if active:
            raise ActiveSessionExistsException(active.id)

    async def get_rows(self, session_id: int) -> list[SessionExercise]:
        res = await self.db.execute(
            select(SessionExercise)
            .where(SessionExercise.session_id == session_id)
            .order_by(SessionExercise.position.asc(), SessionExercise.id.asc())
        )
        return list(res.scalars().all())

    async def get_row(self, session_id: int, session_exercise_id: int) -> SessionExercise:
        await self.get_session(session_id)
        res = await self.db.execute(
            select(SessionExercise).where(
                SessionExercise.id == session_exercise_id,
                SessionExercise.session_id == session_id,
            )
        )
        row = res.scalar_one_or_none()
        if not row:
            raise NotFoundException(f"Session exercise {session_exercise_id} not found")
        return row

    async def performed_sets_by_row(self, row_ids: list[int]) -> dict[int, list[PerformedSet]]:
        out: dict[int, list[PerformedSet]] = {i: [] for i in row_ids}
        if not row_ids:
            return out
        res = await self.db.execute(
            select(PerformedSet)
            .where(PerformedSet.session_exercise_id.in_(row_ids))
            .order_by(PerformedSet.set_number.asc(), PerformedSet.id.asc())
        )
        for s in res.scalars().all():
            out[s.session_exercise_id].append(s)
        return out

    # --- starting sessions ---

    async def _copy_template(self, session: WorkoutSession, template_id: int) -> int:
        templates = TemplateService(self.db, self.user_id)
        rows = await templates.get_rows(template_id)
        if not rows:
            return 0

        exercise_ids = list({r.exercise_id for r in rows})
        res = await self.db.execute(select(Exercise.id, Exercise.name).where(Exercise.id.in_(exercise_ids)))
        names = {exercise_id: name for exercise_id, name in res.all()}

        block_map: dict[int, int] = {}
        for b in await templates.get_blocks(template_id):
            sb = SessionCircuitBlock(
                session_id=session.id,
                circuit_id=b.circuit_id,
                name=b.name,
                rounds=b.rounds,
                rest_between_exercises_seconds=b.rest_between_exercises_seconds,
                rest_between_rounds_seconds=b.rest_between_rounds_seconds,
            )
            self.db.add(sb)
            await self.db.flush()
            block_map[b.id] = sb.id

        for position, r in enumerate(rows, start=1):
            self.db.add(
                SessionExercise(
                    session_id=session.id,
                    exercise_id=r.exercise_id,
                    exercise_name=names.get(r.exercise_id, "Unknown exercise"),
                    position=position,
                    circuit_block_id=block_map.get(r.circuit_block_id) if r.circuit_block_id else None,
                    circuit_id=r.circuit_id,
                    circuit_rounds=r.circuit_rounds,
                    source_template_exercise_id=r.id,
                    notes=r.notes,
                )
            )
        return len(rows)

    async def start_from_schedule(self, schedule_id: int) -> WorkoutSession:
        res = await self.db.execute(
            select(WorkoutScheduleItem).where(
                WorkoutScheduleItem.id == schedule_id,
                WorkoutScheduleItem.user_id == self.user_id,
            )
        )
        item = res.scalar_one_or_none()
        if not item:
            raise ScheduleNotFoundException(schedule_id)
        template = await TemplateService(self.db, self.user_id).get_template(item.template_id)
        await self._ensure_no_active()

        session = WorkoutSession(user_id=self.user_id, template_id=template.id, schedule_id=item.id)
        self.db.add(session)
        await self.db.flush()
        copied = await self._copy_template(session, template.id)

        await self.db.commit()
        await self.db.refresh(session)
        logger.info(
            "session_started",
            session_id=session.id,
            template_id=template.id,
            schedule_id=item.id,
            exercises=copied,
        )
        return session

    async def start_from_template(self, template_id: int) -> WorkoutSession:
        template = await TemplateService(self.db, self.user_id).get_template(template_id)
        await self._ensure_no_active()

        session = WorkoutSession(user_id=self.user_id, template_id=template.id)
        self.db.add(session)
        await self.db.flush()
        copied = await self._copy_template(session, template.id)

        await self.db.commit()
        await self.db.refresh(session)
        logger.info("session_started", session_id=session.id, template_id=template.id, exercises=copied)
        return session

    async def create_adhoc(self) -> WorkoutSession:
        await self._ensure_no_active()

        session = WorkoutSession(user_id=self.user_id)
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)
        logger.info("session_started", session_id=session.id, adhoc=True)
        return session

    # --- reading ---

    async def list_sessions(self) -> list[dict]:
        res = await self.db.execute(
            select(WorkoutSession, WorkoutTemplate.name)
            .outerjoin(WorkoutTemplate, WorkoutSession.template_id == WorkoutTemplate.id)
            .where(WorkoutSession.user_id == self.user_id)
            .order_by(WorkoutSession.started_at.desc(), WorkoutSession.id.desc())
        )
        sessions = res.all()

        res = await self.db.execute(
            select(SessionExercise.session_id, func.count(SessionExercise.id))
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .where(WorkoutSession.user_id == self.user_id)
            .group_by(SessionExercise.session_id)
        )
        exercise_counts = dict(res.all())

        res = await self.db.execute(
            select(
                SessionExercise.session_id,
                func.count(PerformedSet.id),
                func.sum(func.coalesce(PerformedSet.actual_reps, 0) * func.coalesce(PerformedSet.actual_weight, 0)),
            )
            .select_from(PerformedSet)
            .join(SessionExercise, PerformedSet.session_exercise_id == SessionExercise.id)
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .where(WorkoutSession.user_id == self.user_id)
            .group_by(SessionExercise.session_id)
        )
        set_stats = {sid: (n, vol) for sid, n, vol in res.all()}

        now = utcnow()
        out = []
        for s, template_name in sessions:
            n_sets, volume = set_stats.get(s.id, (0, 0))
            out.append(
                {
                    **_as_dict(s),
                    "template_name": template_name,
                    "exercise_count": int(exercise_counts.get(s.id, 0)),
                    "set_count": int(n_sets or 0),
                    "volume": float(volume or 0),
                    "duration_seconds": elapsed_seconds(s.started_at, s.ended_at, now),
                }
            )
        return out

    async def get_active_summary(self) -> dict | None:
        session = await self.get_active()
        if not session:
            return None

        template = None
        if session.template_id:
            res = await self.db.execute(select(WorkoutTemplate).where(WorkoutTemplate.id == session.template_id))
            t = res.scalar_one_or_none()
            template = {"id": t.id, "name": t.name} if t else None

        return {
            **_as_dict(session),
            "template": template,
            "elapsed_seconds": elapsed_seconds(session.started_at, session.ended_at, utcnow()),
        }

    async def get_detail(self, session_id: int) -> dict:
        session = await self.get_session(session_id)
        rows = await self.get_rows(session.id)
        performed = await self.performed_sets_by_row([r.id for r in rows])

        source_ids = [r.source_template_exercise_id for r in rows if r.source_template_exercise_id]
        planned = await TemplateService(self.db, self.user_id).planned_sets_by_row(source_ids)

        exercises = {}
        exercise_ids = {r.exercise_id for r in rows if r.exercise_id}
        if exercise_ids:
            res = await self.db.execute(select(Exercise).where(Exercise.id.in_(list(exercise_ids))))
            exercises = {e.id: e for e in res.scalars().all()}

        res = await self.db.execute(
            select(SessionCircuitBlock)
            .where(SessionCircuitBlock.session_id == session.id)
            .order_by(SessionCircuitBlock.id.asc())
        )
        blocks = []
        for b in res.scalars().all():
            counts = [len(performed[r.id]) for r in rows if r.circuit_block_id == b.id]
            blocks.append({**_as_dict(b), "current_round": current_round(b.rounds, counts)})

        template_name = None
        if session.template_id:
            res = await self.db.execute(select(WorkoutTemplate.name).where(WorkoutTemplate.id == session.template_id))
            template_name = res.scalar_one_or_none()

        all_sets = [s for sets in performed.values() for s in sets]
        return {
            **_as_dict(session),
            "template_name": template_name,
            "elapsed_seconds": elapsed_seconds(session.started_at, session.ended_at, utcnow()),
            "volume": total_volume(all_sets),
            "circuit_blocks": blocks,
            "exercises": [
                {
                    **_as_dict(r),
                    "exercise": _as_dict(exercises[r.exercise_id]) if r.exercise_id in exercises else None,
                    "sets": [_as_dict(s) for s in performed[r.id]],
                    "planned_sets": [_as_dict(p) for p in planned.get(r.source_template_exercise_id, [])],
                }
                for r in rows
            ],
        }

    async def _last_performed_sets(self, exercise_id: int, exclude_session_id: int) -> list[PerformedSet]:
        """Sets from the newest other finished session that included the exercise."""
        res = await self.db.execute(
            select(SessionExercise.id)
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .join(PerformedSet, PerformedSet.session_exercise_id == SessionExercise.id)
            .where(
                WorkoutSession.user_id == self.user_id,
                WorkoutSession.id != exclude_session_id,
                WorkoutSession.ended_at.is_not(None),
                SessionExercise.exercise_id == exercise_id,
            )
            .order_by(WorkoutSession.started_at.desc(), SessionExercise.id.desc())
            .limit(1)
        )
        row_id = res.scalar_one_or_none()
        if row_id is None:
            return []
        return (await self.performed_sets_by_row([row_id]))[row_id]

    async def get_last_performance(self, session_id: int) -> dict[int, list[dict]]:
        session = await self.get_session(session_id)
        out: dict[int, list[dict]] = {}
        for r in await self.get_rows(session.id):
            if r.exercise_id is None or r.exercise_id in out:
                continue
            sets = await self._last_performed_sets(r.exercise_id, session.id)
            if sets:
                out[r.exercise_id] = [_as_dict(s) for s in sets]
        return out

    async def get_prefill(self, session_id: int, session_exercise_id: int) -> dict | None:
        row = await self.get_row(session_id, session_exercise_id)
        current = (await self.performed_sets_by_row([row.id]))[row.id]
        set_number = len(current) + 1

        planned: list[PlannedSet] = []
        if row.source_template_exercise_id:
            planned = (
                await TemplateService(self.db, self.user_id).planned_sets_by_row([row.source_template_exercise_id])
            )[row.source_template_exercise_id]
        last = await self._last_performed_sets(row.exercise_id, session_id) if row.exercise_id else []

        suggestion = prefill_next_set(set_number, planned, last, current)
        if suggestion is None:
            return None
        source, values = suggestion
        return {
            "source": source,
            "set_number": set_number,
            "reps": values.reps,
            "weight": values.weight,
            "time_seconds": values.time_seconds,
            "distance": values.distance,
            "rest_seconds": values.rest_seconds,
            "is_warmup": values.is_warmup,
        }

    async def export_csv(self) -> str:
        res = await self.db.execute(
            select(PerformedSet, SessionExercise.exercise_name, WorkoutSession, WorkoutTemplate.name)
            .select_from(PerformedSet)
            .join(SessionExercise, PerformedSet.session_exercise_id == SessionExercise.id)
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .outerjoin(WorkoutTemplate, WorkoutSession.template_id == WorkoutTemplate.id)
            .where(WorkoutSession.user_id == self.user_id)
            .order_by(
                WorkoutSession.started_at.asc(),
                SessionExercise.position.asc(),
                PerformedSet.set_number.asc(),
            )
        )

        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(CSV_COLUMNS)
        for s, exercise_name, session, template_name in res.all():
            writer.writerow(
                [
                    session.id,
                    session.started_at.isoformat(),
                    session.ended_at.isoformat() if session.ended_at else "",
                    template_name or "",
                    exercise_name,
                    s.set_number,
                    s.actual_reps if s.actual_reps is not None else "",
                    s.actual_weight if s.actual_weight is not None else "",
                    s.actual_time_seconds if s.actual_time_seconds is not None else "",
                    s.actual_distance if s.actual_distance is not None else "",
                    s.rest_seconds if s.rest_seconds is not None else "",
                    "yes" if s.is_warmup else "no",
                ]
            )
        return buf.getvalue()

    # --- finishing / editing ---

    async def end_session(self, session_id: int, notes: str | None = None) -> WorkoutSession:
        session = await self.get_session(session_id)
        if session.ended_at is not None:
            raise BadRequestException(f"Session {session.id} has already ended")

        session.ended_at = utcnow()
        if notes is not None:
            session.notes = notes

        if session.schedule_id:
            res = await self.db.execute(
                select(WorkoutScheduleItem).where(
                    WorkoutScheduleItem.id == session.schedule_id,
                    WorkoutScheduleItem.user_id == self.user_id,
                )
            )
            item = res.scalar_one_or_none()
            if item:
                item.status = "completed"

        await self.db.commit()
        await self.db.refresh(session)
        logger.info(
            "session_ended",
            session_id=session.id,
            schedule_id=session.schedule_id,
            duration_seconds=elapsed_seconds(session.started_at, session.ended_at, session.ended_at),
        )
        return session

    async def update_session(self, session_id: int, payload: SessionUpdate) -> WorkoutSession:
        session = await self.get_session(session_id)
        for k, v in payload.model_dump(exclude_unset=True).items():
            setattr(session, k, v)
        await self.db.commit()
        await self.db.refresh(session)
        return session

    async def delete_session(self, session_id: int) -> None:
        session = await self.get_session(session_id)
        row_ids = select(SessionExercise.id).where(SessionExercise.session_id == session.id)

        await self.db.execute(delete(PerformedSet).where(PerformedSet.session_exercise_id.in_(row_ids)))
        await self.db.execute(delete(SessionExercise).where(SessionExercise.session_id == session.id))
        await self.db.execute(delete(SessionCircuitBlock).where(SessionCircuitBlock.session_id == session.id))
        await self.db.delete(session)
        await self.db.commit()
        logger.info("session_deleted", session_id=session_id)

    # --- session rows ---

    async def _insert_position(self, session_id: int, requested: int | None) -> int:
        rows = await self.get_rows(session_id)
        position = min(requested or len(rows) + 1, len(rows) + 1)
        if splits_block([r.circuit_block_id for r in rows], position):
            raise BadRequestException("Cannot insert inside a circuit block")
        return position

    async def add_exercise(self, session_id: int, payload: SessionExerciseCreate) -> SessionExercise:
        session = await self.get_session(session_id)
        exercise = await ExerciseService(self.db, self.user_id).get_exercise(payload.exercise_id)

        position = await self._insert_position(session.id, payload.position)
        await shift_session_rows(self.db, session.id, position, 1)

        row = SessionExercise(
            session_id=session.id,
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            position=position,
            notes=payload.notes,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info("session_exercise_added", session_id=session.id, session_exercise_id=row.id, position=position)
        return row

    async def add_circuit(self, session_id: int, payload: SessionCircuitCreate) -> SessionCircuitBlock:
        session = await self.get_session(session_id)
        circuits = CircuitService(self.db, self.user_id)
        circuit = await circuits.get_circuit(payload.circuit_id)
        members = await circuits.ensure_has_members(circuit)
        rounds = payload.rounds or circuit.rounds

        position = await self._insert_position(session.id, payload.position)
        await shift_session_rows(self.db, session.id, position, len(members))

        block = SessionCircuitBlock(
            session_id=session.id,
            circuit_id=circuit.id,
            name=circuit.name,
            rounds=rounds,
            rest_between_exercises_seconds=circuit.rest_between_exercises_seconds,
            rest_between_rounds_seconds=circuit.rest_between_rounds_seconds,
        )
        self.db.add(block)
        await self.db.flush()

        for offset, (ce, exercise) in enumerate(members):
            self.db.add(
                SessionExercise(
                    session_id=session.id,
                    exercise_id=exercise.id,
                    exercise_name=exercise.name,
                    position=position + offset,
                    circuit_block_id=block.id,
                    circuit_id=circuit.id,
                    circuit_rounds=rounds,
                    notes=ce.notes,
                )
            )

        await self.db.commit()
        await self.db.refresh(block)
        logger.info("session_circuit_added", session_id=session.id, block_id=block.id, circuit_id=circuit.id)
        return block

    async def reorder_exercises(self, session_id: int, exercise_ids: list[int]) -> list[SessionExercise]:
        await self.get_session(session_id)
        rows = {r.id: r for r in await self.get_rows(session_id)}
        ensure_permutation(exercise_ids, list(rows), "exercise_ids")

        if not blocks_are_contiguous([rows[i].circuit_block_id for i in exercise_ids]):
            raise BadRequestException("Circuit exercises must stay together")

        for position, row_id in enumerate(exercise_ids, start=1):
            rows[row_id].position = position

        await self.db.commit()
        return [rows[i] for i in exercise_ids]

    async def update_exercise(
        self, session_id: int, session_exercise_id: int, payload: SessionExerciseUpdate
    ) -> SessionExercise:
        row = await self.get_row(session_id, session_exercise_id)
        for k, v in payload.model_dump(exclude_unset=True).items():
            setattr(row, k, v)
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def delete_exercise(self, session_id: int, session_exercise_id: int) -> None:
        row = await self.get_row(session_id, session_exercise_id)

        await self.db.execute(delete(PerformedSet).where(PerformedSet.session_exercise_id == row.id))
        await self.db.delete(row)
        await self.db.flush()

        await prune_session_blocks(self.db, session_id)
        await renumber_session_rows(self.db, session_id)
        await self.db.commit()

    # --- performed sets ---

    async def _get_set(self, session_exercise_id: int, set_id: int) -> PerformedSet:
        res = await self.db.execute(
            select(PerformedSet).where(
                PerformedSet.id == set_id,
                PerformedSet.session_exercise_id == session_exercise_id,
            )
        )
        performed = res.scalar_one_or_none()
        if not performed:
            raise NotFoundException(f"Set {set_id} not found")
        return performed

    async def add_set(self, session_id: int, session_exercise_id: int, payload: PerformedSetCreate) -> PerformedSet:
        row = await self.get_row(session_id, session_exercise_id)
        count = (
            await self.db.execute(
                select(func.count(PerformedSet.id)).where(PerformedSet.session_exercise_id == row.id)
            )
        ).scalar_one()

        performed = PerformedSet(session_exercise_id=row.id, set_number=count + 1, **payload.model_dump())
        self.db.add(performed)
        await self.db.commit()
        await self.db.refresh(performed)
        logger.info("set_logged", session_id=session_id, session_exercise_id=row.id, set_number=performed.set_number)
        return performed

    async def update_set(
        self, session_id: int, session_exercise_id: int, set_id: int, payload: PerformedSetUpdate
    ) -> PerformedSet:
        row = await self.get_row(session_id, session_exercise_id)
        performed = await self._get_set(row.id, set_id)
        for k, v in payload.model_dump(exclude_unset=True).items():
            setattr(performed, k, v)
        await self.db.commit()
        await self.db.refresh(performed)
        return performed

    async def delete_set(self, session_id: int, session_exercise_id: int, set_id: int) -> None:
        row = await self.get_row(session_id, session_exercise_id)
        performed = await self._get_set(row.id, set_id)
        await self.db.delete(performed)
        await self.db.flush()

        # keep numbering 1..n
        survivors = (await self.performed_sets_by_row([row.id]))[row.id]
        for number, s in enumerate(survivors, start=1):
            s.set_number = number

        await self.db.commit()
