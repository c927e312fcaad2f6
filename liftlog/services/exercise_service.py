import structlog
from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.exceptions import (
    ConflictException,
    ExerciseNotFoundException,
    SystemRowReadOnlyException,
)
from liftlog.models.circuit_exercise import CircuitExercise
from liftlog.models.exercise import Exercise
from liftlog.models.hidden_system_exercise import HiddenSystemExercise
from liftlog.models.performed_set import PerformedSet
from liftlog.models.planned_set import PlannedSet
from liftlog.models.session_exercise import SessionExercise
from liftlog.models.workout_session import WorkoutSession
from liftlog.models.workout_template_exercise import WorkoutTemplateExercise
from liftlog.schemas.exercises import ExerciseCreate, ExerciseUpdate
from liftlog.services.ordering import (
    prune_template_blocks,
    renumber_circuit_members,
    renumber_template_rows,
)
from liftlog.workout_calculation import copy_name

logger = structlog.get_logger(__name__)

COPYABLE_FIELDS = (
    "category",
    "track_weight",
    "track_reps",
    "track_time",
    "track_distance",
    "weight_unit",
    "distance_unit",
    "time_unit",
    "notes",
    "url",
)


def visible_exercises(user_id: int):
    """System exercises the user has not hidden, plus the user's own."""
    hidden = select(HiddenSystemExercise.exercise_id).where(HiddenSystemExercise.user_id == user_id)
    return select(Exercise).where(
        or_(
            Exercise.user_id == user_id,
            and_(Exercise.is_system.is_(True), Exercise.user_id.is_(None), Exercise.id.not_in(hidden)),
        )
    )


class ExerciseService:
    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id

    async def list_exercises(self) -> list[Exercise]:
        res = await self.db.execute(visible_exercises(self.user_id).order_by(func.lower(Exercise.name)))
        return list(res.scalars().all())

    async def list_performed(self) -> list[Exercise]:
        performed_ids = (
            select(SessionExercise.exercise_id)
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .join(PerformedSet, PerformedSet.session_exercise_id == SessionExercise.id)
            .where(WorkoutSession.user_id == self.user_id, SessionExercise.exercise_id.is_not(None))
        )
        res = await self.db.execute(
            visible_exercises(self.user_id)
            .where(Exercise.id.in_(performed_ids))
            .order_by(func.lower(Exercise.name))
        )
        return list(res.scalars().all())

    async def list_hidden(self) -> list[Exercise]:
        res = await self.db.execute(
            select(Exercise)
            .join(HiddenSystemExercise, HiddenSystemExercise.exercise_id == Exercise.id)
            .where(HiddenSystemExercise.user_id == self.user_id)
            .order_by(func.lower(Exercise.name))
        )
        return list(res.scalars().all())

    async def get_exercise(self, exercise_id: int) -> Exercise:
        res = await self.db.execute(visible_exercises(self.user_id).where(Exercise.id == exercise_id))
        exercise = res.scalar_one_or_none()
        if not exercise:
            raise ExerciseNotFoundException(exercise_id)
        return exercise

    async def get_history(self, exercise_id: int) -> list[dict]:
        await self.get_exercise(exercise_id)
        res = await self.db.execute(
            select(PerformedSet, WorkoutSession)
            .select_from(PerformedSet)
            .join(SessionExercise, PerformedSet.session_exercise_id == SessionExercise.id)
            .join(WorkoutSession, SessionExercise.session_id == WorkoutSession.id)
            .where(WorkoutSession.user_id == self.user_id, SessionExercise.exercise_id == exercise_id)
            .order_by(WorkoutSession.started_at.desc(), PerformedSet.set_number.asc())
        )
        return [
            {
                "session_id": session.id,
                "started_at": session.started_at,
                "ended_at": session.ended_at,
                "set_id": s.id,
                "set_number": s.set_number,
                "actual_reps": s.actual_reps,
                "actual_weight": s.actual_weight,
                "actual_time_seconds": s.actual_time_seconds,
                "actual_distance": s.actual_distance,
                "is_warmup": s.is_warmup,
            }
            for s, session in res.all()
        ]

    async def _custom_names(self) -> set[str]:
        res = await self.db.execute(select(Exercise.name).where(Exercise.user_id == self.user_id))
        return set(res.scalars().all())

    async def _ensure_name_free(self, name: str, exclude_id: int | None = None) -> None:
        q = select(Exercise.id).where(Exercise.user_id == self.user_id, Exercise.name == name)
        if exclude_id is not None:
            q = q.where(Exercise.id != exclude_id)
        if (await self.db.execute(q)).first():
            raise ConflictException(f"You already have an exercise named '{name}'")

    async def create_exercise(self, payload: ExerciseCreate) -> Exercise:
        await self._ensure_name_free(payload.name)

        exercise = Exercise(user_id=self.user_id, is_system=False, **payload.model_dump())
        self.db.add(exercise)
        await self.db.commit()
        await self.db.refresh(exercise)
        logger.info("exercise_created", exercise_id=exercise.id)
        return exercise

    async def update_exercise(self, exercise_id: int, payload: ExerciseUpdate) -> Exercise:
        exercise = await self.get_exercise(exercise_id)
        if exercise.is_system:
            raise SystemRowReadOnlyException("exercise")

        data = payload.model_dump(exclude_unset=True)
        if data.get("name") and data["name"] != exercise.name:
            await self._ensure_name_free(data["name"], exclude_id=exercise.id)
        for k, v in data.items():
            setattr(exercise, k, v)

        await self.db.commit()
        await self.db.refresh(exercise)
        return exercise

    async def delete_exercise(self, exercise_id: int) -> None:
        res = await self.db.execute(
            select(Exercise).where(
                Exercise.id == exercise_id,
                or_(Exercise.user_id == self.user_id, Exercise.is_system.is_(True)),
            )
        )
        exercise = res.scalar_one_or_none()
        if not exercise:
            raise ExerciseNotFoundException(exercise_id)

        if exercise.is_system:
            # hiding twice is a no-op
            already = await self.db.execute(
                select(HiddenSystemExercise.id).where(
                    HiddenSystemExercise.user_id == self.user_id,
                    HiddenSystemExercise.exercise_id == exercise.id,
                )
            )
            if already.first() is None:
                self.db.add(HiddenSystemExercise(user_id=self.user_id, exercise_id=exercise.id))
                await self.db.commit()
            logger.info("system_exercise_hidden", exercise_id=exercise.id)
            return

        # Explicit cascade: template rows (and their planned sets), circuit members.
        # Session history keeps the snapshotted name.
        res = await self.db.execute(
            select(WorkoutTemplateExercise.id, WorkoutTemplateExercise.template_id).where(
                WorkoutTemplateExercise.exercise_id == exercise.id
            )
        )
        template_rows = res.all()
        row_ids = [r.id for r in template_rows]
        template_ids = {r.template_id for r in template_rows}

        res = await self.db.execute(
            select(CircuitExercise.circuit_id).where(CircuitExercise.exercise_id == exercise.id)
        )
        circuit_ids = set(res.scalars().all())

        if row_ids:
            await self.db.execute(delete(PlannedSet).where(PlannedSet.template_exercise_id.in_(row_ids)))
            await self.db.execute(
                update(SessionExercise)
                .where(SessionExercise.source_template_exercise_id.in_(row_ids))
                .values(source_template_exercise_id=None)
            )
            await self.db.execute(delete(WorkoutTemplateExercise).where(WorkoutTemplateExercise.id.in_(row_ids)))
        await self.db.execute(delete(CircuitExercise).where(CircuitExercise.exercise_id == exercise.id))
        await self.db.execute(
            update(SessionExercise).where(SessionExercise.exercise_id == exercise.id).values(exercise_id=None)
        )
        await self.db.delete(exercise)
        await self.db.flush()

        for template_id in template_ids:
            await prune_template_blocks(self.db, template_id)
            await renumber_template_rows(self.db, template_id)
        for circuit_id in circuit_ids:
            await renumber_circuit_members(self.db, circuit_id)

        await self.db.commit()
        logger.info(
            "exercise_deleted",
            exercise_id=exercise_id,
            template_rows=len(row_ids),
            circuits=len(circuit_ids),
        )

    async def copy_exercise(self, exercise_id: int) -> Exercise:
        source = await self.get_exercise(exercise_id)
        name = copy_name(source.name, await self._custom_names())

        copy = Exercise(
            user_id=self.user_id,
            name=name,
            is_system=False,
            **{f: getattr(source, f) for f in COPYABLE_FIELDS},
        )
        self.db.add(copy)
        await self.db.commit()
        await self.db.refresh(copy)
        logger.info("exercise_copied", source_id=source.id, exercise_id=copy.id)
        return copy

    async def restore_exercise(self, exercise_id: int) -> None:
        res = await self.db.execute(
            select(HiddenSystemExercise).where(
                HiddenSystemExercise.user_id == self.user_id,
                HiddenSystemExercise.exercise_id == exercise_id,
            )
        )
        marker = res.scalar_one_or_none()
        if not marker:
            raise ExerciseNotFoundException(exercise_id)

        await self.db.delete(marker)
        await self.db.commit()
        logger.info("system_exercise_restored", exercise_id=exercise_id)
