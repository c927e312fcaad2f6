import structlog
from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.exceptions import (
    BadRequestException,
    CircuitNotFoundException,
    ConflictException,
    NotFoundException,
    SystemRowReadOnlyException,
)
from liftlog.models.circuit import Circuit
from liftlog.models.circuit_exercise import CircuitExercise
from liftlog.models.exercise import Exercise
from liftlog.models.hidden_system_circuit import HiddenSystemCircuit
from liftlog.models.session_circuit_block import SessionCircuitBlock
from liftlog.models.session_exercise import SessionExercise
from liftlog.models.template_circuit_block import TemplateCircuitBlock
from liftlog.models.workout_template_exercise import WorkoutTemplateExercise
from liftlog.schemas.circuits import (
    CircuitCreate,
    CircuitExerciseCreate,
    CircuitExerciseUpdate,
    CircuitUpdate,
)
from liftlog.services.exercise_service import ExerciseService
from liftlog.services.ordering import (
    ensure_permutation,
    renumber_circuit_members,
    shift_circuit_members,
)
from liftlog.workout_calculation import copy_name

logger = structlog.get_logger(__name__)

MEMBER_FIELDS = (
    "default_reps",
    "default_weight",
    "default_time_seconds",
    "rest_after_seconds",
    "notes",
)


def visible_circuits(user_id: int):
    hidden = select(HiddenSystemCircuit.circuit_id).where(HiddenSystemCircuit.user_id == user_id)
    return select(Circuit).where(
        or_(
            Circuit.user_id == user_id,
            and_(Circuit.is_system.is_(True), Circuit.user_id.is_(None), Circuit.id.not_in(hidden)),
        )
    )


class CircuitService:
    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id

    async def list_circuits(self) -> list[dict]:
        counts = (
            select(CircuitExercise.circuit_id, func.count(CircuitExercise.id).label("n"))
            .group_by(CircuitExercise.circuit_id)
            .subquery()
        )
        res = await self.db.execute(
            visible_circuits(self.user_id)
            .add_columns(func.coalesce(counts.c.n, 0))
            .outerjoin(counts, counts.c.circuit_id == Circuit.id)
            .order_by(func.lower(Circuit.name))
        )
        out = []
        for circuit, n in res.all():
            item = {c.name: getattr(circuit, c.name) for c in Circuit.__table__.columns}
            item["exercise_count"] = int(n)
            out.append(item)
        return out

    async def list_hidden(self) -> list[Circuit]:
        res = await self.db.execute(
            select(Circuit)
            .join(HiddenSystemCircuit, HiddenSystemCircuit.circuit_id == Circuit.id)
            .where(HiddenSystemCircuit.user_id == self.user_id)
            .order_by(func.lower(Circuit.name))
        )
        return list(res.scalars().all())

    async def get_circuit(self, circuit_id: int) -> Circuit:
        res = await self.db.execute(visible_circuits(self.user_id).where(Circuit.id == circuit_id))
        circuit = res.scalar_one_or_none()
        if not circuit:
            raise CircuitNotFoundException(circuit_id)
        return circuit

    async def get_owned_circuit(self, circuit_id: int) -> Circuit:
        circuit = await self.get_circuit(circuit_id)
        if circuit.is_system:
            raise SystemRowReadOnlyException("circuit")
        return circuit

    async def get_members(self, circuit_id: int) -> list[tuple[CircuitExercise, Exercise]]:
        res = await self.db.execute(
            select(CircuitExercise, Exercise)
            .join(Exercise, CircuitExercise.exercise_id == Exercise.id)
            .where(CircuitExercise.circuit_id == circuit_id)
            .order_by(CircuitExercise.position.asc(), CircuitExercise.id.asc())
        )
        return [(ce, ex) for ce, ex in res.all()]

    async def get_detail(self, circuit_id: int) -> dict:
        circuit = await self.get_circuit(circuit_id)
        members = await self.get_members(circuit.id)

        detail = {c.name: getattr(circuit, c.name) for c in Circuit.__table__.columns}
        detail["exercises"] = [
            {
                **{c.name: getattr(ce, c.name) for c in CircuitExercise.__table__.columns},
                "exercise_name": ex.name,
            }
            for ce, ex in members
        ]
        return detail

    async def _ensure_name_free(self, name: str, exclude_id: int | None = None) -> None:
        q = select(Circuit.id).where(Circuit.user_id == self.user_id, Circuit.name == name)
        if exclude_id is not None:
            q = q.where(Circuit.id != exclude_id)
        if (await self.db.execute(q)).first():
            raise ConflictException(f"You already have a circuit named '{name}'")

    async def create_circuit(self, payload: CircuitCreate) -> Circuit:
        await self._ensure_name_free(payload.name)

        circuit = Circuit(user_id=self.user_id, is_system=False, **payload.model_dump())
        self.db.add(circuit)
        await self.db.commit()
        await self.db.refresh(circuit)
        logger.info("circuit_created", circuit_id=circuit.id)
        return circuit

    async def update_circuit(self, circuit_id: int, payload: CircuitUpdate) -> Circuit:
        circuit = await self.get_owned_circuit(circuit_id)

        data = payload.model_dump(exclude_unset=True)
        if data.get("name") and data["name"] != circuit.name:
            await self._ensure_name_free(data["name"], exclude_id=circuit.id)
        for k, v in data.items():
            setattr(circuit, k, v)

        await self.db.commit()
        await self.db.refresh(circuit)
        return circuit

    async def delete_circuit(self, circuit_id: int) -> None:
        res = await self.db.execute(
            select(Circuit).where(
                Circuit.id == circuit_id,
                or_(Circuit.user_id == self.user_id, Circuit.is_system.is_(True)),
            )
        )
        circuit = res.scalar_one_or_none()
        if not circuit:
            raise CircuitNotFoundException(circuit_id)

        if circuit.is_system:
            already = await self.db.execute(
                select(HiddenSystemCircuit.id).where(
                    HiddenSystemCircuit.user_id == self.user_id,
                    HiddenSystemCircuit.circuit_id == circuit.id,
                )
            )
            if already.first() is None:
                self.db.add(HiddenSystemCircuit(user_id=self.user_id, circuit_id=circuit.id))
                await self.db.commit()
            logger.info("system_circuit_hidden", circuit_id=circuit.id)
            return

        # Templates and sessions keep their expanded blocks, detached from the circuit
        for model in (TemplateCircuitBlock, SessionCircuitBlock, WorkoutTemplateExercise, SessionExercise):
            await self.db.execute(update(model).where(model.circuit_id == circuit.id).values(circuit_id=None))
        await self.db.execute(delete(CircuitExercise).where(CircuitExercise.circuit_id == circuit.id))
        await self.db.delete(circuit)
        await self.db.commit()
        logger.info("circuit_deleted", circuit_id=circuit_id)

    async def copy_circuit(self, circuit_id: int) -> Circuit:
        source = await self.get_circuit(circuit_id)
        res = await self.db.execute(select(Circuit.name).where(Circuit.user_id == self.user_id))

        copy = Circuit(
            user_id=self.user_id,
            name=copy_name(source.name, res.scalars().all()),
            rounds=source.rounds,
            category=source.category,
            rest_between_exercises_seconds=source.rest_between_exercises_seconds,
            rest_between_rounds_seconds=source.rest_between_rounds_seconds,
            notes=source.notes,
            is_system=False,
        )
        self.db.add(copy)
        await self.db.flush()

        for ce, _ in await self.get_members(source.id):
            self.db.add(
                CircuitExercise(
                    circuit_id=copy.id,
                    exercise_id=ce.exercise_id,
                    position=ce.position,
                    **{f: getattr(ce, f) for f in MEMBER_FIELDS},
                )
            )

        await self.db.commit()
        await self.db.refresh(copy)
        logger.info("circuit_copied", source_id=source.id, circuit_id=copy.id)
        return copy

    async def restore_circuit(self, circuit_id: int) -> None:
        res = await self.db.execute(
            select(HiddenSystemCircuit).where(
                HiddenSystemCircuit.user_id == self.user_id,
                HiddenSystemCircuit.circuit_id == circuit_id,
            )
        )
        marker = res.scalar_one_or_none()
        if not marker:
            raise CircuitNotFoundException(circuit_id)

        await self.db.delete(marker)
        await self.db.commit()
        logger.info("system_circuit_restored", circuit_id=circuit_id)

    # --- members ---

    async def _get_member(self, circuit_id: int, circuit_exercise_id: int) -> CircuitExercise:
        res = await self.db.execute(
            select(CircuitExercise).where(
                CircuitExercise.id == circuit_exercise_id,
                CircuitExercise.circuit_id == circuit_id,
            )
        )
        member = res.scalar_one_or_none()
        if not member:
            raise NotFoundException(f"Circuit exercise {circuit_exercise_id} not found")
        return member

    async def add_member(self, circuit_id: int, payload: CircuitExerciseCreate) -> CircuitExercise:
        circuit = await self.get_owned_circuit(circuit_id)
        await ExerciseService(self.db, self.user_id).get_exercise(payload.exercise_id)

        count = (
            await self.db.execute(
                select(func.count(CircuitExercise.id)).where(CircuitExercise.circuit_id == circuit.id)
            )
        ).scalar_one()
        position = min(payload.position or count + 1, count + 1)
        await shift_circuit_members(self.db, circuit.id, position, 1)

        member = CircuitExercise(
            circuit_id=circuit.id,
            exercise_id=payload.exercise_id,
            position=position,
            **payload.model_dump(include=set(MEMBER_FIELDS)),
        )
        self.db.add(member)
        await self.db.commit()
        await self.db.refresh(member)
        logger.info("circuit_exercise_added", circuit_id=circuit.id, circuit_exercise_id=member.id, position=position)
        return member

    async def update_member(
        self, circuit_id: int, circuit_exercise_id: int, payload: CircuitExerciseUpdate
    ) -> CircuitExercise:
        await self.get_owned_circuit(circuit_id)
        member = await self._get_member(circuit_id, circuit_exercise_id)

        for k, v in payload.model_dump(exclude_unset=True).items():
            setattr(member, k, v)

        await self.db.commit()
        await self.db.refresh(member)
        return member

    async def delete_member(self, circuit_id: int, circuit_exercise_id: int) -> None:
        await self.get_owned_circuit(circuit_id)
        member = await self._get_member(circuit_id, circuit_exercise_id)

        await self.db.delete(member)
        await self.db.flush()
        await renumber_circuit_members(self.db, circuit_id)
        await self.db.commit()

    async def reorder_members(self, circuit_id: int, exercise_ids: list[int]) -> list[CircuitExercise]:
        await self.get_owned_circuit(circuit_id)
        res = await self.db.execute(select(CircuitExercise).where(CircuitExercise.circuit_id == circuit_id))
        members = {m.id: m for m in res.scalars().all()}
        ensure_permutation(exercise_ids, list(members), "exercise_ids")

        for position, member_id in enumerate(exercise_ids, start=1):
            members[member_id].position = position

        await self.db.commit()
        return [members[i] for i in exercise_ids]

    async def ensure_has_members(self, circuit: Circuit) -> list[tuple[CircuitExercise, Exercise]]:
        members = await self.get_members(circuit.id)
        if not members:
            raise BadRequestException(f"Circuit {circuit.id} has no exercises")
        return members
