import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.exceptions import BadRequestException, NotFoundException, TemplateNotFoundException
from liftlog.models.exercise import Exercise
from liftlog.models.planned_set import PlannedSet
from liftlog.models.session_exercise import SessionExercise
from liftlog.models.template_circuit_block import TemplateCircuitBlock
from liftlog.models.workout_schedule import WorkoutScheduleItem
from liftlog.models.workout_session import WorkoutSession
from liftlog.models.workout_template import WorkoutTemplate
from liftlog.models.workout_template_exercise import WorkoutTemplateExercise
from liftlog.schemas.templates import (
    AddCircuitRequest,
    PlannedSetCreate,
    PlannedSetUpdate,
    TemplateCreate,
    TemplateExerciseCreate,
    TemplateExerciseUpdate,
    TemplateUpdate,
)
from liftlog.services.circuit_service import CircuitService
from liftlog.services.exercise_service import ExerciseService
from liftlog.services.ordering import (
    ensure_permutation,
    prune_template_blocks,
    renumber_template_rows,
    shift_template_rows,
)
from liftlog.workout_calculation import (
    blocks_are_contiguous,
    copy_name,
    group_rows,
    member_rest_seconds,
    splits_block,
)

logger = structlog.get_logger(__name__)

PLANNED_FIELDS = (
    "target_reps",
    "target_weight",
    "target_time_seconds",
    "target_distance",
    "rest_seconds",
    "is_warmup",
)


def _as_dict(row) -> dict:
    return {c.name: getattr(row, c.name) for c in row.__table__.columns}


class TemplateService:
    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id

    async def list_templates(self) -> list[dict]:
        counts = (
            select(WorkoutTemplateExercise.template_id, func.count(WorkoutTemplateExercise.id).label("n"))
            .group_by(WorkoutTemplateExercise.template_id)
            .subquery()
        )
        res = await self.db.execute(
            select(WorkoutTemplate, func.coalesce(counts.c.n, 0))
            .outerjoin(counts, counts.c.template_id == WorkoutTemplate.id)
            .where(WorkoutTemplate.user_id == self.user_id)
            .order_by(WorkoutTemplate.created_at.desc(), WorkoutTemplate.id.desc())
        )
        return [{**_as_dict(t), "exercise_count": int(n)} for t, n in res.all()]

    async def get_template(self, template_id: int) -> WorkoutTemplate:
        res = await self.db.execute(
            select(WorkoutTemplate).where(
                WorkoutTemplate.id == template_id,
                WorkoutTemplate.user_id == self.user_id,
            )
        )
        template = res.scalar_one_or_none()
        if not template:
            raise TemplateNotFoundException(template_id)
        return template

    async def get_rows(self, template_id: int) -> list[WorkoutTemplateExercise]:
        res = await self.db.execute(
            select(WorkoutTemplateExercise)
            .where(WorkoutTemplateExercise.template_id == template_id)
            .order_by(WorkoutTemplateExercise.position.asc(), WorkoutTemplateExercise.id.asc())
        )
        return list(res.scalars().all())

    async def get_row(self, template_id: int, template_exercise_id: int) -> WorkoutTemplateExercise:
        await self.get_template(template_id)
        res = await self.db.execute(
            select(WorkoutTemplateExercise).where(
                WorkoutTemplateExercise.id == template_exercise_id,
                WorkoutTemplateExercise.template_id == template_id,
            )
        )
        row = res.scalar_one_or_none()
        if not row:
            raise NotFoundException(f"Template exercise {template_exercise_id} not found")
        return row

    async def get_blocks(self, template_id: int) -> list[TemplateCircuitBlock]:
        res = await self.db.execute(
            select(TemplateCircuitBlock)
            .where(TemplateCircuitBlock.template_id == template_id)
            .order_by(TemplateCircuitBlock.id.asc())
        )
        return list(res.scalars().all())

    async def get_block(self, template_id: int, block_id: int) -> TemplateCircuitBlock:
        await self.get_template(template_id)
        res = await self.db.execute(
            select(TemplateCircuitBlock).where(
                TemplateCircuitBlock.id == block_id,
                TemplateCircuitBlock.template_id == template_id,
            )
        )
        block = res.scalar_one_or_none()
        if not block:
            raise NotFoundException(f"Circuit block {block_id} not found")
        return block

    async def planned_sets_by_row(self, row_ids: list[int]) -> dict[int, list[PlannedSet]]:
        out: dict[int, list[PlannedSet]] = {i: [] for i in row_ids}
        if not row_ids:
            return out
        res = await self.db.execute(
            select(PlannedSet)
            .where(PlannedSet.template_exercise_id.in_(row_ids))
            .order_by(PlannedSet.set_number.asc(), PlannedSet.id.asc())
        )
        for s in res.scalars().all():
            out[s.template_exercise_id].append(s)
        return out

    async def get_detail(self, template_id: int) -> dict:
        template = await self.get_template(template_id)
        rows = await self.get_rows(template.id)
        blocks = {b.id: b for b in await self.get_blocks(template.id)}
        sets = await self.planned_sets_by_row([r.id for r in rows])

        exercise_ids = {r.exercise_id for r in rows}
        exercises = {}
        if exercise_ids:
            res = await self.db.execute(select(Exercise).where(Exercise.id.in_(list(exercise_ids))))
            exercises = {e.id: e for e in res.scalars().all()}

        def row_out(r: WorkoutTemplateExercise) -> dict:
            ex = exercises.get(r.exercise_id)
            return {
                **_as_dict(r),
                "exercise": _as_dict(ex) if ex else None,
                "planned_sets": [_as_dict(s) for s in sets[r.id]],
            }

        items = []
        for block_id, group in group_rows(rows):
            if block_id is None:
                items.append({"type": "exercise", "exercise": row_out(group[0])})
            else:
                items.append(
                    {
                        "type": "circuit",
                        "block": _as_dict(blocks[block_id]) if block_id in blocks else None,
                        "exercises": [row_out(r) for r in group],
                    }
                )

        return {
            **_as_dict(template),
            "exercises": [row_out(r) for r in rows],
            "circuit_blocks": [_as_dict(b) for b in blocks.values()],
            "items": items,
        }

    async def create_template(self, payload: TemplateCreate) -> WorkoutTemplate:
        template = WorkoutTemplate(user_id=self.user_id, name=payload.name, notes=payload.notes)
        self.db.add(template)
        await self.db.commit()
        await self.db.refresh(template)
        logger.info("template_created", template_id=template.id)
        return template

    async def update_template(self, template_id: int, payload: TemplateUpdate) -> WorkoutTemplate:
        template = await self.get_template(template_id)
        for k, v in payload.model_dump(exclude_unset=True).items():
            setattr(template, k, v)
        await self.db.commit()
        await self.db.refresh(template)
        return template

    async def delete_template(self, template_id: int) -> None:
        template = await self.get_template(template_id)
        row_ids = select(WorkoutTemplateExercise.id).where(WorkoutTemplateExercise.template_id == template.id)
        schedule_ids = select(WorkoutScheduleItem.id).where(WorkoutScheduleItem.template_id == template.id)

        # Sessions are history: detach them instead of deleting
        await self.db.execute(
            update(SessionExercise)
            .where(SessionExercise.source_template_exercise_id.in_(row_ids))
            .values(source_template_exercise_id=None)
        )
        await self.db.execute(
            update(WorkoutSession)
            .where(WorkoutSession.schedule_id.in_(schedule_ids))
            .values(schedule_id=None)
        )
        await self.db.execute(
            update(WorkoutSession).where(WorkoutSession.template_id == template.id).values(template_id=None)
        )

        await self.db.execute(delete(PlannedSet).where(PlannedSet.template_exercise_id.in_(row_ids)))
        await self.db.execute(delete(WorkoutTemplateExercise).where(WorkoutTemplateExercise.template_id == template.id))
        await self.db.execute(delete(TemplateCircuitBlock).where(TemplateCircuitBlock.template_id == template.id))
        await self.db.execute(delete(WorkoutScheduleItem).where(WorkoutScheduleItem.template_id == template.id))
        await self.db.delete(template)
        await self.db.commit()
        logger.info("template_deleted", template_id=template_id)

    async def copy_template(self, template_id: int) -> WorkoutTemplate:
        source = await self.get_template(template_id)
        res = await self.db.execute(select(WorkoutTemplate.name).where(WorkoutTemplate.user_id == self.user_id))

        copy = WorkoutTemplate(
            user_id=self.user_id,
            name=copy_name(source.name, res.scalars().all()),
            notes=source.notes,
        )
        self.db.add(copy)
        await self.db.flush()

        block_map: dict[int, int] = {}
        for b in await self.get_blocks(source.id):
            nb = TemplateCircuitBlock(
                template_id=copy.id,
                circuit_id=b.circuit_id,
                name=b.name,
                rounds=b.rounds,
                rest_between_exercises_seconds=b.rest_between_exercises_seconds,
                rest_between_rounds_seconds=b.rest_between_rounds_seconds,
            )
            self.db.add(nb)
            await self.db.flush()
            block_map[b.id] = nb.id

        rows = await self.get_rows(source.id)
        sets = await self.planned_sets_by_row([r.id for r in rows])
        for r in rows:
            nr = WorkoutTemplateExercise(
                template_id=copy.id,
                exercise_id=r.exercise_id,
                position=r.position,
                circuit_block_id=block_map.get(r.circuit_block_id) if r.circuit_block_id else None,
                circuit_id=r.circuit_id,
                circuit_rounds=r.circuit_rounds,
                notes=r.notes,
            )
            self.db.add(nr)
            await self.db.flush()
            for s in sets[r.id]:
                self.db.add(
                    PlannedSet(
                        template_exercise_id=nr.id,
                        set_number=s.set_number,
                        **{f: getattr(s, f) for f in PLANNED_FIELDS},
                    )
                )

        await self.db.commit()
        await self.db.refresh(copy)
        logger.info("template_copied", source_id=source.id, template_id=copy.id)
        return copy

    # --- template rows ---

    async def _insert_position(self, template_id: int, requested: int | None) -> int:
        rows = await self.get_rows(template_id)
        position = min(requested or len(rows) + 1, len(rows) + 1)
        if splits_block([r.circuit_block_id for r in rows], position):
            raise BadRequestException("Cannot insert inside a circuit block")
        return position

    async def add_exercise(self, template_id: int, payload: TemplateExerciseCreate) -> WorkoutTemplateExercise:
        template = await self.get_template(template_id)
        await ExerciseService(self.db, self.user_id).get_exercise(payload.exercise_id)

        position = await self._insert_position(template.id, payload.position)
        await shift_template_rows(self.db, template.id, position, 1)

        row = WorkoutTemplateExercise(
            template_id=template.id,
            exercise_id=payload.exercise_id,
            position=position,
            notes=payload.notes,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info("template_exercise_added", template_id=template.id, template_exercise_id=row.id, position=position)
        return row

    async def update_exercise(
        self, template_id: int, template_exercise_id: int, payload: TemplateExerciseUpdate
    ) -> WorkoutTemplateExercise:
        row = await self.get_row(template_id, template_exercise_id)
        for k, v in payload.model_dump(exclude_unset=True).items():
            setattr(row, k, v)
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def delete_exercise(self, template_id: int, template_exercise_id: int) -> None:
        row = await self.get_row(template_id, template_exercise_id)

        await self.db.execute(delete(PlannedSet).where(PlannedSet.template_exercise_id == row.id))
        await self.db.execute(
            update(SessionExercise)
            .where(SessionExercise.source_template_exercise_id == row.id)
            .values(source_template_exercise_id=None)
        )
        await self.db.delete(row)
        await self.db.flush()

        await prune_template_blocks(self.db, template_id)
        await renumber_template_rows(self.db, template_id)
        await self.db.commit()

    async def reorder_exercises(self, template_id: int, exercise_ids: list[int]) -> list[WorkoutTemplateExercise]:
        await self.get_template(template_id)
        rows = {r.id: r for r in await self.get_rows(template_id)}
        ensure_permutation(exercise_ids, list(rows), "exercise_ids")

        if not blocks_are_contiguous([rows[i].circuit_block_id for i in exercise_ids]):
            raise BadRequestException("Circuit exercises must stay together")

        for position, row_id in enumerate(exercise_ids, start=1):
            rows[row_id].position = position

        await self.db.commit()
        return [rows[i] for i in exercise_ids]

    # --- circuit blocks ---

    async def add_circuit(self, template_id: int, payload: AddCircuitRequest) -> TemplateCircuitBlock:
        template = await self.get_template(template_id)
        circuits = CircuitService(self.db, self.user_id)
        circuit = await circuits.get_circuit(payload.circuit_id)
        members = await circuits.ensure_has_members(circuit)
        rounds = payload.rounds or circuit.rounds

        position = await self._insert_position(template.id, payload.position)
        await shift_template_rows(self.db, template.id, position, len(members))

        block = TemplateCircuitBlock(
            template_id=template.id,
            circuit_id=circuit.id,
            name=circuit.name,
            rounds=rounds,
            rest_between_exercises_seconds=circuit.rest_between_exercises_seconds,
            rest_between_rounds_seconds=circuit.rest_between_rounds_seconds,
        )
        self.db.add(block)
        await self.db.flush()

        for offset, (ce, _) in enumerate(members):
            row = WorkoutTemplateExercise(
                template_id=template.id,
                exercise_id=ce.exercise_id,
                position=position + offset,
                circuit_block_id=block.id,
                circuit_id=circuit.id,
                circuit_rounds=rounds,
                notes=ce.notes,
            )
            self.db.add(row)
            await self.db.flush()

            rest = member_rest_seconds(
                ce.rest_after_seconds,
                circuit.rest_between_exercises_seconds,
                circuit.rest_between_rounds_seconds,
                is_last=offset == len(members) - 1,
            )
            for round_number in range(1, rounds + 1):
                self.db.add(
                    PlannedSet(
                        template_exercise_id=row.id,
                        set_number=round_number,
                        target_reps=ce.default_reps,
                        target_weight=ce.default_weight,
                        target_time_seconds=ce.default_time_seconds,
                        rest_seconds=rest,
                        is_warmup=False,
                    )
                )

        await self.db.commit()
        await self.db.refresh(block)
        logger.info(
            "template_circuit_added",
            template_id=template.id,
            block_id=block.id,
            circuit_id=circuit.id,
            rounds=rounds,
            position=position,
        )
        return block

    async def update_circuit_rounds(self, template_id: int, block_id: int, rounds: int) -> TemplateCircuitBlock:
        block = await self.get_block(template_id, block_id)
        res = await self.db.execute(
            select(WorkoutTemplateExercise).where(WorkoutTemplateExercise.circuit_block_id == block.id)
        )
        members = list(res.scalars().all())
        sets = await self.planned_sets_by_row([m.id for m in members])

        for m in members:
            m.circuit_rounds = rounds
            current = sets[m.id]
            if len(current) > rounds:
                for s in current[rounds:]:
                    await self.db.delete(s)
            else:
                last = current[-1] if current else None
                next_number = (last.set_number if last else 0) + 1
                for _ in range(rounds - len(current)):
                    self.db.add(
                        PlannedSet(
                            template_exercise_id=m.id,
                            set_number=next_number,
                            **({f: getattr(last, f) for f in PLANNED_FIELDS} if last else {}),
                        )
                    )
                    next_number += 1

        block.rounds = rounds
        await self.db.commit()
        await self.db.refresh(block)
        logger.info("template_circuit_rounds_updated", template_id=template_id, block_id=block.id, rounds=rounds)
        return block

    async def remove_circuit(self, template_id: int, block_id: int) -> None:
        block = await self.get_block(template_id, block_id)
        member_ids = select(WorkoutTemplateExercise.id).where(WorkoutTemplateExercise.circuit_block_id == block.id)

        await self.db.execute(delete(PlannedSet).where(PlannedSet.template_exercise_id.in_(member_ids)))
        await self.db.execute(
            update(SessionExercise)
            .where(SessionExercise.source_template_exercise_id.in_(member_ids))
            .values(source_template_exercise_id=None)
        )
        await self.db.execute(delete(WorkoutTemplateExercise).where(WorkoutTemplateExercise.circuit_block_id == block.id))
        await self.db.delete(block)
        await self.db.flush()

        await renumber_template_rows(self.db, template_id)
        await self.db.commit()
        logger.info("template_circuit_removed", template_id=template_id, block_id=block_id)

    # --- planned sets ---

    async def _get_planned_set(self, template_exercise_id: int, set_id: int) -> PlannedSet:
        res = await self.db.execute(
            select(PlannedSet).where(
                PlannedSet.id == set_id,
                PlannedSet.template_exercise_id == template_exercise_id,
            )
        )
        planned = res.scalar_one_or_none()
        if not planned:
            raise NotFoundException(f"Planned set {set_id} not found")
        return planned

    async def add_planned_set(self, template_id: int, template_exercise_id: int, payload: PlannedSetCreate) -> PlannedSet:
        row = await self.get_row(template_id, template_exercise_id)

        set_number = payload.set_number
        if set_number is None:
            current_max = (
                await self.db.execute(
                    select(func.max(PlannedSet.set_number)).where(PlannedSet.template_exercise_id == row.id)
                )
            ).scalar_one()
            set_number = (current_max or 0) + 1

        planned = PlannedSet(
            template_exercise_id=row.id,
            set_number=set_number,
            **payload.model_dump(include=set(PLANNED_FIELDS)),
        )
        self.db.add(planned)
        await self.db.commit()
        await self.db.refresh(planned)
        return planned

    async def update_planned_set(
        self, template_id: int, template_exercise_id: int, set_id: int, payload: PlannedSetUpdate
    ) -> PlannedSet:
        row = await self.get_row(template_id, template_exercise_id)
        planned = await self._get_planned_set(row.id, set_id)
        for k, v in payload.model_dump(exclude_unset=True).items():
            setattr(planned, k, v)
        await self.db.commit()
        await self.db.refresh(planned)
        return planned

    async def delete_planned_set(self, template_id: int, template_exercise_id: int, set_id: int) -> None:
        row = await self.get_row(template_id, template_exercise_id)
        planned = await self._get_planned_set(row.id, set_id)
        await self.db.delete(planned)
        await self.db.commit()

    async def reorder_planned_sets(self, template_id: int, template_exercise_id: int, set_ids: list[int]) -> list[PlannedSet]:
        row = await self.get_row(template_id, template_exercise_id)
        current = {s.id: s for s in (await self.planned_sets_by_row([row.id]))[row.id]}
        ensure_permutation(set_ids, list(current), "set_ids")

        for number, set_id in enumerate(set_ids, start=1):
            current[set_id].set_number = number

        await self.db.commit()
        return [current[i] for i in set_ids]
