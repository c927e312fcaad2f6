from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import get_db
from liftlog.core.deps import get_current_user
from liftlog.models.user import User
from liftlog.schemas.circuits import ReorderRequest
from liftlog.schemas.templates import (
    AddCircuitRequest,
    CircuitBlockOut,
    PlannedSetCreate,
    PlannedSetOut,
    PlannedSetUpdate,
    SetReorderRequest,
    TemplateCreate,
    TemplateExerciseCreate,
    TemplateExerciseOut,
    TemplateExerciseUpdate,
    TemplateOut,
    TemplateSummary,
    TemplateUpdate,
    UpdateRoundsRequest,
)
from liftlog.services.template_service import TemplateService

router = APIRouter(prefix="/api/templates", tags=["templates"])


def get_template_service(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> TemplateService:
    return TemplateService(db, user.id)


@router.get("", response_model=list[TemplateSummary])
async def list_templates(service: TemplateService = Depends(get_template_service)):
    return await service.list_templates()


@router.get("/{template_id}")
async def get_template(template_id: int, service: TemplateService = Depends(get_template_service)):
    # rows, planned sets, circuit blocks and the grouped "items" view
    return await service.get_detail(template_id)


@router.post("", response_model=TemplateOut, status_code=status.HTTP_201_CREATED)
async def create_template(payload: TemplateCreate, service: TemplateService = Depends(get_template_service)):
    return await service.create_template(payload)


@router.patch("/{template_id}", response_model=TemplateOut)
async def update_template(
    template_id: int,
    payload: TemplateUpdate,
    service: TemplateService = Depends(get_template_service),
):
    return await service.update_template(template_id, payload)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(template_id: int, service: TemplateService = Depends(get_template_service)):
    await service.delete_template(template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{template_id}/copy", response_model=TemplateOut, status_code=status.HTTP_201_CREATED)
async def copy_template(template_id: int, service: TemplateService = Depends(get_template_service)):
    return await service.copy_template(template_id)


# --- template exercises ---

@router.post("/{template_id}/exercises", response_model=TemplateExerciseOut, status_code=status.HTTP_201_CREATED)
async def add_template_exercise(
    template_id: int,
    payload: TemplateExerciseCreate,
    service: TemplateService = Depends(get_template_service),
):
    return await service.add_exercise(template_id, payload)


@router.patch("/{template_id}/exercises/reorder", response_model=list[TemplateExerciseOut])
async def reorder_template_exercises(
    template_id: int,
    payload: ReorderRequest,
    service: TemplateService = Depends(get_template_service),
):
    return await service.reorder_exercises(template_id, payload.exercise_ids)


@router.patch("/{template_id}/exercises/{template_exercise_id}", response_model=TemplateExerciseOut)
async def update_template_exercise(
    template_id: int,
    template_exercise_id: int,
    payload: TemplateExerciseUpdate,
    service: TemplateService = Depends(get_template_service),
):
    return await service.update_exercise(template_id, template_exercise_id, payload)


@router.delete("/{template_id}/exercises/{template_exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template_exercise(
    template_id: int,
    template_exercise_id: int,
    service: TemplateService = Depends(get_template_service),
):
    await service.delete_exercise(template_id, template_exercise_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- circuit blocks ---

@router.post("/{template_id}/circuits", response_model=CircuitBlockOut, status_code=status.HTTP_201_CREATED)
async def add_template_circuit(
    template_id: int,
    payload: AddCircuitRequest,
    service: TemplateService = Depends(get_template_service),
):
    return await service.add_circuit(template_id, payload)


@router.patch("/{template_id}/circuits/{block_id}", response_model=CircuitBlockOut)
async def update_template_circuit(
    template_id: int,
    block_id: int,
    payload: UpdateRoundsRequest,
    service: TemplateService = Depends(get_template_service),
):
    return await service.update_circuit_rounds(template_id, block_id, payload.rounds)


@router.delete("/{template_id}/circuits/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template_circuit(
    template_id: int,
    block_id: int,
    service: TemplateService = Depends(get_template_service),
):
    await service.remove_circuit(template_id, block_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- planned sets ---

@router.post(
    "/{template_id}/exercises/{template_exercise_id}/sets",
    response_model=PlannedSetOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_planned_set(
    template_id: int,
    template_exercise_id: int,
    payload: PlannedSetCreate,
    service: TemplateService = Depends(get_template_service),
):
    return await service.add_planned_set(template_id, template_exercise_id, payload)


@router.post("/{template_id}/exercises/{template_exercise_id}/sets/reorder", response_model=list[PlannedSetOut])
async def reorder_planned_sets(
    template_id: int,
    template_exercise_id: int,
    payload: SetReorderRequest,
    service: TemplateService = Depends(get_template_service),
):
    return await service.reorder_planned_sets(template_id, template_exercise_id, payload.set_ids)


@router.patch("/{template_id}/exercises/{template_exercise_id}/sets/{set_id}", response_model=PlannedSetOut)
async def update_planned_set(
    template_id: int,
    template_exercise_id: int,
    set_id: int,
    payload: PlannedSetUpdate,
    service: TemplateService = Depends(get_template_service),
):
    return await service.update_planned_set(template_id, template_exercise_id, set_id, payload)


@router.delete(
    "/{template_id}/exercises/{template_exercise_id}/sets/{set_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_planned_set(
    template_id: int,
    template_exercise_id: int,
    set_id: int,
    service: TemplateService = Depends(get_template_service),
):
    await service.delete_planned_set(template_id, template_exercise_id, set_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
