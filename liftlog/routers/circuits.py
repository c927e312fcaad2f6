from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import get_db
from liftlog.core.deps import get_current_user
from liftlog.models.user import User
from liftlog.schemas.circuits import (
    CircuitCreate,
    CircuitDetail,
    CircuitExerciseCreate,
    CircuitExerciseOut,
    CircuitExerciseUpdate,
    CircuitOut,
    CircuitSummary,
    CircuitUpdate,
    ReorderRequest,
)
from liftlog.services.circuit_service import CircuitService

router = APIRouter(prefix="/api/circuits", tags=["circuits"])


def get_circuit_service(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CircuitService:
    return CircuitService(db, user.id)


@router.get("", response_model=list[CircuitSummary])
async def list_circuits(service: CircuitService = Depends(get_circuit_service)):
    return await service.list_circuits()


@router.get("/hidden", response_model=list[CircuitOut])
async def list_hidden_circuits(service: CircuitService = Depends(get_circuit_service)):
    return await service.list_hidden()


@router.get("/{circuit_id}", response_model=CircuitDetail)
async def get_circuit(circuit_id: int, service: CircuitService = Depends(get_circuit_service)):
    return await service.get_detail(circuit_id)


@router.post("", response_model=CircuitOut, status_code=status.HTTP_201_CREATED)
async def create_circuit(payload: CircuitCreate, service: CircuitService = Depends(get_circuit_service)):
    return await service.create_circuit(payload)


@router.patch("/{circuit_id}", response_model=CircuitOut)
async def update_circuit(
    circuit_id: int,
    payload: CircuitUpdate,
    service: CircuitService = Depends(get_circuit_service),
):
    return await service.update_circuit(circuit_id, payload)


@router.delete("/{circuit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_circuit(circuit_id: int, service: CircuitService = Depends(get_circuit_service)):
    await service.delete_circuit(circuit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{circuit_id}/copy", response_model=CircuitOut, status_code=status.HTTP_201_CREATED)
async def copy_circuit(circuit_id: int, service: CircuitService = Depends(get_circuit_service)):
    return await service.copy_circuit(circuit_id)


@router.post("/{circuit_id}/restore", status_code=status.HTTP_204_NO_CONTENT)
async def restore_circuit(circuit_id: int, service: CircuitService = Depends(get_circuit_service)):
    await service.restore_circuit(circuit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- members ---

@router.post("/{circuit_id}/exercises", response_model=CircuitExerciseOut, status_code=status.HTTP_201_CREATED)
async def add_circuit_exercise(
    circuit_id: int,
    payload: CircuitExerciseCreate,
    service: CircuitService = Depends(get_circuit_service),
):
    return await service.add_member(circuit_id, payload)


# registered before /{circuit_exercise_id} so "reorder" is not parsed as an id
@router.patch("/{circuit_id}/exercises/reorder", response_model=list[CircuitExerciseOut])
async def reorder_circuit_exercises(
    circuit_id: int,
    payload: ReorderRequest,
    service: CircuitService = Depends(get_circuit_service),
):
    return await service.reorder_members(circuit_id, payload.exercise_ids)


@router.patch("/{circuit_id}/exercises/{circuit_exercise_id}", response_model=CircuitExerciseOut)
async def update_circuit_exercise(
    circuit_id: int,
    circuit_exercise_id: int,
    payload: CircuitExerciseUpdate,
    service: CircuitService = Depends(get_circuit_service),
):
    return await service.update_member(circuit_id, circuit_exercise_id, payload)


@router.delete("/{circuit_id}/exercises/{circuit_exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_circuit_exercise(
    circuit_id: int,
    circuit_exercise_id: int,
    service: CircuitService = Depends(get_circuit_service),
):
    await service.delete_member(circuit_id, circuit_exercise_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
