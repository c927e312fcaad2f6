from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import get_db
from liftlog.core.deps import get_current_user
from liftlog.models.user import User
from liftlog.schemas.exercises import ExerciseCreate, ExerciseHistoryEntry, ExerciseOut, ExerciseUpdate
from liftlog.services.exercise_service import ExerciseService

router = APIRouter(prefix="/api/exercises", tags=["exercises"])


def get_exercise_service(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ExerciseService:
    return ExerciseService(db, user.id)


@router.get("", response_model=list[ExerciseOut])
async def list_exercises(service: ExerciseService = Depends(get_exercise_service)):
    return await service.list_exercises()


@router.get("/performed", response_model=list[ExerciseOut])
async def list_performed_exercises(service: ExerciseService = Depends(get_exercise_service)):
    return await service.list_performed()


@router.get("/hidden", response_model=list[ExerciseOut])
async def list_hidden_exercises(service: ExerciseService = Depends(get_exercise_service)):
    return await service.list_hidden()


@router.get("/{exercise_id}", response_model=ExerciseOut)
async def get_exercise(exercise_id: int, service: ExerciseService = Depends(get_exercise_service)):
    return await service.get_exercise(exercise_id)


@router.get("/{exercise_id}/history", response_model=list[ExerciseHistoryEntry])
async def get_exercise_history(exercise_id: int, service: ExerciseService = Depends(get_exercise_service)):
    return await service.get_history(exercise_id)


@router.post("", response_model=ExerciseOut, status_code=status.HTTP_201_CREATED)
async def create_exercise(payload: ExerciseCreate, service: ExerciseService = Depends(get_exercise_service)):
    return await service.create_exercise(payload)


@router.patch("/{exercise_id}", response_model=ExerciseOut)
async def update_exercise(
    exercise_id: int,
    payload: ExerciseUpdate,
    service: ExerciseService = Depends(get_exercise_service),
):
    return await service.update_exercise(exercise_id, payload)


@router.delete("/{exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_exercise(exercise_id: int, service: ExerciseService = Depends(get_exercise_service)):
    # System rows are hidden for this user, custom rows are removed
    await service.delete_exercise(exercise_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{exercise_id}/copy", response_model=ExerciseOut, status_code=status.HTTP_201_CREATED)
async def copy_exercise(exercise_id: int, service: ExerciseService = Depends(get_exercise_service)):
    return await service.copy_exercise(exercise_id)


@router.post("/{exercise_id}/restore", status_code=status.HTTP_204_NO_CONTENT)
async def restore_exercise(exercise_id: int, service: ExerciseService = Depends(get_exercise_service)):
    await service.restore_exercise(exercise_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
