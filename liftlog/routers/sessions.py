from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import get_db
from liftlog.core.deps import get_current_user
from liftlog.models.user import User
from liftlog.schemas.circuits import ReorderRequest
from liftlog.schemas.sessions import (
    EndSessionRequest,
    PerformedSetCreate,
    PerformedSetOut,
    PerformedSetUpdate,
    PrefillOut,
    SessionCircuitCreate,
    SessionExerciseCreate,
    SessionExerciseOut,
    SessionExerciseUpdate,
    SessionOut,
    SessionSummary,
    SessionUpdate,
)
from liftlog.services.session_service import SessionService

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def get_session_service(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SessionService:
    return SessionService(db, user.id)


@router.get("", response_model=list[SessionSummary])
async def list_sessions(service: SessionService = Depends(get_session_service)):
    return await service.list_sessions()


@router.get("/active")
async def get_active_session(service: SessionService = Depends(get_session_service)):
    return await service.get_active_summary()


@router.get("/export")
async def export_sessions(service: SessionService = Depends(get_session_service)):
    body = await service.export_csv()
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="liftlog-sessions.csv"'},
    )


@router.post("/adhoc", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
async def create_adhoc_session(service: SessionService = Depends(get_session_service)):
    return await service.create_adhoc()


@router.post("/start/{schedule_id}", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
async def start_session(schedule_id: int, service: SessionService = Depends(get_session_service)):
    return await service.start_from_schedule(schedule_id)


@router.post("/start-from-template/{template_id}", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
async def start_session_from_template(template_id: int, service: SessionService = Depends(get_session_service)):
    return await service.start_from_template(template_id)


@router.get("/{session_id}")
async def get_session(session_id: int, service: SessionService = Depends(get_session_service)):
    return await service.get_detail(session_id)


@router.get("/{session_id}/last-performance")
async def get_last_performance(session_id: int, service: SessionService = Depends(get_session_service)):
    return await service.get_last_performance(session_id)


@router.get("/{session_id}/exercises/{session_exercise_id}/prefill", response_model=PrefillOut | None)
async def get_prefill(
    session_id: int,
    session_exercise_id: int,
    service: SessionService = Depends(get_session_service),
):
    return await service.get_prefill(session_id, session_exercise_id)


@router.post("/{session_id}/end", response_model=SessionOut)
async def end_session(
    session_id: int,
    payload: EndSessionRequest | None = None,
    service: SessionService = Depends(get_session_service),
):
    return await service.end_session(session_id, payload.notes if payload else None)


@router.patch("/{session_id}", response_model=SessionOut)
async def update_session(
    session_id: int,
    payload: SessionUpdate,
    service: SessionService = Depends(get_session_service),
):
    return await service.update_session(session_id, payload)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: int, service: SessionService = Depends(get_session_service)):
    await service.delete_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- session exercises ---

@router.post("/{session_id}/exercises", response_model=SessionExerciseOut, status_code=status.HTTP_201_CREATED)
async def add_session_exercise(
    session_id: int,
    payload: SessionExerciseCreate,
    service: SessionService = Depends(get_session_service),
):
    return await service.add_exercise(session_id, payload)


@router.post("/{session_id}/circuits", status_code=status.HTTP_201_CREATED)
async def add_session_circuit(
    session_id: int,
    payload: SessionCircuitCreate,
    service: SessionService = Depends(get_session_service),
):
    block = await service.add_circuit(session_id, payload)
    return {
        "id": block.id,
        "session_id": block.session_id,
        "circuit_id": block.circuit_id,
        "name": block.name,
        "rounds": block.rounds,
    }


@router.patch("/{session_id}/exercises/reorder", response_model=list[SessionExerciseOut])
async def reorder_session_exercises(
    session_id: int,
    payload: ReorderRequest,
    service: SessionService = Depends(get_session_service),
):
    return await service.reorder_exercises(session_id, payload.exercise_ids)


@router.patch("/{session_id}/exercises/{session_exercise_id}", response_model=SessionExerciseOut)
async def update_session_exercise(
    session_id: int,
    session_exercise_id: int,
    payload: SessionExerciseUpdate,
    service: SessionService = Depends(get_session_service),
):
    return await service.update_exercise(session_id, session_exercise_id, payload)


@router.delete("/{session_id}/exercises/{session_exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session_exercise(
    session_id: int,
    session_exercise_id: int,
    service: SessionService = Depends(get_session_service),
):
    await service.delete_exercise(session_id, session_exercise_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- performed sets ---

@router.post(
    "/{session_id}/exercises/{session_exercise_id}/sets",
    response_model=PerformedSetOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_performed_set(
    session_id: int,
    session_exercise_id: int,
    payload: PerformedSetCreate,
    service: SessionService = Depends(get_session_service),
):
    return await service.add_set(session_id, session_exercise_id, payload)


@router.patch("/{session_id}/exercises/{session_exercise_id}/sets/{set_id}", response_model=PerformedSetOut)
async def update_performed_set(
    session_id: int,
    session_exercise_id: int,
    set_id: int,
    payload: PerformedSetUpdate,
    service: SessionService = Depends(get_session_service),
):
    return await service.update_set(session_id, session_exercise_id, set_id, payload)


@router.delete(
    "/{session_id}/exercises/{session_exercise_id}/sets/{set_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_performed_set(
    session_id: int,
    session_exercise_id: int,
    set_id: int,
    service: SessionService = Depends(get_session_service),
):
    await service.delete_set(session_id, session_exercise_id, set_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
