from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import get_db
from liftlog.core.deps import get_current_user
from liftlog.models.user import User
from liftlog.schemas.analytics import (
    AnalyticsRange,
    CategoryVolume,
    ExerciseProgressPoint,
    OverviewOut,
    PersonalRecordOut,
    SessionDuration,
    SessionVolume,
    SupplementAdherenceOut,
    WeightTrendOut,
)
from liftlog.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def get_analytics_service(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> AnalyticsService:
    return AnalyticsService(db, user.id)


@router.get("/overview", response_model=OverviewOut)
async def overview(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.overview()


@router.get("/prs", response_model=list[PersonalRecordOut])
async def personal_records(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.personal_records()


@router.get("/volume", response_model=list[SessionVolume])
async def volume(
    range: AnalyticsRange = Query("3mo"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.volume(range)


@router.get("/volume-by-category", response_model=list[CategoryVolume])
async def volume_by_category(
    range: AnalyticsRange = Query("3mo"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.volume_by_category(range)


@router.get("/sessions", response_model=list[SessionDuration])
async def session_durations(
    range: AnalyticsRange = Query("3mo"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.session_durations(range)


@router.get("/exercise/{exercise_id}", response_model=list[ExerciseProgressPoint])
async def exercise_progress(
    exercise_id: int,
    range: AnalyticsRange = Query("3mo"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.exercise_progress(exercise_id, range)


@router.get("/supplements", response_model=list[SupplementAdherenceOut])
async def supplement_adherence(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.supplement_adherence()


@router.get("/weight", response_model=WeightTrendOut)
async def weight_trend(
    range: AnalyticsRange = Query("3mo"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.weight_trend(range)
