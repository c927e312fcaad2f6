from datetime import date, timedelta

import structlog
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import get_db
from liftlog.core.deps import get_current_user
from liftlog.core.exceptions import BadRequestException, ScheduleNotFoundException
from liftlog.models.user import User
from liftlog.models.workout_schedule import WorkoutScheduleItem
from liftlog.models.workout_session import WorkoutSession
from liftlog.models.workout_template import WorkoutTemplate
from liftlog.schemas.schedule import ScheduleCreate, ScheduleItemOut, ScheduleUpdate
from liftlog.services.template_service import TemplateService

router = APIRouter(prefix="/api/schedule", tags=["schedule"])

logger = structlog.get_logger(__name__)


async def _items_between(db: AsyncSession, user_id: int, start: date, end: date) -> list[dict]:
    res = await db.execute(
        select(WorkoutScheduleItem, WorkoutTemplate)
        .join(WorkoutTemplate, WorkoutScheduleItem.template_id == WorkoutTemplate.id)
        .where(
            WorkoutScheduleItem.user_id == user_id,
            WorkoutScheduleItem.scheduled_date >= start,
            WorkoutScheduleItem.scheduled_date <= end,
        )
        .order_by(WorkoutScheduleItem.scheduled_date.asc(), WorkoutScheduleItem.id.asc())
    )
    return [_item_out(item, template) for item, template in res.all()]


def _item_out(item: WorkoutScheduleItem, template: WorkoutTemplate | None) -> dict:
    return {
        "id": item.id,
        "template_id": item.template_id,
        "scheduled_date": item.scheduled_date,
        "status": item.status,
        "created_at": item.created_at,
        "template": {"id": template.id, "name": template.name} if template else None,
    }


async def _get_item(db: AsyncSession, user_id: int, schedule_id: int) -> WorkoutScheduleItem:
    res = await db.execute(
        select(WorkoutScheduleItem).where(
            WorkoutScheduleItem.id == schedule_id,
            WorkoutScheduleItem.user_id == user_id,
        )
    )
    item = res.scalar_one_or_none()
    if not item:
        raise ScheduleNotFoundException(schedule_id)
    return item


@router.get("/week/{start_date}", response_model=list[ScheduleItemOut])
async def get_week(
    start_date: date,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _items_between(db, user.id, start_date, start_date + timedelta(days=6))


@router.get("/range/{start_date}/{end_date}", response_model=list[ScheduleItemOut])
async def get_range(
    start_date: date,
    end_date: date,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if end_date < start_date:
        raise BadRequestException("end_date must not be before start_date")
    return await _items_between(db, user.id, start_date, end_date)


@router.get("/{day}", response_model=list[ScheduleItemOut])
async def get_day(
    day: date,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _items_between(db, user.id, day, day)


@router.post("", response_model=ScheduleItemOut, status_code=status.HTTP_201_CREATED)
async def create_schedule_item(
    payload: ScheduleCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    template = await TemplateService(db, user.id).get_template(payload.template_id)

    item = WorkoutScheduleItem(
        user_id=user.id,
        template_id=template.id,
        scheduled_date=payload.scheduled_date,
        status=payload.status,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)

    logger.info("workout_scheduled", schedule_id=item.id, template_id=template.id, date=str(item.scheduled_date))
    return _item_out(item, template)


@router.patch("/{schedule_id}", response_model=ScheduleItemOut)
async def update_schedule_item(
    schedule_id: int,
    payload: ScheduleUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    item = await _get_item(db, user.id, schedule_id)

    data = payload.model_dump(exclude_unset=True)
    for k, v in data.items():
        if v is None:
            continue
        setattr(item, k, v)

    await db.commit()
    await db.refresh(item)

    res = await db.execute(select(WorkoutTemplate).where(WorkoutTemplate.id == item.template_id))
    return _item_out(item, res.scalar_one_or_none())


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule_item(
    schedule_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    item = await _get_item(db, user.id, schedule_id)

    await db.execute(
        update(WorkoutSession).where(WorkoutSession.schedule_id == item.id).values(schedule_id=None)
    )
    await db.delete(item)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
