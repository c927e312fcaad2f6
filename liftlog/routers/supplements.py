from datetime import datetime, time

import structlog
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import as_naive_utc, get_db, utcnow
from liftlog.core.deps import get_current_user
from liftlog.core.exceptions import ConflictException, NotFoundException
from liftlog.models.supplement import Supplement
from liftlog.models.supplement_log import SupplementLog
from liftlog.models.user import User
from liftlog.schemas.supplements import (
    SupplementCreate,
    SupplementLogCreate,
    SupplementLogOut,
    SupplementLogUpdate,
    SupplementOut,
    SupplementUpdate,
)

router = APIRouter(prefix="/api/supplements", tags=["supplements"])

logger = structlog.get_logger(__name__)


async def _get_supplement(db: AsyncSession, user_id: int, supplement_id: int) -> Supplement:
    res = await db.execute(
        select(Supplement).where(Supplement.id == supplement_id, Supplement.user_id == user_id)
    )
    supplement = res.scalar_one_or_none()
    if not supplement:
        raise NotFoundException(f"Supplement {supplement_id} not found")
    return supplement


async def _ensure_name_free(db: AsyncSession, user_id: int, name: str, exclude_id: int | None = None) -> None:
    q = select(Supplement.id).where(Supplement.user_id == user_id, Supplement.name == name)
    if exclude_id is not None:
        q = q.where(Supplement.id != exclude_id)
    if (await db.execute(q)).first():
        raise ConflictException(f"You already have a supplement named '{name}'")


async def _get_log(db: AsyncSession, user_id: int, log_id: int) -> SupplementLog:
    res = await db.execute(
        select(SupplementLog).where(SupplementLog.id == log_id, SupplementLog.user_id == user_id)
    )
    log = res.scalar_one_or_none()
    if not log:
        raise NotFoundException(f"Supplement log {log_id} not found")
    return log


def _log_out(log: SupplementLog, name: str | None) -> SupplementLogOut:
    return SupplementLogOut(
        id=log.id,
        supplement_id=log.supplement_id,
        supplement_name=name,
        taken_at=log.taken_at,
        dose=log.dose,
        notes=log.notes,
    )


async def _logs_since(db: AsyncSession, user_id: int, since: datetime | None) -> list[SupplementLogOut]:
    q = (
        select(SupplementLog, Supplement.name)
        .join(Supplement, SupplementLog.supplement_id == Supplement.id)
        .where(SupplementLog.user_id == user_id)
    )
    if since is not None:
        q = q.where(SupplementLog.taken_at >= since)
    res = await db.execute(q.order_by(SupplementLog.taken_at.desc(), SupplementLog.id.desc()))
    return [_log_out(log, name) for log, name in res.all()]


@router.get("", response_model=list[SupplementOut])
async def list_supplements(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    res = await db.execute(
        select(Supplement).where(Supplement.user_id == user.id).order_by(func.lower(Supplement.name))
    )
    return res.scalars().all()


@router.post("", response_model=SupplementOut, status_code=status.HTTP_201_CREATED)
async def create_supplement(
    payload: SupplementCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_name_free(db, user.id, payload.name)

    supplement = Supplement(user_id=user.id, **payload.model_dump())
    db.add(supplement)
    await db.commit()
    await db.refresh(supplement)

    logger.info("supplement_created", supplement_id=supplement.id)
    return supplement


# log routes sit above /{supplement_id} so "logs" never reaches the int converter
@router.get("/logs", response_model=list[SupplementLogOut])
async def list_logs(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _logs_since(db, user.id, None)


@router.get("/logs/today", response_model=list[SupplementLogOut])
async def list_logs_today(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    start_of_day = datetime.combine(utcnow().date(), time.min)
    return await _logs_since(db, user.id, start_of_day)


@router.post("/logs", response_model=SupplementLogOut, status_code=status.HTTP_201_CREATED)
async def create_log(
    payload: SupplementLogCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    supplement = await _get_supplement(db, user.id, payload.supplement_id)

    taken_at = as_naive_utc(payload.taken_at) if payload.taken_at else utcnow()

    log = SupplementLog(
        user_id=user.id,
        supplement_id=supplement.id,
        taken_at=taken_at,
        dose=payload.dose if payload.dose is not None else supplement.default_dose,
        notes=payload.notes,
    )
    db.add(log)
    await db.commit()
    await db.refresh(log)

    logger.info("supplement_logged", supplement_id=supplement.id, log_id=log.id)
    return _log_out(log, supplement.name)


@router.patch("/logs/{log_id}", response_model=SupplementLogOut)
async def update_log(
    log_id: int,
    payload: SupplementLogUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    log = await _get_log(db, user.id, log_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("taken_at") is not None:
        data["taken_at"] = as_naive_utc(data["taken_at"])
    for k, v in data.items():
        setattr(log, k, v)
    await db.commit()
    await db.refresh(log)

    supplement = await _get_supplement(db, user.id, log.supplement_id)
    return _log_out(log, supplement.name)


@router.delete("/logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_log(
    log_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    log = await _get_log(db, user.id, log_id)
    await db.delete(log)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{supplement_id}", response_model=SupplementOut)
async def update_supplement(
    supplement_id: int,
    payload: SupplementUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    supplement = await _get_supplement(db, user.id, supplement_id)

    data = payload.model_dump(exclude_unset=True)
    if data.get("name") and data["name"] != supplement.name:
        await _ensure_name_free(db, user.id, data["name"], exclude_id=supplement.id)
    for k, v in data.items():
        setattr(supplement, k, v)

    await db.commit()
    await db.refresh(supplement)
    return supplement


@router.delete("/{supplement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_supplement(
    supplement_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    supplement = await _get_supplement(db, user.id, supplement_id)

    await db.execute(delete(SupplementLog).where(SupplementLog.supplement_id == supplement.id))
    await db.delete(supplement)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
