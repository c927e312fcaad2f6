from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import as_naive_utc, get_db, utcnow
from liftlog.core.deps import get_current_user
from liftlog.core.exceptions import NotFoundException
from liftlog.models.body_weight_log import BodyWeightLog
from liftlog.models.user import User
from liftlog.schemas.weight import BodyWeightCreate, BodyWeightOut

router = APIRouter(prefix="/api/weight", tags=["weight"])


@router.get("", response_model=list[BodyWeightOut])
async def list_weights(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    res = await db.execute(
        select(BodyWeightLog)
        .where(BodyWeightLog.user_id == user.id)
        .order_by(BodyWeightLog.logged_at.desc(), BodyWeightLog.id.desc())
    )
    return res.scalars().all()


@router.post("", response_model=BodyWeightOut, status_code=status.HTTP_201_CREATED)
async def log_weight(
    payload: BodyWeightCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    logged_at = as_naive_utc(payload.logged_at) if payload.logged_at else utcnow()
    entry = BodyWeightLog(
        user_id=user.id,
        weight_lbs=payload.weight_lbs,
        logged_at=logged_at,
        notes=payload.notes,
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_weight(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    res = await db.execute(
        select(BodyWeightLog).where(BodyWeightLog.id == entry_id, BodyWeightLog.user_id == user.id)
    )
    entry = res.scalar_one_or_none()
    if not entry:
        raise NotFoundException(f"Weight entry {entry_id} not found")

    await db.delete(entry)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
