import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import get_db
from liftlog.core.exceptions import ConflictException, UnauthorizedException
from liftlog.core.security import decode_token, hash_password, issue_token_pair, verify_password
from liftlog.models.user import User
from liftlog.schemas.auth import LoginRequest, RefreshRequest, RegisterRequest, TokenPair

router = APIRouter(prefix="/api/auth", tags=["auth"])

logger = structlog.get_logger(__name__)


@router.post("/register", response_model=TokenPair, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)):
    email = payload.email.lower()
    existing = await db.execute(select(User).where(User.email == email))
    if existing.scalar_one_or_none():
        raise ConflictException("Email already registered")

    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id)
    return TokenPair(**issue_token_pair(user.id))


@router.post("/login", response_model=TokenPair)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(User).where(User.email == payload.email.lower()))
    user = res.scalar_one_or_none()

    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("login_failed")
        raise UnauthorizedException("Invalid credentials")

    return TokenPair(**issue_token_pair(user.id))


@router.post("/refresh", response_model=TokenPair)
async def refresh(payload: RefreshRequest, db: AsyncSession = Depends(get_db)):
    try:
        user_id = decode_token(payload.refresh_token, expected_type="refresh")
    except ValueError:
        raise UnauthorizedException("Invalid refresh token")

    res = await db.execute(select(User.id).where(User.id == user_id))
    if res.scalar_one_or_none() is None:
        raise UnauthorizedException("User not found")

    return TokenPair(**issue_token_pair(user_id))
