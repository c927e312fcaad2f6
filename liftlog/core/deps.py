import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liftlog.core.db import get_db
from liftlog.core.exceptions import UnauthorizedException
from liftlog.core.security import decode_token
from liftlog.models.user import User

bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    if creds is None or not creds.credentials:
        raise UnauthorizedException("Not authenticated")

    try:
        user_id = decode_token(creds.credentials, expected_type="access")
    except ValueError as e:
        raise UnauthorizedException(str(e))

    res = await db.execute(select(User).where(User.id == user_id))
    user = res.scalar_one_or_none()
    if not user:
        raise UnauthorizedException("User not found")

    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user
