from datetime import datetime, timedelta, timezone
from typing import Literal

from jose import JWTError, jwt
from passlib.context import CryptContext

from liftlog.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
TokenType = Literal["access", "refresh"]


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_token(*, user_id: int, token_type: TokenType, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def issue_token_pair(user_id: int) -> dict[str, str]:
    """Access + refresh tokens in the shape the auth endpoints return."""
    return {
        "access_token": create_token(
            user_id=user_id,
            token_type="access",
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_MINUTES),
        ),
        "refresh_token": create_token(
            user_id=user_id,
            token_type="refresh",
            expires_delta=timedelta(days=settings.REFRESH_TOKEN_DAYS),
        ),
        "token_type": "bearer",
    }


def decode_token(token: str, expected_type: TokenType = "access") -> int:
    """Return the user id carried by ``token``.

    Raises ValueError for bad signatures, expiry, or a token of the wrong type.
    """
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        raise ValueError("Invalid token")

    if claims.get("type") != expected_type:
        raise ValueError("Invalid token type")
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise ValueError("Invalid token subject")
