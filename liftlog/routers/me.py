from fastapi import APIRouter, Depends

from liftlog.core.deps import get_current_user
from liftlog.models.user import User
from liftlog.schemas.user import UserOut

router = APIRouter(prefix="/api", tags=["me"])


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    return user
