from fastapi import APIRouter, Depends

from ..dependencies import get_current_user, get_storage
from ..core.errors import Unauthenticated
from ..schemas.auth import UserPublic
from ..schemas.notes import ProfileResponse
from ..storage import DatabaseStorage

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/profile", response_model=ProfileResponse)
def profile(current: UserPublic = Depends(get_current_user), storage: DatabaseStorage = Depends(get_storage)):
    user = storage.get_account_by_id(current.id)
    if not user:
        raise Unauthenticated("User not found")
    return ProfileResponse.model_validate(user)
