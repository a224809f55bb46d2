from fastapi import APIRouter, Depends

from quizapp.models import User
from quizapp.schemas.user import UserProfile
from quizapp.auth.dependencies import get_current_user


router = APIRouter(prefix="/user", tags=["User Profile"])

@router.get("/my-profile", response_model=UserProfile)
async def get_my_profile(
    current_user: User = Depends(get_current_user),
):
    return current_user
