import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from datetime import datetime

from quizapp.database import get_db
from quizapp.models import User
from quizapp.auth.password_security import check_login_password
from quizapp.auth.jwt import issue_tokens
from quizapp.helpers.errors import Unauthorized
from quizapp.schemas.user import TokenResponse, UserLoginRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["User Login"])


# ---------------------------
# User login route
# ---------------------------
@router.post("/user/login", response_model=TokenResponse)
async def user_login(request: UserLoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Authenticate a user by email and password.
    Returns access and refresh JWT tokens on success.
    Raises 401 if credentials are invalid.
    """
    email = request.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalars().first()

    valid, new_hash = (False, None)
    if user and user.is_active:
        valid, new_hash = check_login_password(request.password, user.password_hash)

    if not valid:
        logger.warning("Failed login for %s", email)
        raise Unauthorized("Invalid email or password")

    if new_hash:
        user.password_hash = new_hash
        logger.info("Upgraded password hash for user %s", user.id)

    user.last_login = datetime.utcnow()
    await db.commit()

    access_token, refresh_token = issue_tokens(user)
    return TokenResponse(access_token=access_token, refresh_token=refresh_token)
