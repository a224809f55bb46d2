from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from jose import JWTError
import uuid


from quizapp.database import get_db
from quizapp.models import User
from quizapp.auth.jwt import verify_token
from quizapp.helpers.errors import Unauthorized


bearer_scheme = HTTPBearer(auto_error=False)


async def _user_from_token(token: str, db: AsyncSession) -> User:
    try:
        payload = verify_token(token, expected_type="access")
        user_id_str: str = payload.get("user_id")
        if not user_id_str:
            raise Unauthorized("Invalid token payload")

        # Convert string back to UUID
        user_id = uuid.UUID(user_id_str)

    except (JWTError, ValueError):  # ValueError for invalid UUID string
        raise Unauthorized("Invalid or expired token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()
    if not user or not user.is_active:
        raise Unauthorized("User not found")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Get the current logged-in User from the JWT access token.
    Raises 401 if the token is missing, invalid, expired, or the user is gone.
    """
    if credentials is None:
        raise Unauthorized("Not authenticated")
    return await _user_from_token(credentials.credentials, db)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """
    Same as get_current_user for public endpoints: anonymous callers get None,
    but a token that is present and invalid is still rejected.
    """
    if credentials is None:
        return None
    return await _user_from_token(credentials.credentials, db)
