from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from quizapp.database import get_db
from quizapp.models import User
from quizapp.schemas.user import UserCreate
from quizapp.auth.password_security import hash_password

router = APIRouter(prefix="/user", tags=["User Registration"])


@router.post("/register", status_code=201)
async def register_user(data: UserCreate, db: AsyncSession = Depends(get_db)):
    email = data.email.lower()

    result = await db.execute(select(User).where(User.email == email))
    if result.scalars().first():
        raise HTTPException(400, "Email already exists")

    user = User(
        name=data.name.strip(),
        email=email,
        password_hash=hash_password(data.password),
    )

    db.add(user)
    await db.commit()
    await db.refresh(user)

    return {
        "message": "User registered successfully",
        "user_id": str(user.id),
    }
