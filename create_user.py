import asyncio
from getpass import getpass
from sqlalchemy import select
from quizapp.database import AsyncSessionLocal
from quizapp.models import User
from quizapp.auth.password_security import hash_password


async def create_user_interactive():
    """
    Interactively create a quiz platform account in the database.
    """
    email = input("Enter email: ").strip().lower()
    name = input("Enter name (optional): ").strip() or email.split("@")[0]
    password = getpass("Enter password: ").strip()
    password_confirm = getpass("Confirm password: ").strip()

    if password != password_confirm:
        print("Passwords do not match. Exiting.")
        return

    async with AsyncSessionLocal() as session:
        existing_user = await session.scalar(
            select(User).where(User.email == email)
        )
        if existing_user:
            print(f"User with email {email} already exists.")
            return

        session.add(
            User(
                email=email,
                name=name,
                password_hash=hash_password(password)
            )
        )
        await session.commit()
        print(f"User created successfully: {email}")


if __name__ == "__main__":
    asyncio.run(create_user_interactive())
