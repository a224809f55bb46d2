from typing import Optional, Tuple

from passlib.context import CryptContext

# argon2 only; hashes made with older parameters are upgraded on login
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def check_login_password(plain_password: str, hashed_password: str) -> Tuple[bool, Optional[str]]:
    """
    Verifies a login attempt. The second item is a fresh hash when the
    stored one uses outdated argon2 parameters, else None.
    """
    return pwd_context.verify_and_update(plain_password, hashed_password)
