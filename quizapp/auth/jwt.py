from datetime import datetime, timedelta
from typing import Optional, Tuple
import os
from jose import JWTError, jwt
from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

TOKEN_LIFETIMES = {
    "access": timedelta(minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))),
    "refresh": timedelta(days=int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", 7))),
}


def user_claims(user) -> dict:
    """Claims every token of a quiz platform account carries."""
    return {"user_id": str(user.id), "email": user.email}


def _encode(claims: dict, token_type: str, expires_delta: Optional[timedelta]) -> str:
    to_encode = dict(claims)
    to_encode["exp"] = datetime.utcnow() + (expires_delta or TOKEN_LIFETIMES[token_type])
    to_encode["type"] = token_type
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(claims, "access", expires_delta)


def create_refresh_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(claims, "refresh", expires_delta)


def issue_tokens(user) -> Tuple[str, str]:
    """Access and refresh token for a signed-in user."""
    claims = user_claims(user)
    return create_access_token(claims), create_refresh_token(claims)


def verify_token(token: str, expected_type: str = "access") -> dict:
    """
    Decodes a token and checks its `type` claim.

    Raises:
        JWTError: bad signature, expired, or a token of the other type.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise JWTError("Invalid or expired token") from e

    if payload.get("type") != expected_type:
        raise JWTError(f"Invalid token type. Expected '{expected_type}'.")
    return payload
