"""Security utilities for NexaCRM: password hashing and JWT token operations.

Tokens carry the user id as ``sub`` plus the public identity claims (name,
email, role) and an expiration claim. Validation errors surface as
``ValueError`` so callers decide which HTTP error to raise.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from nexacrm.core.settings import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, claims: Optional[Dict[str, Any]] = None, expires_minutes: Optional[int] = None) -> str:
    settings = get_settings()
    expire_delta = timedelta(
        minutes=expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    expire = datetime.now(timezone.utc) + expire_delta
    payload = dict(claims or {})
    payload.update({"sub": str(user_id), "exp": expire})
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def create_user_token(user) -> str:
    return create_access_token(
        user_id=user.id,
        claims={"name": user.name, "email": user.email, "role": user.role},
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as exc:
        raise ValueError("Expired token") from exc
    except jwt.InvalidTokenError as exc:
        raise ValueError("Invalid token") from exc
