"""Authentication dependencies for retrieving the current user."""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from nexacrm.core.errors import AuthError, ForbiddenError
from nexacrm.core.security import decode_access_token
from nexacrm.db.session import get_db
from nexacrm.models.user import User


def get_current_user(db: Session = Depends(get_db), authorization: str | None = Header(default=None)) -> User:
    # Expect Authorization: Bearer <token>
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthError("Not authenticated")
    token = authorization.split(" ", 1)[1]
    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise AuthError(str(exc)) from exc

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthError("Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthError("Not authenticated")
    return user


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise ForbiddenError("Admin access required")
    return current_user
