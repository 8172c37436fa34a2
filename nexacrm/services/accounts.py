"""Account creation and owner-protection rules shared by auth and admin routes."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from nexacrm.core.errors import ConflictError
from nexacrm.core.security import get_password_hash
from nexacrm.core.settings import get_settings
from nexacrm.models.user import User

logger = logging.getLogger(__name__)


def is_owner_email(email: Optional[str]) -> bool:
    return bool(email) and email.lower() == get_settings().normalized_owner_email


def is_owner_protected(user: User) -> bool:
    return bool(user.is_owner) or is_owner_email(user.email)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower()).first()


def create_user(
    db: Session,
    *,
    name: str,
    email: str,
    password: str,
    role: str = "user",
    company: Optional[str] = None,
    phone: Optional[str] = None,
) -> User:
    """Insert a user; the reserved owner email is always an admin owner."""
    email = email.lower()
    if get_user_by_email(db, email):
        raise ConflictError("Email already registered")
    owner = is_owner_email(email)
    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        role="admin" if owner else role,
        is_owner=owner,
        company=company or None,
        phone=phone or None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (role=%s, owner=%s)", user.id, user.role, user.is_owner)
    return user
