"""Registration, login and self-service profile endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from nexacrm.core.errors import AuthError
from nexacrm.core.security import create_user_token, get_password_hash, verify_password
from nexacrm.core.time import utc_now
from nexacrm.db.session import get_db
from nexacrm.dependencies.auth import get_current_user
from nexacrm.models.user import User
from nexacrm.schemas.user import (
    AuthResponse,
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    UserProfileRead,
)
from nexacrm.services.accounts import create_user, get_user_by_email, is_owner_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(user_in: RegisterRequest, db: Session = Depends(get_db)):
    # The very first account administers the instance
    is_first_user = (db.query(func.count(User.id)).scalar() or 0) == 0
    user = create_user(
        db,
        name=user_in.name,
        email=user_in.email,
        password=user_in.password,
        role="admin" if is_first_user else "user",
        company=user_in.company,
        phone=user_in.phone,
    )
    return {"access_token": create_user_token(user), "token_type": "bearer", "user": user}


@router.post("/login", response_model=AuthResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    user = get_user_by_email(db, credentials.email)
    if not user or not verify_password(credentials.password, user.hashed_password):
        raise AuthError("Invalid email or password", status_code=status.HTTP_400_BAD_REQUEST)

    if is_owner_email(user.email) and (user.role != "admin" or not user.is_owner):
        logger.info("Promoting owner account %s to admin", user.id)
        user.role = "admin"
        user.is_owner = True
    user.last_login = utc_now()
    db.commit()
    db.refresh(user)
    return {"access_token": create_user_token(user), "token_type": "bearer", "user": user}


@router.get("/me", response_model=UserProfileRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=UserProfileRead)
def update_me(
    profile: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updates = profile.model_dump(exclude_unset=True)
    if updates.get("name"):
        current_user.name = updates["name"]
    for field in ("company", "phone"):
        if field in updates:
            setattr(current_user, field, updates[field] or None)
    db.commit()
    db.refresh(current_user)
    return current_user


@router.put("/me/password")
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, current_user.hashed_password):
        raise AuthError("Current password is incorrect", status_code=status.HTTP_400_BAD_REQUEST)
    current_user.hashed_password = get_password_hash(payload.new_password)
    db.commit()
    return {"success": True}
