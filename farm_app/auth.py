from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .config import ROLE_ADMIN, ROLE_STAFF, SYSTEM_USER_ID
from .database import get_db
from . import models

STAFF_ROLES = (ROLE_ADMIN, ROLE_STAFF)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def profile_for_token(db: Session, authorization: Optional[str]) -> Optional[models.Profile]:
    token = _bearer_token(authorization)
    if token is None:
        return None
    return (
        db.query(models.Profile)
        .filter(models.Profile.access_token == token)
        .first()
    )


def profile_for_user_id(db: Session, user_id: Optional[str]) -> Optional[models.Profile]:
    if not user_id:
        return None
    return (
        db.query(models.Profile)
        .filter(models.Profile.user_id == user_id)
        .first()
    )


def has_role(profile: Optional[models.Profile], roles) -> bool:
    return profile is not None and profile.role in roles


def optional_user(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> Optional[models.Profile]:
    return profile_for_token(db, authorization)


def current_user(
    user: Optional[models.Profile] = Depends(optional_user),
) -> models.Profile:
    if user is None:
        raise HTTPException(401, "Unauthorized")
    return user


def writer_id(user: Optional[models.Profile]) -> str:
    return user.user_id if user is not None else SYSTEM_USER_ID
