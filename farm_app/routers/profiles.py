from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import current_user
from .. import models, schemas

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=schemas.ProfileOut)
def read_me(user: models.Profile = Depends(current_user)):
    return user
