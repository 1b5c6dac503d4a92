from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import optional_user, writer_id
from ..database import get_db
from .. import models, schemas

router = APIRouter(prefix="/crops", tags=["crops"])


@router.get("/", response_model=list[schemas.CropOut])
def list_crops(
    status: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    q = db.query(models.Crop)
    if status:
        q = q.filter(models.Crop.status == status)
    return q.order_by(models.Crop.created_at.desc()).all()


@router.get("/analytics", response_model=dict)
def crop_analytics(db: Session = Depends(get_db)):
    crops = db.query(models.Crop).all()
    by_status: dict[str, int] = {}
    for c in crops:
        by_status[c.status or "unknown"] = by_status.get(c.status or "unknown", 0) + 1
    return {
        "total_crops": len(crops),
        "by_status": by_status,
        "ready_to_harvest": by_status.get("ready_to_harvest", 0),
    }


@router.get("/{crop_id}", response_model=schemas.CropOut)
def get_crop(crop_id: int, db: Session = Depends(get_db)):
    crop = db.get(models.Crop, crop_id)
    if not crop:
        raise HTTPException(404, "Crop not found")
    return crop


@router.post("/", response_model=schemas.CropOut)
def create_crop(
    payload: schemas.CropCreate,
    user: Optional[models.Profile] = Depends(optional_user),
    db: Session = Depends(get_db),
):
    crop = models.Crop(**payload.model_dump(), created_by=writer_id(user))
    db.add(crop)
    db.commit()
    db.refresh(crop)
    return crop


@router.patch("/{crop_id}", response_model=schemas.CropOut)
def update_crop(crop_id: int, payload: schemas.CropUpdate, db: Session = Depends(get_db)):
    crop = db.get(models.Crop, crop_id)
    if not crop:
        raise HTTPException(404, "Crop not found")

    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(crop, k, v)

    db.commit()
    db.refresh(crop)
    return crop


@router.delete("/{crop_id}", status_code=204)
def delete_crop(crop_id: int, db: Session = Depends(get_db)):
    crop = db.get(models.Crop, crop_id)
    if not crop:
        raise HTTPException(404, "Crop not found")
    db.delete(crop)
    db.commit()
