from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import optional_user, writer_id
from ..database import get_db
from .. import models, schemas

router = APIRouter(prefix="/livestock", tags=["livestock"])


@router.get("/", response_model=list[schemas.LivestockOut])
def list_livestock(
    type: str | None = Query(default=None),
    health_status: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    q = db.query(models.Livestock)
    if type:
        q = q.filter(models.Livestock.type == type)
    if health_status:
        q = q.filter(models.Livestock.health_status == health_status)
    animals = q.order_by(models.Livestock.created_at.desc()).all()
    return [schemas.LivestockOut.from_animal(a) for a in animals]


@router.get("/{animal_id}", response_model=schemas.LivestockOut)
def get_animal(animal_id: int, db: Session = Depends(get_db)):
    animal = db.get(models.Livestock, animal_id)
    if not animal:
        raise HTTPException(404, "Animal not found")
    return schemas.LivestockOut.from_animal(animal)


@router.post("/", response_model=schemas.LivestockOut)
def create_animal(
    payload: schemas.LivestockCreate,
    user: Optional[models.Profile] = Depends(optional_user),
    db: Session = Depends(get_db),
):
    animal = models.Livestock(**payload.model_dump(), created_by=writer_id(user))
    db.add(animal)
    db.commit()
    db.refresh(animal)
    return schemas.LivestockOut.from_animal(animal)


@router.patch("/{animal_id}", response_model=schemas.LivestockOut)
def update_animal(
    animal_id: int,
    payload: schemas.LivestockUpdate,
    db: Session = Depends(get_db),
):
    animal = db.get(models.Livestock, animal_id)
    if not animal:
        raise HTTPException(404, "Animal not found")

    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(animal, k, v)

    if animal.date_of_birth_on_farm is None and animal.date_of_arrival_at_farm is None:
        db.rollback()
        raise HTTPException(
            400,
            "Provide date_of_birth_on_farm or date_of_arrival_at_farm",
        )

    db.commit()
    db.refresh(animal)
    return schemas.LivestockOut.from_animal(animal)


@router.delete("/{animal_id}", status_code=204)
def delete_animal(animal_id: int, db: Session = Depends(get_db)):
    animal = db.get(models.Livestock, animal_id)
    if not animal:
        raise HTTPException(404, "Animal not found")
    db.delete(animal)
    db.commit()
