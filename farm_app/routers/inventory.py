from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import optional_user, writer_id
from ..database import get_db
from ..services.inventory_alerts import is_critical, low_stock_items
from .. import models, schemas

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("/", response_model=list[schemas.InventoryOut])
def list_inventory(
    category: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    q = db.query(models.InventoryItem)
    if category:
        q = q.filter(models.InventoryItem.category == category)
    return q.order_by(models.InventoryItem.last_updated.desc()).all()


@router.get("/low-stock", response_model=list[schemas.LowStockOut])
def list_low_stock(db: Session = Depends(get_db)):
    return [
        schemas.LowStockOut(
            **schemas.InventoryOut.model_validate(i).model_dump(),
            is_critical=is_critical(i.quantity, i.min_threshold),
        )
        for i in low_stock_items(db)
    ]


@router.get("/{item_id}", response_model=schemas.InventoryOut)
def get_item(item_id: int, db: Session = Depends(get_db)):
    item = db.get(models.InventoryItem, item_id)
    if not item:
        raise HTTPException(404, "Inventory item not found")
    return item


@router.post("/", response_model=schemas.InventoryOut)
def create_item(
    payload: schemas.InventoryCreate,
    user: Optional[models.Profile] = Depends(optional_user),
    db: Session = Depends(get_db),
):
    item = models.InventoryItem(**payload.model_dump(), created_by=writer_id(user))
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@router.patch("/{item_id}", response_model=schemas.InventoryOut)
def update_item(item_id: int, payload: schemas.InventoryUpdate, db: Session = Depends(get_db)):
    item = db.get(models.InventoryItem, item_id)
    if not item:
        raise HTTPException(404, "Inventory item not found")

    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(item, k, v)
    item.last_updated = datetime.now(timezone.utc)

    db.commit()
    db.refresh(item)
    return item


@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: int, db: Session = Depends(get_db)):
    item = db.get(models.InventoryItem, item_id)
    if not item:
        raise HTTPException(404, "Inventory item not found")
    db.delete(item)
    db.commit()
