from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import optional_user, writer_id
from ..database import get_db
from ..metrics import format_kes, line_total
from .. import models, schemas

router = APIRouter(prefix="/purchases", tags=["purchases"])


@router.get("/", response_model=list[schemas.PurchaseOut])
def list_purchases(
    payment_status: str | None = Query(default=None),
    category: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    q = db.query(models.Purchase)
    if payment_status:
        q = q.filter(models.Purchase.payment_status == payment_status)
    if category:
        q = q.filter(models.Purchase.category == category)
    return q.order_by(models.Purchase.purchase_date.desc()).all()


@router.get("/analytics", response_model=schemas.TransactionAnalytics)
def purchase_analytics(db: Session = Depends(get_db)):
    purchases = db.query(models.Purchase).all()
    total = sum(p.total_cost or 0 for p in purchases)
    return schemas.TransactionAnalytics(
        total=total,
        total_formatted=format_kes(total),
        pending_payments=sum(1 for p in purchases if p.payment_status == "pending"),
        completed=sum(1 for p in purchases if p.payment_status == "paid"),
        count=len(purchases),
    )


@router.get("/{purchase_id}", response_model=schemas.PurchaseOut)
def get_purchase(purchase_id: int, db: Session = Depends(get_db)):
    purchase = db.get(models.Purchase, purchase_id)
    if not purchase:
        raise HTTPException(404, "Purchase not found")
    return purchase


@router.post("/", response_model=schemas.PurchaseOut)
def create_purchase(
    payload: schemas.PurchaseCreate,
    user: Optional[models.Profile] = Depends(optional_user),
    db: Session = Depends(get_db),
):
    purchase = models.Purchase(
        **payload.model_dump(),
        total_cost=line_total(payload.quantity, payload.unit_cost),
        created_by=writer_id(user),
    )
    db.add(purchase)
    db.commit()
    db.refresh(purchase)
    return purchase


@router.patch("/{purchase_id}", response_model=schemas.PurchaseOut)
def update_purchase(
    purchase_id: int,
    payload: schemas.PurchaseUpdate,
    db: Session = Depends(get_db),
):
    purchase = db.get(models.Purchase, purchase_id)
    if not purchase:
        raise HTTPException(404, "Purchase not found")

    changes = payload.model_dump(exclude_unset=True)
    for k, v in changes.items():
        setattr(purchase, k, v)

    if "quantity" in changes or "unit_cost" in changes:
        purchase.total_cost = line_total(purchase.quantity, purchase.unit_cost)

    db.commit()
    db.refresh(purchase)
    return purchase


@router.delete("/{purchase_id}", status_code=204)
def delete_purchase(purchase_id: int, db: Session = Depends(get_db)):
    purchase = db.get(models.Purchase, purchase_id)
    if not purchase:
        raise HTTPException(404, "Purchase not found")
    db.delete(purchase)
    db.commit()
