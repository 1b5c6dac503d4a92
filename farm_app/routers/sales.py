from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import optional_user, writer_id
from ..database import get_db
from ..metrics import format_kes, line_total
from .. import models, schemas

router = APIRouter(prefix="/sales", tags=["sales"])


@router.get("/", response_model=list[schemas.SaleOut])
def list_sales(
    payment_status: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    q = db.query(models.Sale)
    if payment_status:
        q = q.filter(models.Sale.payment_status == payment_status)
    return q.order_by(models.Sale.sale_date.desc()).all()


@router.get("/analytics", response_model=schemas.TransactionAnalytics)
def sales_analytics(db: Session = Depends(get_db)):
    sales = db.query(models.Sale).all()
    total = sum(s.total_amount or 0 for s in sales)
    return schemas.TransactionAnalytics(
        total=total,
        total_formatted=format_kes(total),
        pending_payments=sum(1 for s in sales if s.payment_status == "pending"),
        completed=sum(1 for s in sales if s.payment_status == "paid"),
        count=len(sales),
    )


@router.get("/{sale_id}", response_model=schemas.SaleOut)
def get_sale(sale_id: int, db: Session = Depends(get_db)):
    sale = db.get(models.Sale, sale_id)
    if not sale:
        raise HTTPException(404, "Sale not found")
    return sale


@router.post("/", response_model=schemas.SaleOut)
def create_sale(
    payload: schemas.SaleCreate,
    user: Optional[models.Profile] = Depends(optional_user),
    db: Session = Depends(get_db),
):
    sale = models.Sale(
        **payload.model_dump(),
        total_amount=line_total(payload.quantity, payload.unit_price),
        created_by=writer_id(user),
    )
    db.add(sale)
    db.commit()
    db.refresh(sale)
    return sale


@router.patch("/{sale_id}", response_model=schemas.SaleOut)
def update_sale(sale_id: int, payload: schemas.SaleUpdate, db: Session = Depends(get_db)):
    sale = db.get(models.Sale, sale_id)
    if not sale:
        raise HTTPException(404, "Sale not found")

    changes = payload.model_dump(exclude_unset=True)
    for k, v in changes.items():
        setattr(sale, k, v)

    # total_amount follows quantity and unit_price
    if "quantity" in changes or "unit_price" in changes:
        sale.total_amount = line_total(sale.quantity, sale.unit_price)

    db.commit()
    db.refresh(sale)
    return sale


@router.delete("/{sale_id}", status_code=204)
def delete_sale(sale_id: int, db: Session = Depends(get_db)):
    sale = db.get(models.Sale, sale_id)
    if not sale:
        raise HTTPException(404, "Sale not found")
    db.delete(sale)
    db.commit()
