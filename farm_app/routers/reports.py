from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from .. import models, schemas

router = APIRouter(prefix="/reports", tags=["reports"])

# Read-only: rows are written by /functions/generate-farm-report.


@router.get("/", response_model=list[schemas.ReportOut])
def list_reports(
    report_type: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    q = db.query(models.Report)
    if report_type:
        q = q.filter(models.Report.report_type == report_type)
    return q.order_by(models.Report.created_at.desc()).all()


@router.get("/{report_id}", response_model=schemas.ReportOut)
def get_report(report_id: int, db: Session = Depends(get_db)):
    report = db.get(models.Report, report_id)
    if not report:
        raise HTTPException(404, "Report not found")
    return report
