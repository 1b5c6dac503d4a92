"""
farm_app/routers/functions.py
-----------------------------
JSON-in/JSON-out endpoints for the farm's aggregate jobs. Every failure is
answered as ``{"error": ..., "success": false}``.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from fastapi import APIRouter, Body, Depends, Header, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException

from ..auth import profile_for_token
from ..database import get_db
from ..errors import FunctionError, Unauthorized, ValidationFailed
from ..services.bulk_update import bulk_update_inventory
from ..services.inventory_alerts import evaluate_inventory_alerts
from ..services.profit_loss import calculate_profit_loss
from ..services.reports import REPORT_TYPES, generate_farm_report
from .. import schemas

logger = logging.getLogger(__name__)


class FunctionRoute(APIRoute):
    """Turns unexpected exceptions into a 500 JSON envelope."""

    def get_route_handler(self) -> Callable:
        handler = super().get_route_handler()
        name = self.name

        async def route_handler(request: Request) -> Response:
            try:
                return await handler(request)
            except (FunctionError, HTTPException, RequestValidationError):
                raise
            except Exception as exc:
                logger.exception("Error in %s", name)
                raise FunctionError(str(exc) or "Unknown error", 500) from exc

        return route_handler


router = APIRouter(prefix="/functions", tags=["functions"], route_class=FunctionRoute)


@router.post("/inventory-alerts")
def inventory_alerts(db: Session = Depends(get_db)):
    return {
        "success": True,
        "alert_summary": evaluate_inventory_alerts(db),
    }


@router.post("/bulk-inventory-update")
def bulk_inventory_update(
    payload: schemas.BulkUpdateRequest,
    db: Session = Depends(get_db),
):
    results = bulk_update_inventory(db, payload.updates, payload.user_id)
    return {"success": True, "results": results}


@router.post("/calculate-profit-loss")
def profit_loss(
    payload: schemas.ProfitLossRequest,
    db: Session = Depends(get_db),
):
    report = calculate_profit_loss(
        db,
        start_date=payload.start_date,
        end_date=payload.end_date,
        category=payload.category,
        user_id=payload.user_id,
    )
    return {"success": True, "profit_loss_report": report}


@router.post("/generate-farm-report")
def farm_report(
    body: Optional[dict[str, Any]] = Body(default=None),
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
):
    user = profile_for_token(db, authorization)
    if user is None:
        raise Unauthorized("Unauthorized")

    body = body or {}
    if body.get("reportType") not in REPORT_TYPES:
        raise ValidationFailed("Invalid report type")
    try:
        payload = schemas.FarmReportRequest.model_validate(body)
    except ValidationError as exc:
        err = exc.errors()[0]
        field = ".".join(str(p) for p in err["loc"])
        raise ValidationFailed(f"Invalid request: {field} {err['msg']}") from exc

    report = generate_farm_report(
        db,
        payload.reportType,
        payload.periodStart,
        payload.periodEnd,
        user,
    )
    return {
        "success": True,
        "report": schemas.ReportOut.model_validate(report).model_dump(mode="json"),
        "message": f"{report.title} generated successfully",
    }
