"""
farm_app/services/reports.py
----------------------------
Builds a report payload for a period and stores it as a new, never updated
Report row.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, time
from typing import Callable

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from .. import models, schemas
from ..errors import ValidationFailed
from ..metrics import coalesce_numbers
from .bulk_update import inventory_totals
from .common import date_range_filters, display_date
from .inventory_alerts import is_low_stock

logger = logging.getLogger(__name__)

COMPOSITE_TYPES = ("monthly", "quarterly", "annual")
REPORT_TYPES = COMPOSITE_TYPES + ("inventory_summary", "sales_summary", "livestock_status")


def _rows(items, schema) -> list[dict]:
    return [schema.model_validate(i).model_dump(mode="json") for i in items]


def _animals(livestock) -> list[dict]:
    return [schemas.LivestockOut.from_animal(a).model_dump(mode="json") for a in livestock]


def _count_by(items, attr: str) -> dict[str, int]:
    out: dict[str, int] = defaultdict(int)
    for i in items:
        out[getattr(i, attr)] += 1
    return dict(out)


def _sales_in(db: Session, start: date, end: date):
    return (
        db.query(models.Sale)
        .filter(*date_range_filters(start, end, models.Sale.sale_date))
        .order_by(models.Sale.sale_date.desc())
        .all()
    )


def _purchases_in(db: Session, start: date, end: date):
    return (
        db.query(models.Purchase)
        .filter(*date_range_filters(start, end, models.Purchase.purchase_date))
        .order_by(models.Purchase.purchase_date.desc())
        .all()
    )


def _by_product(sales) -> dict[str, dict]:
    out: dict[str, dict] = {}
    for s in sales:
        n = coalesce_numbers(s, "quantity", "total_amount")
        p = out.setdefault(s.product_name, {"quantity": 0.0, "revenue": 0.0, "sales": 0})
        p["quantity"] += n["quantity"]
        p["revenue"] += n["total_amount"]
        p["sales"] += 1
    return out


def _inventory_summary(db: Session, start: date, end: date) -> dict:
    inventory = db.query(models.InventoryItem).order_by(models.InventoryItem.category).all()
    low = [i for i in inventory if is_low_stock(i.quantity, i.min_threshold)]
    purchases = _purchases_in(db, start, end)
    total_value, _ = inventory_totals(db)

    by_category: dict[str, list] = defaultdict(list)
    for row in _rows(inventory, schemas.InventoryOut):
        by_category[row["category"]].append(row)

    return {
        "summary": {
            "totalItems": len(inventory),
            "lowStockItems": len(low),
            "totalInventoryValue": total_value,
        },
        "lowStockAlert": _rows(low, schemas.InventoryOut),
        "recentPurchases": _rows(purchases, schemas.PurchaseOut),
        "inventoryByCategory": dict(by_category),
    }


def _sales_summary(db: Session, start: date, end: date) -> dict:
    sales = _sales_in(db, start, end)
    total_revenue = sum(coalesce_numbers(s, "total_amount")["total_amount"] for s in sales)
    total_quantity = sum(coalesce_numbers(s, "quantity")["quantity"] for s in sales)

    return {
        "summary": {
            "totalSales": len(sales),
            "totalRevenue": total_revenue,
            "totalQuantitySold": total_quantity,
            "averageSaleValue": total_revenue / len(sales) if sales else 0,
        },
        "salesByProduct": _by_product(sales),
        "recentSales": _rows(sales, schemas.SaleOut),
    }


def _livestock_status(db: Session, start: date, end: date) -> dict:
    livestock = db.query(models.Livestock).order_by(models.Livestock.type).all()
    window_start = datetime.combine(start, time.min)
    window_end = datetime.combine(end, time.max)
    new_livestock = [
        a for a in livestock
        if a.created_at is not None and window_start <= a.created_at.replace(tzinfo=None) <= window_end
    ]

    by_type: dict[str, list] = defaultdict(list)
    for row in _animals(livestock):
        by_type[row["type"]].append(row)

    return {
        "summary": {
            "totalLivestock": len(livestock),
            "newLivestockInPeriod": len(new_livestock),
            "healthyCount": sum(1 for a in livestock if a.health_status == "healthy"),
            "sickCount": sum(1 for a in livestock if a.health_status == "sick"),
        },
        "livestockByType": dict(by_type),
        "healthStatus": _count_by(livestock, "health_status"),
        "newLivestock": _animals(new_livestock),
    }


def _farm_overview(db: Session, start: date, end: date) -> dict:
    inventory = db.query(models.InventoryItem).all()
    sales = _sales_in(db, start, end)
    purchases = _purchases_in(db, start, end)
    livestock = db.query(models.Livestock).all()
    crops = db.query(models.Crop).all()

    revenue = sum(coalesce_numbers(s, "total_amount")["total_amount"] for s in sales)
    expenses = sum(coalesce_numbers(p, "total_cost")["total_cost"] for p in purchases)

    top_products = {
        name: {"quantity": p["quantity"], "revenue": p["revenue"]}
        for name, p in _by_product(sales).items()
    }

    purchases_by_category: dict[str, dict] = {}
    for p in purchases:
        c = purchases_by_category.setdefault(p.category, {"count": 0, "cost": 0.0})
        c["count"] += 1
        c["cost"] += coalesce_numbers(p, "total_cost")["total_cost"]

    return {
        "summary": {
            "period": f"{display_date(start)} - {display_date(end)}",
            "revenue": revenue,
            "expenses": expenses,
            "profit": revenue - expenses,
            "totalLivestock": len(livestock),
            "totalCrops": len(crops),
            "inventoryItems": len(inventory),
        },
        "sales": {
            "totalSales": len(sales),
            "revenue": revenue,
            "topProducts": top_products,
        },
        "purchases": {
            "totalPurchases": len(purchases),
            "totalCost": expenses,
            "byCategory": purchases_by_category,
        },
        "livestock": {
            "total": len(livestock),
            "byType": _count_by(livestock, "type"),
            "healthStatus": _count_by(livestock, "health_status"),
        },
        "crops": {
            "total": len(crops),
            "byType": _count_by(crops, "type"),
            "byStatus": _count_by(crops, "status"),
        },
    }


BUILDERS: dict[str, tuple[str, Callable[[Session, date, date], dict]]] = {
    "inventory_summary": ("Inventory Summary Report", _inventory_summary),
    "sales_summary": ("Sales Summary Report", _sales_summary),
    "livestock_status": ("Livestock Status Report", _livestock_status),
    "monthly": ("Monthly Farm Report", _farm_overview),
    "quarterly": ("Quarterly Farm Report", _farm_overview),
    "annual": ("Annual Farm Report", _farm_overview),
}


def report_title(report_type: str, start: date, end: date) -> str:
    name, _ = BUILDERS[report_type]
    return f"{name} ({display_date(start)} - {display_date(end)})"


def generate_farm_report(
    db: Session,
    report_type: str | None,
    period_start: date,
    period_end: date,
    user: models.Profile,
) -> models.Report:
    if report_type not in REPORT_TYPES:
        raise ValidationFailed("Invalid report type")
    if period_start > period_end:
        raise ValidationFailed("periodStart must be on or before periodEnd")

    _, build = BUILDERS[report_type]
    title = report_title(report_type, period_start, period_end)
    content = jsonable_encoder(build(db, period_start, period_end))

    report = models.Report(
        report_type=report_type,
        title=title,
        content=content,
        period_start=period_start,
        period_end=period_end,
        created_by=user.user_id,
    )
    try:
        db.add(report)
        db.commit()
        db.refresh(report)
    except Exception:
        db.rollback()
        logger.exception("Error saving report %r", title)
        raise

    logger.info("Saved report %s: %s", report.id, title)
    return report
