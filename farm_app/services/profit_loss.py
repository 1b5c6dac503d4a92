"""
farm_app/services/profit_loss.py
--------------------------------
Profit and loss over a date window: revenue and cost totals (all and paid
only), margin, a month-by-month trend and the best selling product types.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from .. import models
from ..metrics import coalesce_numbers
from .common import month_key, timestamp_range_filters

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All Categories"
UNCATEGORISED = "Other"


def _fetch_sales(db: Session, start_date, end_date, category):
    q = db.query(models.Sale)
    if category:
        q = q.filter(models.Sale.product_type == category)
    for f in timestamp_range_filters(start_date, end_date, models.Sale.created_at):
        q = q.filter(f)
    return q.all()


def _fetch_purchases(db: Session, start_date, end_date, category):
    q = db.query(models.Purchase)
    if category:
        q = q.filter(models.Purchase.category == category)
    for f in timestamp_range_filters(start_date, end_date, models.Purchase.created_at):
        q = q.filter(f)
    return q.all()


def summarize(sales, purchases) -> dict:
    """
    Totals over already fetched rows. NULL amounts and quantities count as
    zero; they are normalized once per row here.
    """
    sale_rows = [
        (s, coalesce_numbers(s, "total_amount", "quantity")) for s in sales
    ]
    purchase_rows = [
        (p, coalesce_numbers(p, "total_cost", "quantity")) for p in purchases
    ]

    total_revenue = sum(n["total_amount"] for _, n in sale_rows)
    paid_revenue = sum(n["total_amount"] for s, n in sale_rows if s.payment_status == "paid")
    total_costs = sum(n["total_cost"] for _, n in purchase_rows)
    paid_costs = sum(n["total_cost"] for p, n in purchase_rows if p.payment_status == "paid")

    gross_profit = total_revenue - total_costs
    net_profit = paid_revenue - paid_costs
    profit_margin = (gross_profit / total_revenue) * 100 if total_revenue > 0 else 0

    # --- Monthly trend ---
    monthly: dict[str, dict] = defaultdict(
        lambda: {"revenue": 0.0, "costs": 0.0, "sales_count": 0, "purchases_count": 0}
    )
    for s, n in sale_rows:
        bucket = monthly[month_key(s.sale_date)]
        bucket["revenue"] += n["total_amount"]
        bucket["sales_count"] += 1
    for p, n in purchase_rows:
        bucket = monthly[month_key(p.purchase_date)]
        bucket["costs"] += n["total_cost"]
        bucket["purchases_count"] += 1

    monthly_trends = [
        {
            "month": mk,
            "revenue": b["revenue"],
            "costs": b["costs"],
            "profit": b["revenue"] - b["costs"],
            "sales_count": b["sales_count"],
            "purchases_count": b["purchases_count"],
        }
        for mk, b in sorted(monthly.items())
    ]

    # --- Category leaderboard ---
    perf: dict[str, dict] = defaultdict(lambda: {"revenue": 0.0, "quantity": 0.0, "transactions": 0})
    for s, n in sale_rows:
        p = perf[s.product_type or UNCATEGORISED]
        p["revenue"] += n["total_amount"]
        p["quantity"] += n["quantity"]
        p["transactions"] += 1

    category_performance = sorted(
        (
            {
                "category": cat,
                "revenue": p["revenue"],
                "quantity": p["quantity"],
                "transactions": p["transactions"],
                "avg_transaction_value": (
                    p["revenue"] / p["transactions"] if p["transactions"] > 0 else 0
                ),
            }
            for cat, p in perf.items()
        ),
        key=lambda c: c["revenue"],
        reverse=True,
    )

    return {
        "totals": {
            "total_revenue": total_revenue,
            "paid_revenue": paid_revenue,
            "total_costs": total_costs,
            "paid_costs": paid_costs,
            "gross_profit": gross_profit,
            "net_profit": net_profit,
            "profit_margin_percent": profit_margin,
            "total_sales_transactions": len(sale_rows),
            "total_purchase_transactions": len(purchase_rows),
        },
        "monthly_trends": monthly_trends,
        "category_performance": category_performance,
    }


def calculate_profit_loss(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category: Optional[str] = None,
    user_id: Optional[str] = None,
) -> dict:
    logger.info(
        "Calculating P&L from %s to %s%s",
        start_date, end_date, f" for category: {category}" if category else "",
    )

    # A failed fetch propagates; no partial report is built
    sales = _fetch_sales(db, start_date, end_date, category)
    purchases = _fetch_purchases(db, start_date, end_date, category)

    result = summarize(sales, purchases)

    report = {
        "summary": {
            "period": {"start_date": start_date, "end_date": end_date},
            "category": category or ALL_CATEGORIES,
            **result["totals"],
        },
        "monthly_trends": result["monthly_trends"],
        "category_performance": result["category_performance"],
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "generated_by": user_id,
    }

    logger.info(
        "P&L calculation completed: %d sales, %d purchases",
        len(sales), len(purchases),
    )
    return report
