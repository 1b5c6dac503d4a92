from __future__ import annotations

# Run with:
#   python -m uvicorn farm_app.main:app --reload

import logging

from fastapi import FastAPI, Depends, Query
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from .config import CORS_ALLOW_HEADERS, CORS_ALLOW_ORIGINS, FARM_LOCATION, FARM_NAME
from .database import Base, engine, get_db
from .errors import register_error_handlers
from .logging_config import configure_logging
from .routers import crops, livestock, inventory, tasks
from .routers import purchases as purchases_router
from .routers import sales as sales_router
from .routers import reports as reports_router
from .routers import profiles as profiles_router
from .routers import functions as functions_router
from .services.inventory_alerts import is_low_stock
from .metrics import format_kes
from . import models, schemas

configure_logging()
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title=f"{FARM_NAME} Farm Manager")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=CORS_ALLOW_HEADERS,
)
register_error_handlers(app)


# -----------------------------
# API ROUTERS
# -----------------------------
app.include_router(crops.router)
app.include_router(livestock.router)
app.include_router(inventory.router)
app.include_router(purchases_router.router)
app.include_router(sales_router.router)
app.include_router(tasks.router)
app.include_router(reports_router.router)
app.include_router(profiles_router.router)
app.include_router(functions_router.router)


# -----------------------------
# OPTION ENDPOINTS (for dropdowns)
# -----------------------------
@app.get("/options/inventory", response_model=list[schemas.OptionItem])
def options_inventory(
    category: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    q = db.query(models.InventoryItem)
    if category:
        q = q.filter(models.InventoryItem.category == category)

    items = q.order_by(models.InventoryItem.item_name.asc()).all()

    out: list[schemas.OptionItem] = []
    for i in items:
        label = f"{i.item_name} ({i.quantity:g} {i.unit}, {i.category})"
        out.append(schemas.OptionItem(id=i.id, label=label))
    return out


@app.get("/options/crops", response_model=list[schemas.OptionItem])
def options_crops(db: Session = Depends(get_db)):
    crops_ = db.query(models.Crop).order_by(models.Crop.name.asc()).all()
    return [
        schemas.OptionItem(id=c.id, label=f"{c.name} ({c.type}, {c.farm_location})")
        for c in crops_
    ]


# -----------------------------
# DASHBOARD
# -----------------------------
@app.get("/dashboard", response_model=dict)
def dashboard(db: Session = Depends(get_db)):
    sales = db.query(models.Sale).all()
    purchases = db.query(models.Purchase).all()
    inventory_items = db.query(models.InventoryItem).all()

    revenue = sum(s.total_amount or 0 for s in sales)
    expenses = sum(p.total_cost or 0 for p in purchases)

    return {
        "farm": {"name": FARM_NAME, "location": FARM_LOCATION},
        "total_crops": db.query(models.Crop).count(),
        "total_livestock": db.query(models.Livestock).count(),
        "open_tasks": db.query(models.Task).filter(models.Task.completed.is_(False)).count(),
        "low_stock_items": sum(
            1 for i in inventory_items if is_low_stock(i.quantity, i.min_threshold)
        ),
        "revenue": revenue,
        "expenses": expenses,
        "revenue_formatted": format_kes(revenue),
        "expenses_formatted": format_kes(expenses),
        "profit_formatted": format_kes(revenue - expenses),
    }


@app.get("/")
def root():
    return {"status": "ok", "dashboard": "/dashboard"}
