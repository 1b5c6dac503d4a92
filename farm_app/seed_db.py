"""
farm_app/seed_db.py
-------------------
Populates the database with demo data for every screen: profiles, crops,
livestock, inventory, purchases, sales and tasks.

Run from the project root:
    python -m farm_app.seed_db

Pass --reset to wipe the database first:
    python -m farm_app.seed_db --reset
"""
from __future__ import annotations

import os
import random
import sys
from datetime import date, timedelta
from urllib.parse import urlparse

from .database import Base, engine, SessionLocal
from .config import DATABASE_URL
from .metrics import line_total
from . import models


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _days_ago(n: int) -> date:
    return date.today() - timedelta(days=n)


def _remove_sqlite_file_if_local() -> None:
    """Delete the SQLite file so we start completely fresh."""
    parsed = urlparse(DATABASE_URL)
    # urlparse turns  sqlite:///./foo.db  into  path=./foo.db
    path = parsed.path.lstrip("/")
    if path and path != ":memory:" and os.path.exists(path):
        os.remove(path)
        print(f"  Removed existing database: {path}")


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

PROFILES = [
    # (user_id, name, role, token)
    ("admin-1", "Jeff Mwangi",   "admin",  "demo-admin-token"),
    ("staff-1", "Grace Wanjiru", "staff",  "demo-staff-token"),
    ("farm-1",  "Peter Kamau",   "farmer", "demo-farmer-token"),
]

CROPS = [
    # (name, type, location, status, days_ago_planted)
    ("Maize Block A",   "cereal",    "North field", "growing",          60),
    ("Beans Plot",      "legume",    "East plot",   "flowering",        45),
    ("Kale",            "vegetable", "Greenhouse",  "ready_to_harvest", 70),
    ("Tea",             "cash",      "Hillside",    "growing",          400),
    ("Irish Potatoes",  "tuber",     "South field", "harvested",        120),
]

LIVESTOCK = [
    # (type, breed, gender, health, weight, born_days_ago, on_farm)
    ("cattle",  "Friesian",  "female", "healthy",         420.0, 1500, False),
    ("cattle",  "Ayrshire",  "female", "needs_attention", 380.0, 900,  False),
    ("cattle",  "Friesian",  "male",   "healthy",         95.0,  120,  True),
    ("goat",    "Galla",     "female", "healthy",         38.0,  400,  True),
    ("goat",    "Toggenburg", "male",  "sick",            45.0,  700,  False),
    ("poultry", "Kienyeji",  "female", "healthy",         1.8,   20,   True),
]

INVENTORY = [
    # (name, category, qty, unit, unit_cost, min_threshold, location, supplier)
    ("Dairy meal 70kg",  "feed",       12,  "bags",   3200.0, 10, "Store 1", "Unga Farm Care"),
    ("Layers mash 50kg", "feed",       2,   "bags",   2900.0, 10, "Store 1", "Unga Farm Care"),
    ("DAP fertilizer",   "fertilizer", 25,  "bags",   3500.0, 8,  "Store 2", "Kenya Seed"),
    ("CAN fertilizer",   "fertilizer", 6,   "bags",   3100.0, 8,  "Store 2", "Kenya Seed"),
    ("Dewormer",         "medicine",   1,   "bottles", 850.0, 5,  "Vet cabinet", "Agrovet Nyeri"),
    ("Maize seed H614",  "seed",       40,  "kg",      350.0, None, "Store 2", "Kenya Seed"),
]

BUYERS = [
    ("Brookside Dairy",   "0722 000 111"),
    ("Nyeri Market",      None),
    ("Karatina Hotel",    "0733 222 333"),
    ("Local neighbour",   None),
]

SALE_PRODUCTS = [
    # (product_name, product_type, unit, price range)
    ("Milk",        "dairy",     "litres", (45.0, 60.0)),
    ("Eggs",        "poultry",   "trays",  (380.0, 450.0)),
    ("Kale bunch",  "vegetable", "bunches", (20.0, 30.0)),
    ("Maize",       "cereal",    "bags",   (3000.0, 4200.0)),
]

TASKS = [
    # (title, type, priority, in_days, completed)
    ("Spray kale for aphids",     "crop",        "high",   1,  False),
    ("Deworm goats",              "livestock",   "medium", 3,  False),
    ("Service water pump",        "maintenance", "low",    7,  False),
    ("Harvest potatoes",          "harvest",     "high",   -10, True),
]


def seed(db) -> None:
    random.seed(42)      # reproducible

    print("  Creating profiles...")
    for user_id, name, role, token in PROFILES:
        db.add(models.Profile(user_id=user_id, name=name, role=role, access_token=token))
    db.flush()
    owner = PROFILES[0][0]

    print("  Creating crops...")
    for name, kind, location, status, planted in CROPS:
        db.add(models.Crop(
            name=name, type=kind, farm_location=location, status=status,
            season="Long rains", planting_date=_days_ago(planted),
            harvest_date=_days_ago(planted - 110) if status == "harvested" else None,
            yield_quantity=18.0 if status == "harvested" else None,
            yield_unit="bags" if status == "harvested" else None,
            created_by=owner,
        ))

    print("  Creating livestock...")
    for kind, breed, gender, health, weight, born, on_farm in LIVESTOCK:
        db.add(models.Livestock(
            type=kind, breed=breed, gender=gender, health_status=health,
            weight=weight, farm_location="Main farm",
            date_of_birth=_days_ago(born),
            date_of_birth_on_farm=_days_ago(born) if on_farm else None,
            date_of_arrival_at_farm=None if on_farm else _days_ago(born - 60),
            purchase_price=None if on_farm else round(random.uniform(15000, 80000), -2),
            created_by=owner,
        ))

    print("  Creating inventory...")
    for name, category, qty, unit, cost, threshold, location, supplier in INVENTORY:
        db.add(models.InventoryItem(
            item_name=name, category=category, quantity=qty, unit=unit,
            unit_cost=cost, min_threshold=threshold, location=location,
            supplier=supplier, created_by=owner,
        ))

    print("  Creating purchases...")
    for i, (name, category, _, unit, cost, _, _, supplier) in enumerate(INVENTORY):
        qty = random.randint(2, 20)
        db.add(models.Purchase(
            item_name=name, category=category, supplier=supplier,
            quantity=qty, unit=unit, unit_cost=cost,
            total_cost=line_total(qty, cost),
            purchase_date=_days_ago(330 - i * 55),
            received_date=_days_ago(328 - i * 55),
            payment_status="paid" if i % 3 else "pending",
            created_by=owner,
        ))

    print("  Creating sales...")
    for i in range(24):
        name, kind, unit, (low, high) = SALE_PRODUCTS[i % len(SALE_PRODUCTS)]
        buyer, contact = random.choice(BUYERS)
        qty = random.randint(1, 40)
        price = round(random.uniform(low, high), 2)
        db.add(models.Sale(
            product_name=name, product_type=kind, buyer=buyer,
            buyer_contact=contact, quantity=qty, unit=unit, unit_price=price,
            total_amount=line_total(qty, price),
            sale_date=_days_ago(350 - i * 14),
            payment_status=random.choice(["paid", "paid", "pending", "partial"]),
            created_by=owner,
        ))

    print("  Creating tasks...")
    for title, kind, priority, in_days, completed in TASKS:
        db.add(models.Task(
            title=title, task_type=kind, priority=priority,
            task_date=date.today() + timedelta(days=in_days),
            completed=completed, created_by=owner,
        ))

    db.commit()

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------
    print(f"\n  ✓ Profiles:   {db.query(models.Profile).count()}")
    print(f"  ✓ Crops:      {db.query(models.Crop).count()}")
    print(f"  ✓ Livestock:  {db.query(models.Livestock).count()}")
    print(f"  ✓ Inventory:  {db.query(models.InventoryItem).count()}")
    print(f"  ✓ Purchases:  {db.query(models.Purchase).count()}")
    print(f"  ✓ Sales:      {db.query(models.Sale).count()}")
    print(f"  ✓ Tasks:      {db.query(models.Task).count()}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    reset = "--reset" in sys.argv

    if reset:
        print("Resetting database...")
        _remove_sqlite_file_if_local()

    print("Creating tables...")
    Base.metadata.create_all(bind=engine)

    print("Seeding data...")
    db = SessionLocal()
    try:
        seed(db)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    print("\nDone. Run the app with:")
    print("  python -m uvicorn farm_app.main:app --reload")


if __name__ == "__main__":
    main()
