from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    Text,
)
from .database import Base
from . import changes  # noqa: F401  (registers row change listeners)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="farmer")  # admin/staff/farmer
    phone = Column(String)
    farm_location = Column(String)
    access_token = Column(String, unique=True, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class Crop(Base):
    __tablename__ = "crops"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    farm_location = Column(String, nullable=False)
    # planted/growing/flowering/ready_to_harvest/harvested
    status = Column(String, default="planted")
    season = Column(String)
    yield_quantity = Column(Float)
    yield_unit = Column(String)
    planting_date = Column(Date)
    harvest_date = Column(Date)
    notes = Column(Text)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class Livestock(Base):
    __tablename__ = "livestock"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False)
    breed = Column(String)
    gender = Column(String)
    # healthy/needs_attention/sick/quarantine
    health_status = Column(String, default="healthy")
    weight = Column(Float)
    farm_location = Column(String)
    date_of_birth = Column(Date)
    date_of_birth_on_farm = Column(Date)
    date_of_arrival_at_farm = Column(Date)
    purchase_date = Column(Date)
    purchase_price = Column(Float)
    notes = Column(Text)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class InventoryItem(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True)
    item_name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    quantity = Column(Float, nullable=False, default=0)
    unit = Column(String, nullable=False, default="units")
    unit_cost = Column(Float)
    min_threshold = Column(Float)
    location = Column(String)
    supplier = Column(String)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    last_updated = Column(DateTime, default=utcnow)


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    item_name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    supplier = Column(String, nullable=False)
    supplier_contact = Column(String)
    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=False, default="units")
    unit_cost = Column(Float, nullable=False)
    total_cost = Column(Float)  # quantity * unit_cost
    purchase_date = Column(Date, nullable=False)
    received_date = Column(Date)
    payment_status = Column(String, default="pending")  # pending/paid/partial
    notes = Column(Text)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    product_name = Column(String, nullable=False)
    product_type = Column(String, nullable=False)
    buyer = Column(String, nullable=False)
    buyer_contact = Column(String)
    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=False, default="units")
    unit_price = Column(Float, nullable=False)
    total_amount = Column(Float)  # quantity * unit_price
    sale_date = Column(Date, nullable=False)
    payment_status = Column(String, default="pending")  # pending/paid/partial
    notes = Column(Text)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    task_type = Column(String, nullable=False)  # crop/livestock/maintenance/harvest
    priority = Column(String, nullable=False, default="medium")  # low/medium/high
    task_date = Column(Date, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    report_type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    content = Column(JSON)
    status = Column(String, default="generated")
    period_start = Column(Date)
    period_end = Column(Date)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow)
