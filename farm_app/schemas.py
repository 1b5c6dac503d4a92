from __future__ import annotations

from datetime import date, datetime
from typing import Any, ClassVar, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .metrics import livestock_age

PaymentStatus = Literal["pending", "paid", "partial"]
CropStatus = Literal["planted", "growing", "flowering", "ready_to_harvest", "harvested"]
HealthStatus = Literal["healthy", "needs_attention", "sick", "quarantine"]
TaskType = Literal["crop", "livestock", "maintenance", "harvest"]
Priority = Literal["low", "medium", "high"]


class PatchModel(BaseModel):
    """
    Partial update body. Omitted fields are left alone, but fields backed by
    NOT NULL columns (listed in ``not_null``) cannot be cleared with null.
    """

    not_null: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def validate_not_null(self):
        cleared = [
            name for name in self.not_null
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self


# -----------------------------
# Profiles
# -----------------------------

class ProfileOut(BaseModel):
    id: int
    user_id: str
    name: str
    role: str
    phone: Optional[str] = None
    farm_location: Optional[str] = None

    class Config:
        from_attributes = True


# -----------------------------
# Crops
# -----------------------------

class CropCreate(BaseModel):
    name: str
    type: str
    farm_location: str
    status: CropStatus = "planted"
    season: Optional[str] = None
    yield_quantity: Optional[float] = Field(default=None, ge=0)
    yield_unit: Optional[str] = None
    planting_date: Optional[date] = None
    harvest_date: Optional[date] = None
    notes: Optional[str] = None


class CropUpdate(PatchModel):
    not_null: ClassVar[tuple[str, ...]] = ("name", "type", "farm_location")

    name: Optional[str] = None
    type: Optional[str] = None
    farm_location: Optional[str] = None
    status: Optional[CropStatus] = None
    season: Optional[str] = None
    yield_quantity: Optional[float] = Field(default=None, ge=0)
    yield_unit: Optional[str] = None
    planting_date: Optional[date] = None
    harvest_date: Optional[date] = None
    notes: Optional[str] = None


class CropOut(CropCreate):
    id: int
    status: Optional[str] = None
    created_by: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# -----------------------------
# Livestock
# -----------------------------

class LivestockCreate(BaseModel):
    type: str
    breed: Optional[str] = None
    gender: Optional[str] = None
    health_status: HealthStatus = "healthy"
    weight: Optional[float] = Field(default=None, ge=0)
    farm_location: Optional[str] = None
    date_of_birth: Optional[date] = None
    date_of_birth_on_farm: Optional[date] = None
    date_of_arrival_at_farm: Optional[date] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def validate_farm_dates(self):
        if self.date_of_birth_on_farm is None and self.date_of_arrival_at_farm is None:
            raise ValueError(
                "Provide date_of_birth_on_farm or date_of_arrival_at_farm"
            )
        return self


class LivestockUpdate(PatchModel):
    not_null: ClassVar[tuple[str, ...]] = ("type",)

    type: Optional[str] = None
    breed: Optional[str] = None
    gender: Optional[str] = None
    health_status: Optional[HealthStatus] = None
    weight: Optional[float] = Field(default=None, ge=0)
    farm_location: Optional[str] = None
    date_of_birth: Optional[date] = None
    date_of_birth_on_farm: Optional[date] = None
    date_of_arrival_at_farm: Optional[date] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class LivestockOut(BaseModel):
    id: int
    type: str
    breed: Optional[str] = None
    gender: Optional[str] = None
    health_status: Optional[str] = None
    weight: Optional[float] = None
    farm_location: Optional[str] = None
    date_of_birth: Optional[date] = None
    date_of_birth_on_farm: Optional[date] = None
    date_of_arrival_at_farm: Optional[date] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = None
    notes: Optional[str] = None
    age: str = "Unknown"
    created_by: str

    class Config:
        from_attributes = True

    @classmethod
    def from_animal(cls, animal) -> "LivestockOut":
        out = cls.model_validate(animal)
        out.age = livestock_age(animal)
        return out


# -----------------------------
# Inventory
# -----------------------------

class InventoryCreate(BaseModel):
    item_name: str
    category: str
    quantity: float = Field(default=0, ge=0)
    unit: str = "units"
    unit_cost: Optional[float] = Field(default=None, ge=0)
    min_threshold: Optional[float] = Field(default=None, ge=0)
    location: Optional[str] = None
    supplier: Optional[str] = None


class InventoryUpdate(PatchModel):
    not_null: ClassVar[tuple[str, ...]] = ("item_name", "category", "quantity", "unit")

    item_name: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    unit_cost: Optional[float] = Field(default=None, ge=0)
    min_threshold: Optional[float] = Field(default=None, ge=0)
    location: Optional[str] = None
    supplier: Optional[str] = None


class InventoryOut(BaseModel):
    id: int
    item_name: str
    category: str
    quantity: float
    unit: str
    unit_cost: Optional[float] = None
    min_threshold: Optional[float] = None
    location: Optional[str] = None
    supplier: Optional[str] = None
    last_updated: Optional[datetime] = None
    created_by: str

    class Config:
        from_attributes = True


class LowStockOut(InventoryOut):
    is_critical: bool


# -----------------------------
# Purchases
# -----------------------------

class PurchaseCreate(BaseModel):
    item_name: str
    category: str
    supplier: str
    supplier_contact: Optional[str] = None
    quantity: float = Field(gt=0)
    unit: str = "units"
    unit_cost: float = Field(ge=0)
    purchase_date: date
    received_date: Optional[date] = None
    payment_status: PaymentStatus = "pending"
    notes: Optional[str] = None


class PurchaseUpdate(PatchModel):
    not_null: ClassVar[tuple[str, ...]] = (
        "item_name", "category", "supplier", "quantity", "unit", "unit_cost", "purchase_date",
    )

    item_name: Optional[str] = None
    category: Optional[str] = None
    supplier: Optional[str] = None
    supplier_contact: Optional[str] = None
    quantity: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = None
    unit_cost: Optional[float] = Field(default=None, ge=0)
    purchase_date: Optional[date] = None
    received_date: Optional[date] = None
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class PurchaseOut(PurchaseCreate):
    id: int
    payment_status: Optional[str] = None
    total_cost: Optional[float] = None
    created_by: str

    class Config:
        from_attributes = True


# -----------------------------
# Sales
# -----------------------------

class SaleCreate(BaseModel):
    product_name: str
    product_type: str
    buyer: str
    buyer_contact: Optional[str] = None
    quantity: float = Field(gt=0)
    unit: str = "units"
    unit_price: float = Field(ge=0)
    sale_date: date
    payment_status: PaymentStatus = "pending"
    notes: Optional[str] = None


class SaleUpdate(PatchModel):
    not_null: ClassVar[tuple[str, ...]] = (
        "product_name", "product_type", "buyer", "quantity", "unit", "unit_price", "sale_date",
    )

    product_name: Optional[str] = None
    product_type: Optional[str] = None
    buyer: Optional[str] = None
    buyer_contact: Optional[str] = None
    quantity: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = None
    unit_price: Optional[float] = Field(default=None, ge=0)
    sale_date: Optional[date] = None
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class SaleOut(SaleCreate):
    id: int
    payment_status: Optional[str] = None
    total_amount: Optional[float] = None
    created_by: str

    class Config:
        from_attributes = True


class TransactionAnalytics(BaseModel):
    total: float
    total_formatted: str
    pending_payments: int
    completed: int
    count: int


# -----------------------------
# Tasks
# -----------------------------

class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    task_type: TaskType
    priority: Priority = "medium"
    task_date: date
    completed: bool = False


class TaskUpdate(PatchModel):
    not_null: ClassVar[tuple[str, ...]] = ("title", "task_type", "priority", "task_date", "completed")

    title: Optional[str] = None
    description: Optional[str] = None
    task_type: Optional[TaskType] = None
    priority: Optional[Priority] = None
    task_date: Optional[date] = None
    completed: Optional[bool] = None


class TaskOut(TaskCreate):
    id: int
    created_by: str

    class Config:
        from_attributes = True


# -----------------------------
# Reports
# -----------------------------

class ReportOut(BaseModel):
    id: int
    report_type: str
    title: str
    content: Optional[Any] = None
    status: Optional[str] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    created_by: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# -----------------------------
# Function endpoints
# -----------------------------

class BulkUpdateItem(BaseModel):
    id: int
    quantity: Optional[float] = Field(default=None, ge=0)
    unit_cost: Optional[float] = Field(default=None, ge=0)
    min_threshold: Optional[float] = Field(default=None, ge=0)
    location: Optional[str] = None
    supplier: Optional[str] = None


class BulkUpdateRequest(BaseModel):
    # Left loose so a missing or non-list value is reported as a 400
    updates: Optional[Any] = None
    user_id: Optional[str] = None


class ProfitLossRequest(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category: Optional[str] = None
    user_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_window(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class FarmReportRequest(BaseModel):
    reportType: Optional[str] = None
    periodStart: date
    periodEnd: date


class OptionItem(BaseModel):
    id: int
    label: str

