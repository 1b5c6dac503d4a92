"""
farm_app/services/bulk_update.py
--------------------------------
Apply many partial inventory updates in one call.

Updates run in batches of BATCH_SIZE. Items inside a batch are written
concurrently, each on its own session; the next batch starts only when the
previous one has finished. Every item succeeds or fails on its own.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker

from .. import models, schemas
from ..auth import STAFF_ROLES, has_role, profile_for_user_id
from ..errors import PermissionDenied, ValidationFailed
from .inventory_alerts import is_low_stock

logger = logging.getLogger(__name__)

BATCH_SIZE = 50


def chunked(items: list, size: int) -> Iterator[list]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def _item_id(raw: Any):
    return raw.get("id") if isinstance(raw, dict) else None


def _apply_one(session_factory: sessionmaker, raw: Any) -> dict:
    try:
        update = schemas.BulkUpdateItem.model_validate(raw)
    except ValidationError as exc:
        return {"success": False, "id": _item_id(raw), "error": str(exc)}

    fields = update.model_dump(exclude_unset=True, exclude={"id"})
    fields["last_updated"] = datetime.now(timezone.utc)

    try:
        with session_factory() as db:
            item = db.get(models.InventoryItem, update.id)
            if item is None:
                return {
                    "success": False,
                    "id": update.id,
                    "error": f"Inventory item {update.id} not found",
                }
            for k, v in fields.items():
                setattr(item, k, v)
            db.commit()
            db.refresh(item)
            data = schemas.InventoryOut.model_validate(item).model_dump(mode="json")
        return {"success": True, "id": update.id, "data": data}
    except Exception as exc:
        # One failing row must not stop the rest of the batch
        logger.warning("Bulk update of inventory item %s failed: %s", update.id, exc)
        return {"success": False, "id": update.id, "error": str(exc) or "Unknown error"}


def inventory_totals(db: Session) -> tuple[float, int]:
    items = db.query(models.InventoryItem).all()
    total_value = sum(
        i.quantity * i.unit_cost
        for i in items
        if i.quantity is not None and i.unit_cost is not None
    )
    low_stock = sum(1 for i in items if is_low_stock(i.quantity, i.min_threshold))
    return total_value, low_stock


def bulk_update_inventory(
    db: Session,
    updates: Any,
    user_id: Optional[str],
    batch_size: int = BATCH_SIZE,
) -> dict:
    if updates is None or not isinstance(updates, list):
        raise ValidationFailed("Invalid request: updates array is required")

    profile = profile_for_user_id(db, user_id)
    if not has_role(profile, STAFF_ROLES):
        raise PermissionDenied("Insufficient permissions for bulk updates")

    logger.info("Processing bulk update for %d items by user %s", len(updates), user_id)

    session_factory = sessionmaker(bind=db.get_bind(), autoflush=False)
    successes: list[dict] = []
    errors: list[dict] = []
    batches = 0

    for batch in chunked(updates, batch_size):
        batches += 1
        with ThreadPoolExecutor(max_workers=len(batch)) as executor:
            outcomes = list(executor.map(lambda raw: _apply_one(session_factory, raw), batch))
        successes.extend(o for o in outcomes if o["success"])
        errors.extend(o for o in outcomes if not o["success"])
        logger.debug("Batch %d done: %d items", batches, len(batch))

    with session_factory() as stats_db:
        total_value, low_stock = inventory_totals(stats_db)

    logger.info(
        "Bulk update completed: %d successful, %d failed",
        len(successes), len(errors),
    )

    results = {
        "successful_updates": len(successes),
        "failed_updates": len(errors),
        "total_inventory_value": total_value,
        "low_stock_items": low_stock,
        "batches": batches,
    }
    if errors:
        results["errors"] = errors
    return results
