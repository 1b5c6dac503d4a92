from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from .. import models

logger = logging.getLogger(__name__)

CRITICAL_MARKER = "[CRITICAL]"
CRITICAL_RATIO = 0.25


def is_low_stock(quantity, min_threshold) -> bool:
    # No threshold means 0: such items only alert once they run out
    return (quantity or 0) <= (min_threshold or 0)


def is_critical(quantity, min_threshold) -> bool:
    return (quantity or 0) < (min_threshold or 0) * CRITICAL_RATIO


def flag_location(location: str | None) -> str:
    """Append the critical marker unless the location already carries it."""
    if not location:
        return CRITICAL_MARKER
    if CRITICAL_MARKER in location:
        return location
    return f"{location} {CRITICAL_MARKER}"


def low_stock_items(db: Session) -> list[models.InventoryItem]:
    items = (
        db.query(models.InventoryItem)
        .order_by(models.InventoryItem.quantity.asc())
        .all()
    )
    return [i for i in items if is_low_stock(i.quantity, i.min_threshold)]


def evaluate_inventory_alerts(db: Session) -> dict:
    logger.info("Checking inventory for low stock items...")

    low = low_stock_items(db)
    logger.info("Found %d low stock items", len(low))

    critical = [i for i in low if is_critical(i.quantity, i.min_threshold)]

    if critical:
        now = datetime.now(timezone.utc)
        try:
            for item in critical:
                item.location = flag_location(item.location)
                item.last_updated = now
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("Flagged %d critical items", len(critical))

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_low_stock": len(low),
        "critical_items": len(critical),
        "low_stock_items": [
            {
                "id": i.id,
                "item_name": i.item_name,
                "current_quantity": i.quantity,
                "min_threshold": i.min_threshold,
                "category": i.category,
                "is_critical": is_critical(i.quantity, i.min_threshold),
            }
            for i in low
        ],
    }
