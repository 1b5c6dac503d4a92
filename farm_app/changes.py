"""
farm_app/changes.py
-------------------
Row change notifications for anything that wants to refresh when a table
changes (dashboards, notification badges).

    feed.subscribe("inventory", on_change)  ->  unsubscribe()

Callbacks run synchronously inside the session flush that wrote the row.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import event

from .database import Base

logger = logging.getLogger(__name__)

ALL_TABLES = "*"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event: str  # INSERT / UPDATE / DELETE
    row_id: Any


Callback = Callable[[ChangeEvent], None]


class ChangeFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[Callback]] = defaultdict(list)

    def subscribe(self, table: str, on_change: Callback) -> Callable[[], None]:
        with self._lock:
            self._subscribers[table].append(on_change)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(table, [])
                if on_change in callbacks:
                    callbacks.remove(on_change)

        return unsubscribe

    def publish(self, change: ChangeEvent) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(change.table, ()))
            callbacks += self._subscribers.get(ALL_TABLES, ())
        for cb in callbacks:
            try:
                cb(change)
            except Exception:
                logger.exception("Change subscriber failed for %s %s", change.table, change.event)


feed = ChangeFeed()


def _listener(kind: str):
    def on_change(mapper, connection, target):
        feed.publish(ChangeEvent(mapper.local_table.name, kind, getattr(target, "id", None)))
    return on_change


event.listen(Base, "after_insert", _listener("INSERT"), propagate=True)
event.listen(Base, "after_update", _listener("UPDATE"), propagate=True)
event.listen(Base, "after_delete", _listener("DELETE"), propagate=True)
