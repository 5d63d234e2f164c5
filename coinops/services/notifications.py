from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List

from coinops.utils.time import utcnow


@dataclass
class Notification:
    id: int
    title: str
    message: str
    timestamp: datetime


class NotificationStore:
    """In-memory append-only notification log. IDs keep counting across clear()."""

    def __init__(self) -> None:
        self._items: List[Notification] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def add(self, title: str, message: str) -> Notification:
        with self._lock:
            n = Notification(id=self._next_id, title=title, message=message, timestamp=utcnow())
            self._next_id += 1
            self._items.append(n)
            return replace(n)

    def get_all(self) -> List[Notification]:
        """Newest first."""
        with self._lock:
            return [replace(n) for n in reversed(self._items)]

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
