"""Fixed-capacity circular history buffer.

Keeps the most recent snapshots in memory. When the buffer is full, the
oldest entry is overwritten by the newest one.
"""

import threading
from collections import deque
from typing import Generic, TypeVar

from promscope.core.config import validate_capacity

T = TypeVar("T")


class HistoryBuffer(Generic[T]):
    """Thread-safe ring buffer of items, ordered oldest to newest.

    All access goes through one lock, so readers always get a
    point-in-time copy and never see a half-applied ``add``.

    Args:
        capacity: Maximum number of items to keep (>= 1).

    Raises:
        InvalidConfigurationError: If capacity is not a positive integer.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = validate_capacity(capacity)
        self._buffer: deque[T] = deque(maxlen=self._capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def add(self, item: T) -> None:
        """Append an item, evicting the oldest one if the buffer is full."""
        with self._lock:
            self._buffer.append(item)

    def get(self) -> list[T]:
        """Return a copy of the contents, oldest first."""
        with self._lock:
            return list(self._buffer)

    def last(self) -> T | None:
        """Return the newest item, or None if the buffer is empty."""
        with self._lock:
            return self._buffer[-1] if self._buffer else None

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)
