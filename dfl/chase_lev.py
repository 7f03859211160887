"""Bounded work-stealing deque."""

from __future__ import annotations

import threading
from collections import deque
from typing import Optional

from dfl.job import Job

CAPACITY = 512


class ChaseLevDeque:
    """A bounded deque for work stealing.

    The owning worker pushes and pops at the bottom (LIFO); other workers
    steal from the top (FIFO). All operations are thread-safe.
    """

    def __init__(self) -> None:
        self._items: deque[Job] = deque()
        self._lock = threading.Lock()

    def push(self, job: Job) -> bool:
        """Add a job at the bottom; return False if the deque is full."""
        with self._lock:
            if len(self._items) >= CAPACITY:
                return False
            self._items.append(job)
            return True

    def pop(self) -> Optional[Job]:
        """Take the most recently pushed job, or None if empty."""
        with self._lock:
            return self._items.pop() if self._items else None

    def steal(self) -> Optional[Job]:
        """Take the oldest job, or None if empty."""
        with self._lock:
            return self._items.popleft() if self._items else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)