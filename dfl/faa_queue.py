"""Bounded multi-producer, multi-consumer FIFO queue of jobs."""

from __future__ import annotations

import threading
from collections import deque
from typing import Optional

from dfl.job import Job

CAPACITY = 512


class FAAQueue:
    """A bounded FIFO queue shared by any number of producers and consumers."""

    def __init__(self) -> None:
        self._items: deque[Job] = deque()
        self._lock = threading.Lock()

    def push(self, job: Job) -> bool:
        """Append a job; return False if the queue is full."""
        with self._lock:
            if len(self._items) >= CAPACITY:
                return False
            self._items.append(job)
            return True

    def pop(self) -> Optional[Job]:
        """Remove and return the oldest job, or None if empty."""
        with self._lock:
            return self._items.popleft() if self._items else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)