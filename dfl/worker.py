"""Work-stealing worker threads and the group that owns them."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from dfl.chase_lev import ChaseLevDeque
from dfl.faa_queue import FAAQueue
from dfl.job import Job

LOCAL_LIMIT = 512
GLOBAL_LIMIT = 64
STEAL_LIMIT = 64

_IDLE_SLEEP = 100e-9

_log = logging.getLogger(__name__)
_current = threading.local()


def _relax() -> None:
    time.sleep(0)


def _set_current(group: Optional[WorkerGroup]) -> None:
    _current.group = group


class Worker:
    """A thread that runs jobs from its own deque, the global queue, or its peers."""

    def __init__(
        self,
        worker_id: int,
        group: Optional[WorkerGroup],
        queues: list[ChaseLevDeque],
        global_queue: FAAQueue,
    ) -> None:
        self._id = worker_id
        self._group = group
        self._queues = queues
        self._global = global_queue
        self._steal_cursor = worker_id
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"dfl-worker-{worker_id}", daemon=True
        )
        self._thread.start()

    def _run_job(self, job: Job) -> None:
        _set_current(self._group)
        try:
            job()
        except Exception:
            _log.exception("job %r raised", job)

    def _steal_target(self) -> ChaseLevDeque:
        while True:
            self._steal_cursor = (self._steal_cursor + 1) % len(self._queues)
            if self._steal_cursor != self._id:
                return self._queues[self._steal_cursor]

    def _steal_one(self) -> bool:
        for _ in range(STEAL_LIMIT):
            for _ in range(len(self._queues) - 1):
                job = self._steal_target().steal()
                if job is not None:
                    self._run_job(job)
                    return True
            _relax()
        return False

    def _process_one(self) -> bool:
        own = self._queues[self._id]
        for _ in range(LOCAL_LIMIT):
            job = own.pop()
            if job is not None:
                self._run_job(job)
                return True
            _relax()
        return False

    def _process_global_one(self) -> bool:
        for _ in range(GLOBAL_LIMIT):
            job = self._global.pop()
            if job is not None:
                self._run_job(job)
                return True
            _relax()
        return False

    def _run(self) -> None:
        while not self._stop_event.is_set():
            if self._process_one() or self._process_global_one() or self._steal_one():
                continue
            time.sleep(_IDLE_SLEEP)

    def stop(self) -> None:
        """Ask the worker thread to finish after its current job."""
        self._stop_event.set()

    def push(self, job: Job) -> None:
        """Queue a job locally, running older local jobs inline while the deque is full."""
        own = self._queues[self._id]
        while not own.push(job):
            old = own.pop()
            if old is not None:
                old()
                continue
            _relax()

    def thread_id(self) -> Optional[int]:
        """Return the identifier of the worker's thread."""
        return self._thread.ident

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the thread to end; return True if it has ended."""
        self._thread.join(timeout)
        return not self._thread.is_alive()


class WorkerGroup:
    """A fixed set of workers sharing a global queue and stealing from each other."""

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError("a worker group needs at least one worker")
        self._queues = [ChaseLevDeque() for _ in range(size)]
        self._global = FAAQueue()
        self._workers = [
            Worker(i, self, self._queues, self._global) for i in range(size)
        ]
        self._worker_map = {worker.thread_id(): worker for worker in self._workers}

    @staticmethod
    def get_current() -> Optional[WorkerGroup]:
        """Return the group whose job the calling thread is running, if any."""
        return getattr(_current, "group", None)

    def stop(self) -> None:
        """Ask every worker to stop."""
        for worker in self._workers:
            worker.stop()

    def push(self, job: Job) -> None:
        """Schedule a job: locally when called from a worker, otherwise globally."""
        worker = self._worker_map.get(threading.get_ident())
        if worker is not None:
            worker.push(job)
            return
        while not self._global.push(job):
            time.sleep(0)

    def __enter__(self) -> WorkerGroup:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
        for worker in self._workers:
            worker.join()