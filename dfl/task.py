"""Coroutine tasks that run on a worker group and can await one another."""

from __future__ import annotations

import functools
import threading
from contextlib import suppress
from typing import Any, Callable, Coroutine, Generator, Optional

from dfl.job import Job
from dfl.worker import WorkerGroup

_PENDING = object()


class Task:
    """A coroutine that starts suspended and runs once scheduled on a worker group.

    Inside a running task, ``await other_task`` schedules the child on the
    current worker group and suspends the parent. The parent resumes on the
    thread that finishes the child.
    """

    def __init__(self, coro: Coroutine[Any, Any, Any]) -> None:
        if not (hasattr(coro, "send") and hasattr(coro, "throw")):
            raise TypeError(f"Task needs a coroutine, not {type(coro).__name__}")
        self._coro = coro
        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._value: Any = _PENDING
        self._exception: Optional[BaseException] = None
        self._continuation: Optional[Task] = None
        self._started = False

    def schedule(self, group: WorkerGroup) -> Task:
        """Queue the task on ``group``; scheduling an already started task does nothing."""
        with self._lock:
            if self._started or self._ready.is_set():
                return self
            self._started = True
        group.push(Job(Task._step, self))
        return self

    def done(self) -> bool:
        """Return True once the coroutine has returned or raised."""
        return self._ready.is_set()

    def wait(self, timeout: Optional[float] = None) -> Any:
        """Block until the task finishes and return its result or raise its exception.

        Raises TimeoutError if ``timeout`` seconds pass first.
        """
        if not self._ready.wait(timeout):
            raise TimeoutError("task did not finish in time")
        return self._result()

    def __await__(self) -> Generator[Task, None, Any]:
        if not self._ready.is_set():
            yield self
        return self._result()

    def _result(self) -> Any:
        if self._exception is not None:
            raise self._exception
        if self._value is _PENDING:
            raise RuntimeError("Task result awaited before completion.")
        return self._value

    def _step(self) -> None:
        error: Optional[BaseException] = None
        while True:
            try:
                if error is not None:
                    yielded = self._coro.throw(error)
                else:
                    yielded = self._coro.send(None)
            except StopIteration as stop:
                self._finish(stop.value, None)
                return
            except BaseException as exc:
                self._finish(None, exc)
                return
            error = None
            if isinstance(yielded, Task):
                if not self._await_child(yielded):
                    return
                continue
            error = TypeError(
                f"a task can only await other tasks, got {type(yielded).__name__}"
            )

    def _await_child(self, child: Task) -> bool:
        """Suspend on ``child``; return True if the parent should resume at once."""
        group = WorkerGroup.get_current()
        with child._lock:
            if child._ready.is_set():
                return True
            start = not child._started
            if start and group is None:
                # Nothing can run the child: resume the parent, whose await
                # then reports the missing result.
                return True
            child._continuation = self
            if start:
                child._started = True
        if start:
            group.push(Job(Task._step, child))
        return False

    def _finish(self, value: Any, exception: Optional[BaseException]) -> None:
        with self._lock:
            self._value = value
            self._exception = exception
            self._ready.set()
            continuation, self._continuation = self._continuation, None
        if continuation is not None:
            continuation._step()

    def __del__(self) -> None:
        if not self._ready.is_set():
            with suppress(Exception):
                self._coro.close()

    def __repr__(self) -> str:
        state = "done" if self._ready.is_set() else "pending"
        return f"<Task {state}>"


def task(fn: Callable[..., Coroutine[Any, Any, Any]]) -> Callable[..., Task]:
    """Decorate a coroutine function so that calling it returns a suspended Task."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Task:
        return Task(fn(*args, **kwargs))

    return wrapper