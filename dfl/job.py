"""A unit of work: a function paired with the argument it is called with."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class Job:
    """A callable bound to a single argument, run later by a worker."""

    fn: Optional[Callable[[Any], Any]] = None
    data: Any = None

    def __call__(self) -> Any:
        """Run the job; raise RuntimeError if it has no function."""
        if self.fn is None:
            raise RuntimeError("job has no function to run")
        return self.fn(self.data)