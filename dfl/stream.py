"""Byte streams and a stream over an owned file descriptor."""

from __future__ import annotations

import abc
import os
import select
import warnings
from contextlib import suppress

from dfl.handle import SafeHandle

_COPY_CHUNK = 81920
_INT_MAX = 2**31 - 1

_sync = getattr(os, "fdatasync", os.fsync)


def _timeout_ms(timeout: float | None) -> int | None:
    """Convert a timeout in seconds to poll() milliseconds; None waits forever."""
    if timeout is None or timeout < 0:
        return None
    ms = int(timeout * 1000)
    if ms > _INT_MAX:
        warnings.warn("poll(): timeout is too big", RuntimeWarning, stacklevel=3)
        ms = _INT_MAX
    return ms


class Stream(abc.ABC):
    """A bidirectional byte stream."""

    @abc.abstractmethod
    def poll(self, timeout: float | None) -> bool:
        """Wait up to ``timeout`` seconds for data to read; None waits forever."""

    @abc.abstractmethod
    def write(self, data) -> int:
        """Write bytes and return how many were written."""

    @abc.abstractmethod
    def read(self, size: int) -> bytes:
        """Read at most ``size`` bytes; an empty result means end of stream."""

    @abc.abstractmethod
    def flush(self) -> None:
        """Push buffered data to the underlying device."""

    def copy_to(self, dst: Stream) -> int:
        """Copy everything until end of stream into ``dst``; return the byte count."""
        total = 0
        while True:
            chunk = self.read(_COPY_CHUNK)
            if not chunk:
                return total
            view = memoryview(chunk)
            while view:
                written = dst.write(view)
                if written == 0:
                    raise OSError("write(): couldn't write any bytes")
                view = view[written:]
            total += len(chunk)

    def close(self) -> None:
        """Release the stream's resources."""

    def __enter__(self) -> Stream:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class SafeHandleStream(Stream):
    """A stream reading and writing an owned file descriptor."""

    def __init__(self, handle: SafeHandle) -> None:
        self._handle = handle

    @property
    def handle(self) -> SafeHandle:
        return self._handle

    def __bool__(self) -> bool:
        return bool(self._handle)

    def poll(self, timeout: float | None) -> bool:
        poller = select.poll()
        poller.register(self._handle.fileno(), select.POLLIN)
        try:
            events = poller.poll(_timeout_ms(timeout))
        except OSError as exc:
            warnings.warn(f"poll(): {exc.strerror}", RuntimeWarning, stacklevel=2)
            return False
        return bool(events)

    def write(self, data) -> int:
        return os.write(self._handle.fileno(), data)

    def read(self, size: int) -> bytes:
        return os.read(self._handle.fileno(), size)

    def flush(self) -> None:
        with suppress(OSError):
            _sync(self._handle.fileno())

    def close(self) -> None:
        self._handle.close()