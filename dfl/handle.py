"""Ownership wrapper for an operating-system file descriptor."""

from __future__ import annotations

import os
from contextlib import suppress

_INVALID = -1


class SafeHandle:
    """Owns a file descriptor and closes it when released."""

    def __init__(self, fd: int) -> None:
        self._fd = int(fd)

    @classmethod
    def invalid(cls) -> SafeHandle:
        """Return a handle that owns nothing."""
        return cls(_INVALID)

    def is_valid(self) -> bool:
        return self._fd != _INVALID

    def __bool__(self) -> bool:
        return self.is_valid()

    def fileno(self) -> int:
        """Return the owned descriptor; raise ValueError if there is none."""
        if not self.is_valid():
            raise ValueError("handle is invalid")
        return self._fd

    def replace(self, other: SafeHandle) -> None:
        """Take ownership of ``other``'s descriptor, closing the current one."""
        if other is self:
            return
        fd = other._fd
        other._fd = _INVALID
        self.close()
        self._fd = fd

    def close(self) -> None:
        """Close the descriptor if one is owned. Safe to call repeatedly."""
        if self._fd != _INVALID:
            fd, self._fd = self._fd, _INVALID
            os.close(fd)

    def __enter__(self) -> SafeHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        with suppress(Exception):
            self.close()

    def __repr__(self) -> str:
        return f"SafeHandle({self._fd})"