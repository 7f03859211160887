"""Local stream connections addressed by name, over Unix domain sockets."""

from __future__ import annotations

import errno
import os
import select
import socket
from contextlib import suppress

from dfl.handle import SafeHandle
from dfl.stream import SafeHandleStream, _timeout_ms


def pipe_path(name: str) -> str:
    """Return the filesystem path used for the pipe called ``name``."""
    return f"/tmp/{name}"


class NamedPipeStream(SafeHandleStream):
    """A stream connected through a named pipe."""

    def __init__(self, name: str, handle: SafeHandle) -> None:
        super().__init__(handle)
        self._name = name

    @property
    def name(self) -> str:
        return self._name


def _connect(name: str) -> SafeHandle:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(pipe_path(name))
    except OSError:
        sock.close()
        raise
    return SafeHandle(sock.detach())


def _listen(name: str) -> SafeHandle:
    path = pipe_path(name)
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        with suppress(FileNotFoundError):
            os.unlink(path)
        sock.bind(path)
        sock.listen(socket.SOMAXCONN)
    except OSError:
        sock.close()
        raise
    return SafeHandle(sock.detach())


class NamedPipeClientStream(NamedPipeStream):
    """Client end: connects to an existing named pipe server."""

    def __init__(self, name: str) -> None:
        super().__init__(name, _connect(name))


class NamedPipeServerStream(NamedPipeStream):
    """Server end: listens on a named pipe and accepts one connection."""

    def __init__(self, name: str) -> None:
        super().__init__(name, SafeHandle.invalid())
        self._listener = _listen(name)

    def __bool__(self) -> bool:
        return bool(self._listener)

    def wait_for_connection(self, timeout: float | None) -> bool:
        """Wait up to ``timeout`` seconds for a client; return False on timeout."""
        poller = select.poll()
        poller.register(self._listener.fileno(), select.POLLIN)
        events = poller.poll(_timeout_ms(timeout))
        if not events:
            return False
        if not any(mask & select.POLLIN for _, mask in events):
            raise OSError(errno.EIO, os.strerror(errno.EIO))

        listener = socket.socket(fileno=self._listener.fileno())
        try:
            conn, _ = listener.accept()
        finally:
            listener.detach()
        self._handle.replace(SafeHandle(conn.detach()))
        return True

    def close(self) -> None:
        super().close()
        self._listener.close()