from __future__ import annotations

import errno
from typing import Optional


class BindError(OSError):
    """The listener could not acquire its configured address."""

    def __init__(self, host: str, port: int, message: str, code: Optional[int] = None) -> None:
        super().__init__(code, message)
        self.host = host
        self.port = port

    def __str__(self) -> str:
        return self.strerror or ""


class AddressInUseError(BindError):
    pass


class PortPermissionError(BindError):
    pass


def classify_bind_error(exc: OSError, host: str, port: int) -> BindError:
    """Map a raw socket error onto the bind failure taxonomy."""
    if exc.errno == errno.EADDRINUSE:
        return AddressInUseError(host, port, f"address {host}:{port} is already in use", exc.errno)
    if exc.errno in (errno.EACCES, errno.EPERM):
        return PortPermissionError(
            host, port, f"permission denied binding {host}:{port}", exc.errno
        )
    return BindError(host, port, f"cannot bind {host}:{port}: {exc.strerror or exc}", exc.errno)
