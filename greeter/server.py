from __future__ import annotations

import logging
import os
import socket
import sys
import threading
import time
from typing import List, Optional

import uvicorn

from .config import DEFAULT_HOST, DEFAULT_PORT, ServerConfig
from .errors import AddressInUseError, BindError, PortPermissionError, classify_bind_error
from .logging_config import configure_logging
from .main import app

logger = logging.getLogger(__name__)

STARTUP_TIMEOUT = 10.0


class _Server(uvicorn.Server):
    """uvicorn server that reports when it is accepting connections."""

    def __init__(self, config: uvicorn.Config) -> None:
        super().__init__(config)
        self.listening = threading.Event()

    async def startup(self, sockets: Optional[List[socket.socket]] = None) -> None:
        await super().startup(sockets=sockets)
        if not self.should_exit:
            self.listening.set()


def bind_socket(config: ServerConfig) -> socket.socket:
    """Bind and listen on the configured address, or raise BindError."""
    family = socket.AF_INET6 if ":" in config.host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    if os.name != "nt":
        # Still refuses a port another socket is listening on.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((config.host, config.port))
        sock.listen(socket.SOMAXCONN)
    except OSError as exc:
        sock.close()
        raise classify_bind_error(exc, config.host, config.port) from exc
    return sock


class ServerHandle:
    """A running listener serving the greeter app."""

    def __init__(self, server: _Server, sock: socket.socket, host: str) -> None:
        self._server = server
        self._sock = sock
        self.host = host
        self.port: int = sock.getsockname()[1]
        self._thread = threading.Thread(
            target=server.run, kwargs={"sockets": [sock]}, name="greeter-server", daemon=True
        )

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}"

    def is_running(self) -> bool:
        return self._thread.is_alive()

    def wait(self) -> None:
        self._thread.join()

    def close(self) -> None:
        self._server.should_exit = True
        if self._thread.is_alive():
            self._thread.join(timeout=STARTUP_TIMEOUT)
        self._sock.close()

    def _start(self) -> None:
        self._thread.start()
        deadline = time.monotonic() + STARTUP_TIMEOUT
        while not self._server.listening.wait(0.1):
            if not self._thread.is_alive() or time.monotonic() > deadline:
                self.close()
                raise RuntimeError("server did not start listening")


def start(port: int = DEFAULT_PORT, host: str = DEFAULT_HOST) -> ServerHandle:
    """Bind ``host:port`` and serve the app in a background thread.

    Raises ``ValueError`` for an invalid port and ``BindError`` (one of
    ``AddressInUseError`` / ``PortPermissionError``) when the address cannot
    be bound. The socket is listening before this returns.
    """
    config = ServerConfig(host=host, port=port)
    sock = bind_socket(config)

    uv_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_config=None,
        log_level="warning",
        access_log=False,
    )
    handle = ServerHandle(_Server(uv_config), sock, config.host)
    handle._start()
    logger.info("Server is running on %s", handle.url)
    return handle


def run() -> None:
    configure_logging()
    try:
        config = ServerConfig.from_env()
    except ValueError as exc:
        logger.error("Invalid PORT: %s", exc)
        sys.exit(1)
    try:
        handle = start(port=config.port, host=config.host)
    except AddressInUseError as exc:
        logger.error("Port %d is already in use", exc.port, extra={"host": exc.host})
        sys.exit(1)
    except PortPermissionError as exc:
        logger.error("Not permitted to bind port %d", exc.port, extra={"host": exc.host})
        sys.exit(1)
    except BindError as exc:
        logger.error("Could not bind: %s", exc)
        sys.exit(1)

    try:
        handle.wait()
    except KeyboardInterrupt:
        pass
    finally:
        handle.close()
