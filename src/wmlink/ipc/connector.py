"""Locating and connecting to the window manager's Unix domain socket."""

from __future__ import annotations

import os
import socket
from collections.abc import Mapping

import structlog

from wmlink.ipc.errors import ConnectionFailure

log = structlog.get_logger()

DEFAULT_SOCKET_PATH = "/tmp/i3-ipc.sock"
SOCKET_ENV_VAR = "I3SOCK"

# sizeof(sockaddr_un.sun_path) on Linux, minus the terminating NUL.
MAX_SOCKET_PATH = 107


def resolve_socket_path(
    explicit: str | None = None,
    config_path: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the socket path: explicit argument, $I3SOCK, config file, then the default."""
    env = os.environ if environ is None else environ
    for candidate in (explicit, env.get(SOCKET_ENV_VAR), config_path):
        if candidate:
            return candidate
    return DEFAULT_SOCKET_PATH


def _fit_path(path: str) -> bytes:
    raw = os.fsencode(path)
    if len(raw) > MAX_SOCKET_PATH:
        log.warning(
            "socket path too long, truncating",
            path=path,
            length=len(raw),
            limit=MAX_SOCKET_PATH,
        )
        raw = raw[:MAX_SOCKET_PATH]
    return raw


def connect(path: str) -> socket.socket:
    """Open a stream connection to the socket at ``path``.

    Over-long paths are truncated to the platform limit rather than rejected.
    Raises ConnectionFailure carrying the system error on any failure.
    """
    address = _fit_path(path)
    try:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    except OSError as e:
        raise ConnectionFailure(path, e) from e

    try:
        sock.connect(address)
    except OSError as e:
        sock.close()
        raise ConnectionFailure(path, e) from e

    log.debug("connected", socket_path=path)
    return sock
