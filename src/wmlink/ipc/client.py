"""IPC client for tool-to-window-manager communication via Unix domain socket."""

from __future__ import annotations

import socket

from wmlink.ipc.connector import connect, resolve_socket_path
from wmlink.ipc.framing import recv_message, send_message
from wmlink.models.message import Message


class IPCConnection:
    """Owns one connected socket for the lifetime of a tool invocation."""

    def __init__(self, sock: socket.socket, socket_path: str | None = None) -> None:
        self.sock = sock
        self.socket_path = socket_path

    @classmethod
    def open(cls, socket_path: str | None = None) -> IPCConnection:
        path = resolve_socket_path(socket_path)
        return cls(connect(path), socket_path=path)

    def send(self, message_type: int, payload: bytes | str = b"") -> None:
        send_message(self.sock, message_type, payload)

    def recv(self, expected_type: int | None = None) -> Message:
        return recv_message(self.sock, expected_type)

    def request(self, message_type: int, payload: bytes | str = b"") -> Message:
        """Send a request and wait for the reply carrying the same type."""
        self.send(message_type, payload)
        return self.recv(expected_type=message_type)

    def close(self) -> None:
        self.sock.close()

    def __enter__(self) -> IPCConnection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def send_command(
    message_type: int,
    payload: bytes | str = b"",
    socket_path: str | None = None,
    wait_reply: bool = True,
) -> Message | None:
    """Run one request/response cycle against the window manager."""
    with IPCConnection.open(socket_path) as conn:
        if not wait_reply:
            conn.send(message_type, payload)
            return None
        return conn.request(message_type, payload)
