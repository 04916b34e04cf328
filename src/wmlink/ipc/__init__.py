from wmlink.ipc.client import IPCConnection, send_command
from wmlink.ipc.connector import DEFAULT_SOCKET_PATH, connect, resolve_socket_path
from wmlink.ipc.errors import (
    ConnectionFailure,
    IPCError,
    ProtocolError,
    ReadFailure,
    WriteFailure,
)
from wmlink.ipc.framing import MAGIC, encode_message, recv_message, send_message

__all__ = [
    "DEFAULT_SOCKET_PATH",
    "MAGIC",
    "ConnectionFailure",
    "IPCConnection",
    "IPCError",
    "ProtocolError",
    "ReadFailure",
    "WriteFailure",
    "connect",
    "encode_message",
    "recv_message",
    "resolve_socket_path",
    "send_command",
    "send_message",
]
