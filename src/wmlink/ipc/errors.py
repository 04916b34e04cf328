from __future__ import annotations


class IPCError(Exception):
    pass


class ConnectionFailure(IPCError):
    """Raised when the socket cannot be created or connected."""

    def __init__(self, path: str, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        reason = cause.strerror or str(cause)
        super().__init__(f"Could not connect to window manager on socket {path}: {reason}")


class WriteFailure(IPCError):
    pass


class ReadFailure(IPCError):
    pass


class ProtocolError(IPCError):
    """The peer violated the framing protocol (bad magic, wrong type, early EOF)."""
