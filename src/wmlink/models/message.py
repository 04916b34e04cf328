from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

EVENT_MASK = 1 << 31


class MessageType(IntEnum):
    COMMAND = 0
    RUN_COMMAND = 0
    GET_WORKSPACES = 1
    SUBSCRIBE = 2
    GET_OUTPUTS = 3
    GET_TREE = 4
    GET_MARKS = 5
    GET_BAR_CONFIG = 6
    GET_VERSION = 7
    GET_BINDING_MODES = 8
    GET_CONFIG = 9

    @classmethod
    def from_name(cls, name: str) -> MessageType:
        """Look up a message type by name, ignoring case."""
        try:
            return cls[name.upper()]
        except KeyError:
            known = ", ".join(m.lower() for m in cls.__members__)
            raise ValueError(f"Unknown message type '{name}'. Known types: {known}") from None


class EventType(IntEnum):
    WORKSPACE = EVENT_MASK | 0
    OUTPUT = EVENT_MASK | 1
    MODE = EVENT_MASK | 2
    WINDOW = EVENT_MASK | 3
    BARCONFIG_UPDATE = EVENT_MASK | 4
    BINDING = EVENT_MASK | 5
    SHUTDOWN = EVENT_MASK | 6


@dataclass(frozen=True)
class Message:
    """One framed message as seen on the wire. The type is opaque to the transport."""

    message_type: int
    payload: bytes = b""

    @property
    def is_event(self) -> bool:
        return bool(self.message_type & EVENT_MASK)

    def text(self) -> str:
        return self.payload.decode("utf-8")
