"""Wire framing: ``MAGIC | LENGTH | TYPE | PAYLOAD``.

LENGTH and TYPE are unsigned 32-bit integers in host byte order. Sender and
receiver are assumed to share one machine, so the header carries neither an
endianness marker nor a version.
"""

from __future__ import annotations

import struct
from typing import Protocol

import structlog

from wmlink.ipc.errors import ProtocolError, ReadFailure, WriteFailure
from wmlink.models.message import Message

log = structlog.get_logger()

MAGIC = b"i3-ipc"
# "=" keeps native byte order but drops alignment padding after the magic.
HEADER = struct.Struct(f"={len(MAGIC)}sII")
HEADER_SIZE = HEADER.size
MAX_U32 = 0xFFFFFFFF


class Channel(Protocol):
    def send(self, data: bytes, /) -> int: ...

    def recv(self, bufsize: int, /) -> bytes: ...


def encode_message(message_type: int, payload: bytes | str = b"") -> bytearray:
    """Build one framed message in a freshly allocated buffer."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    if not 0 <= message_type <= MAX_U32:
        raise ValueError(f"message type {message_type} does not fit in 32 bits")
    if len(payload) > MAX_U32:
        raise ValueError(f"payload of {len(payload)} bytes does not fit in 32 bits")

    buf = bytearray(HEADER.pack(MAGIC, len(payload), message_type))
    buf += payload
    return buf


def decode_header(data: bytes) -> tuple[int, int]:
    """Return ``(length, message_type)`` from a raw header."""
    if len(data) != HEADER_SIZE:
        raise ProtocolError(f"header must be {HEADER_SIZE} bytes, got {len(data)}")
    magic, length, message_type = HEADER.unpack(data)
    if magic != MAGIC:
        raise ProtocolError("invalid magic in reply")
    return length, message_type


def write_all(channel: Channel, data: bytes | bytearray) -> None:
    """Write every byte of ``data``, resuming after partial writes."""
    view = memoryview(data)
    sent = 0
    total = len(view)
    while sent < total:
        try:
            n = channel.send(view[sent:])
        except OSError as e:
            raise WriteFailure(f"write() failed: {e.strerror or e}") from e
        if n == 0:
            raise WriteFailure(f"peer closed the connection after {sent} of {total} bytes")
        sent += n


def send_message(channel: Channel, message_type: int, payload: bytes | str = b"") -> None:
    buf = encode_message(message_type, payload)
    write_all(channel, buf)
    log.debug("message sent", type=message_type, length=len(buf) - HEADER_SIZE)


def read_exact(channel: Channel, size: int) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        try:
            chunk = channel.recv(size - len(buf))
        except OSError as e:
            raise ReadFailure(f"read() failed: {e.strerror or e}") from e
        if not chunk:
            if not buf:
                raise ProtocolError("received EOF instead of reply")
            raise ProtocolError(f"received EOF after {len(buf)} of {size} bytes")
        buf += chunk
    return bytes(buf)


def recv_message(channel: Channel, expected_type: int | None = None) -> Message:
    """Read one framed message, optionally insisting on its type."""
    length, message_type = decode_header(read_exact(channel, HEADER_SIZE))
    if expected_type is not None and message_type != expected_type:
        raise ProtocolError(
            f"unexpected reply type (got {message_type}, expected {expected_type})"
        )
    payload = read_exact(channel, length) if length else b""
    log.debug("message received", type=message_type, length=length)
    return Message(message_type=message_type, payload=payload)
