"""Tests for message framing, partial writes and the receiving side."""

import socket
import struct
import sys
import threading

import pytest

from wmlink.ipc.errors import ProtocolError, ReadFailure, WriteFailure
from wmlink.ipc.framing import (
    HEADER_SIZE,
    MAGIC,
    decode_header,
    encode_message,
    read_exact,
    recv_message,
    send_message,
    write_all,
)
from wmlink.models.message import Message, MessageType


class TrickleChannel:
    """Accepts at most ``max_chunk`` bytes per send call."""

    def __init__(self, max_chunk: int) -> None:
        self.max_chunk = max_chunk
        self.data = bytearray()
        self.calls = 0

    def send(self, data) -> int:
        chunk = bytes(data[: self.max_chunk])
        self.data += chunk
        self.calls += 1
        return len(chunk)


class BrokenChannel:
    def __init__(self, fail_after: int = 0) -> None:
        self.fail_after = fail_after
        self.calls = 0

    def send(self, data) -> int:
        self.calls += 1
        if self.calls > self.fail_after:
            raise BrokenPipeError(32, "Broken pipe")
        return 1


class ClosedChannel:
    def send(self, data) -> int:
        return 0


class ErrorOnRecv:
    def recv(self, size: int) -> bytes:
        raise ConnectionResetError(104, "Connection reset by peer")


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


class TestEncodeMessage:
    def test_layout(self):
        buf = encode_message(MessageType.GET_TREE, b'{"x":1}')
        assert buf[:6] == MAGIC
        assert len(buf) == HEADER_SIZE + 7
        assert buf[HEADER_SIZE:] == b'{"x":1}'

    def test_header_is_fourteen_bytes(self):
        assert HEADER_SIZE == 14

    def test_length_and_type_in_host_byte_order(self):
        payload = b"workspace 2"
        buf = encode_message(0x80000003, payload)
        assert int.from_bytes(buf[6:10], sys.byteorder) == len(payload)
        assert int.from_bytes(buf[10:14], sys.byteorder) == 0x80000003
        assert struct.unpack("=II", bytes(buf[6:14])) == (len(payload), 0x80000003)

    def test_str_payload_length_counts_bytes(self):
        buf = encode_message(0, "mark é")
        length, _ = decode_header(bytes(buf[:HEADER_SIZE]))
        assert length == len("mark é".encode("utf-8")) == 7

    def test_empty_payload(self):
        buf = encode_message(MessageType.GET_WORKSPACES)
        assert len(buf) == HEADER_SIZE
        assert decode_header(bytes(buf)) == (0, 1)

    def test_type_must_fit_u32(self):
        with pytest.raises(ValueError, match="32 bits"):
            encode_message(1 << 32, b"")
        with pytest.raises(ValueError):
            encode_message(-1, b"")


class TestDecodeHeader:
    def test_round_trip_fields(self):
        header = bytes(encode_message(9, b"abc")[:HEADER_SIZE])
        assert decode_header(header) == (3, 9)

    def test_invalid_magic(self):
        header = b"xx-ipc" + struct.pack("=II", 0, 0)
        with pytest.raises(ProtocolError, match="invalid magic"):
            decode_header(header)

    def test_wrong_size(self):
        with pytest.raises(ProtocolError, match="14 bytes"):
            decode_header(b"i3-ipc")


class TestWriteAll:
    def test_partial_writes_deliver_every_byte_once(self):
        data = encode_message(MessageType.COMMAND, b"focus left; border pixel 1")
        channel = TrickleChannel(max_chunk=3)
        write_all(channel, data)
        assert bytes(channel.data) == bytes(data)
        assert channel.calls == -(-len(data) // 3)

    def test_single_byte_writes(self):
        data = encode_message(4, b"{}")
        channel = TrickleChannel(max_chunk=1)
        write_all(channel, data)
        assert bytes(channel.data) == bytes(data)
        assert channel.calls == len(data)

    def test_write_error(self):
        with pytest.raises(WriteFailure, match="Broken pipe"):
            write_all(BrokenChannel(fail_after=2), b"0123456789")

    def test_peer_closed(self):
        with pytest.raises(WriteFailure, match="closed"):
            write_all(ClosedChannel(), b"abc")

    def test_empty_buffer_sends_nothing(self):
        channel = TrickleChannel(max_chunk=4)
        write_all(channel, b"")
        assert channel.calls == 0


class TestSendAndReceive:
    def test_round_trip(self, pair):
        a, b = pair
        send_message(a, MessageType.GET_TREE, b'{"nodes":[]}')
        msg = recv_message(b)
        assert msg == Message(MessageType.GET_TREE, b'{"nodes":[]}')

    def test_arbitrary_type_round_trips(self, pair):
        a, b = pair
        send_message(a, 0xDEADBEEF, b"opaque")
        msg = recv_message(b)
        assert msg.message_type == 0xDEADBEEF
        assert msg.payload == b"opaque"

    def test_empty_payload(self, pair):
        a, b = pair
        send_message(a, MessageType.GET_VERSION)
        assert recv_message(b, expected_type=7) == Message(7, b"")

    def test_large_payload(self, pair):
        a, b = pair
        payload = b"x" * (1 << 20)
        received: list[Message] = []
        reader = threading.Thread(target=lambda: received.append(recv_message(b)))
        reader.start()
        send_message(a, MessageType.COMMAND, payload)
        reader.join(timeout=10)
        assert received[0].payload == payload

    def test_unexpected_type(self, pair):
        a, b = pair
        send_message(a, MessageType.GET_OUTPUTS, b"[]")
        with pytest.raises(ProtocolError, match="got 3, expected 4"):
            recv_message(b, expected_type=MessageType.GET_TREE)

    def test_bad_magic(self, pair):
        a, b = pair
        a.sendall(b"i4-ipc" + struct.pack("=II", 0, 0))
        with pytest.raises(ProtocolError, match="invalid magic"):
            recv_message(b)

    def test_eof_instead_of_reply(self, pair):
        a, b = pair
        a.close()
        with pytest.raises(ProtocolError, match="EOF instead of reply"):
            recv_message(b)

    def test_eof_inside_payload(self, pair):
        a, b = pair
        a.sendall(MAGIC + struct.pack("=II", 10, 0) + b"abc")
        a.close()
        with pytest.raises(ProtocolError, match="3 of 10"):
            recv_message(b)

    def test_read_error(self):
        with pytest.raises(ReadFailure, match="reset"):
            read_exact(ErrorOnRecv(), 4)

    def test_write_to_closed_socket(self, pair):
        a, b = pair
        b.close()
        with pytest.raises(WriteFailure):
            send_message(a, 0, b"x" * 1024)
