import socket
import tempfile
import threading
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from wmlink.ipc.errors import IPCError
from wmlink.ipc.framing import recv_message, send_message
from wmlink.models.message import Message


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


class FakeWindowManager:
    """Accepts one client, records its message and answers with a canned reply."""

    def __init__(self, path: Path, reply: bytes | None = b'{"success":true}', reply_type: int | None = None) -> None:
        self.path = path
        self.reply = reply
        self.reply_type = reply_type
        self.received: list[Message] = []
        self.server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self.server.bind(str(path))
        self.server.listen(1)
        self.thread = threading.Thread(target=self._serve, daemon=True)
        self.thread.start()

    def _serve(self) -> None:
        try:
            conn, _ = self.server.accept()
        except OSError:
            return
        with conn:
            try:
                message = recv_message(conn)
            except IPCError:
                return
            self.received.append(message)
            if self.reply is not None:
                reply_type = message.message_type if self.reply_type is None else self.reply_type
                send_message(conn, reply_type, self.reply)

    def wait(self) -> None:
        self.thread.join(timeout=5)

    def close(self) -> None:
        self.server.close()


@pytest.fixture
def short_tmp() -> Iterator[Path]:
    """A temp dir with a short path; pytest's tmp_path can exceed the socket path limit."""
    with tempfile.TemporaryDirectory(prefix="wml", dir="/tmp") as d:
        yield Path(d)


@pytest.fixture
def socket_path(short_tmp: Path) -> Path:
    return short_tmp / "ipc.sock"


@pytest.fixture
def fake_wm(socket_path: Path) -> Iterator[FakeWindowManager]:
    wm = FakeWindowManager(socket_path)
    yield wm
    wm.close()


@pytest.fixture
def make_fake_wm(socket_path: Path) -> Iterator:
    """Factory for a fake window manager with a custom reply."""
    started: list[FakeWindowManager] = []

    def factory(reply: bytes | None = b'{"success":true}', reply_type: int | None = None) -> FakeWindowManager:
        wm = FakeWindowManager(socket_path, reply=reply, reply_type=reply_type)
        started.append(wm)
        return wm

    yield factory
    for wm in started:
        wm.close()
