"""Determine a stream's protocol version from its first JSON object.

A status feed announces itself with a header object such as
``{"version": 1, "click_events": true}`` and then keeps streaming. The probes
here look only at that first value, stop right after it and report how many
bytes it took, so the caller can hand the rest of the buffer to the event
parser.
"""

from __future__ import annotations

import signal
from dataclasses import dataclass, field
from typing import NamedTuple

from wmlink.jsonstream.parser import JsonParser, JsonVisitor, ParseStatus

UNKNOWN_VERSION = -1


class VersionResult(NamedTuple):
    version: int
    consumed: int


@dataclass
class VersionProbe(JsonVisitor):
    """Per-call state: whether the next integer belongs to a ``version`` key, and the last one seen."""

    expecting_version: bool = False
    version: int = UNKNOWN_VERSION

    def on_map_key(self, key: str) -> None:
        self.expecting_version = key == "version"

    def on_integer(self, value: int) -> None:
        if self.expecting_version:
            self.version = value


def probe_version(buffer: bytes) -> VersionResult:
    """Return the ``version`` integer of the first JSON value in ``buffer``.

    Bytes after the first complete value are ignored. Malformed input gives
    ``(-1, 0)``. Input that is valid but not yet complete gives whatever
    version was seen so far, with the whole buffer counted as consumed.
    """
    probe = VersionProbe()
    parser = JsonParser(probe, allow_trailing_garbage=True)
    if parser.feed(buffer) is not ParseStatus.OK:
        return VersionResult(UNKNOWN_VERSION, 0)
    return VersionResult(probe.version, parser.bytes_consumed)


@dataclass
class BarHeader:
    version: int = 0
    stop_signal: int = int(signal.SIGSTOP)
    cont_signal: int = int(signal.SIGCONT)
    click_events: bool = False


class BarHeaderResult(NamedTuple):
    header: BarHeader
    consumed: int


@dataclass
class _BarHeaderProbe(JsonVisitor):
    header: BarHeader = field(default_factory=BarHeader)
    current_key: str | None = None

    _INTEGER_KEYS = ("version", "stop_signal", "cont_signal")

    def on_map_key(self, key: str) -> None:
        self.current_key = key

    def on_integer(self, value: int) -> None:
        if self.current_key in self._INTEGER_KEYS:
            setattr(self.header, self.current_key, value)

    def on_boolean(self, value: bool) -> None:
        if self.current_key == "click_events":
            self.header.click_events = value


def parse_bar_header(buffer: bytes) -> BarHeaderResult:
    """Parse a status feed header: protocol version, pause/resume signals and click events.

    Uses the same consumed/failure rules as ``probe_version``; on failure the
    header keeps its defaults.
    """
    probe = _BarHeaderProbe()
    parser = JsonParser(probe, allow_trailing_garbage=True)
    if parser.feed(buffer) is not ParseStatus.OK:
        return BarHeaderResult(BarHeader(), 0)
    return BarHeaderResult(probe.header, parser.bytes_consumed)
