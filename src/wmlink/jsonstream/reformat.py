from __future__ import annotations

from typing import NamedTuple

import structlog

from wmlink.jsonstream.generator import DEFAULT_INDENT, GeneratorError, JsonGenerator
from wmlink.jsonstream.parser import JsonParser, JsonVisitor, ParseStatus

log = structlog.get_logger()


class ReformatResult(NamedTuple):
    text: str
    ok: bool
    error: str | None = None


class _Forwarder(JsonVisitor):
    """Re-emits every parsed token through a generator, numbers as their original text."""

    raw_numbers = True

    def __init__(self, gen: JsonGenerator) -> None:
        self.gen = gen

    def on_null(self) -> None:
        self.gen.null()

    def on_boolean(self, value: bool) -> None:
        self.gen.boolean(value)

    def on_number(self, literal: str) -> None:
        self.gen.number(literal)

    def on_string(self, value: str) -> None:
        self.gen.string(value)

    def on_map_key(self, key: str) -> None:
        self.gen.string(key)

    def on_start_map(self) -> None:
        self.gen.map_open()

    def on_end_map(self) -> None:
        self.gen.map_close()

    def on_start_array(self) -> None:
        self.gen.array_open()

    def on_end_array(self) -> None:
        self.gen.array_close()


def reformat(buffer: bytes, indent: str = DEFAULT_INDENT) -> ReformatResult:
    """Pretty-print a complete JSON document, preserving key order and number literals.

    On any parse or generation failure the partial output is dropped and
    ``ok`` is False.
    """
    gen = JsonGenerator(beautify=True, indent=indent)
    parser = JsonParser(_Forwarder(gen))
    try:
        status = parser.feed(buffer)
        if status is ParseStatus.OK:
            status = parser.complete()
    except GeneratorError as e:
        log.debug("reformat failed", stage="generate", status=str(e.status), error=str(e))
        return ReformatResult("", False, str(e))

    if status is not ParseStatus.OK:
        log.debug("reformat failed", stage="parse", error=parser.error)
        return ReformatResult("", False, parser.error)
    return ReformatResult(gen.getvalue(), True)
