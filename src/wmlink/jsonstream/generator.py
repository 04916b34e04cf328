"""Token-at-a-time JSON generator with an optional human-readable layout."""

from __future__ import annotations

import json
import math
from enum import Enum, StrEnum

from wmlink.jsonstream.parser import NUMBER_LITERAL

DEFAULT_INDENT = "    "
MAX_DEPTH = 128


class GenStatus(StrEnum):
    KEYS_MUST_BE_STRINGS = "keys_must_be_strings"
    MAX_DEPTH_EXCEEDED = "max_depth_exceeded"
    GENERATION_COMPLETE = "generation_complete"
    INVALID_NUMBER = "invalid_number"
    UNBALANCED_CLOSE = "unbalanced_close"
    IN_ERROR_STATE = "in_error_state"


class GeneratorError(Exception):
    def __init__(self, status: GenStatus, message: str) -> None:
        self.status = status
        super().__init__(message)


class _Ctx(Enum):
    START = "start"
    MAP_START = "map_start"
    MAP_KEY = "map_key"
    MAP_VAL = "map_val"
    ARRAY_START = "array_start"
    IN_ARRAY = "in_array"
    COMPLETE = "complete"


class JsonGenerator:
    """Writes JSON one token at a time into an in-memory buffer.

    In beautify mode every element goes on its own line, indented by
    ``indent`` per nesting level, and a newline follows the finished document.
    """

    def __init__(
        self,
        beautify: bool = False,
        indent: str = DEFAULT_INDENT,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self.beautify = beautify
        self.indent = indent
        self.max_depth = max_depth
        self._parts: list[str] = []
        self._stack: list[_Ctx] = [_Ctx.START]
        self._failed = False

    @property
    def depth(self) -> int:
        return len(self._stack) - 1

    def getvalue(self) -> str:
        return "".join(self._parts)

    def clear(self) -> None:
        self._parts.clear()

    def null(self) -> None:
        self._atom("null")

    def boolean(self, value: bool) -> None:
        self._atom("true" if value else "false")

    def integer(self, value: int) -> None:
        self._atom(str(int(value)))

    def double(self, value: float) -> None:
        if math.isnan(value) or math.isinf(value):
            self._fail(GenStatus.INVALID_NUMBER, f"cannot represent {value!r} in JSON")
        self._atom(repr(float(value)))

    def number(self, literal: str) -> None:
        """Write a number exactly as given, after checking it is a valid JSON literal."""
        if not NUMBER_LITERAL.match(literal):
            self._fail(GenStatus.INVALID_NUMBER, f"invalid number literal {literal!r}")
        self._atom(literal)

    def string(self, value: str) -> None:
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            # Lone surrogates stay as \uXXXX escapes so the output is valid UTF-8.
            encoded = json.dumps(value)
        else:
            encoded = json.dumps(value, ensure_ascii=False)
        if self._stack[-1] in (_Ctx.MAP_START, _Ctx.MAP_KEY):
            self._check_usable()
            self._separate()
            self._parts.append(encoded)
            self._parts.append(": " if self.beautify else ":")
            self._stack[-1] = _Ctx.MAP_VAL
            return
        self._atom(encoded)

    def map_open(self) -> None:
        self._open("{", _Ctx.MAP_START)

    def map_close(self) -> None:
        self._close("}", (_Ctx.MAP_START, _Ctx.MAP_KEY))

    def array_open(self) -> None:
        self._open("[", _Ctx.ARRAY_START)

    def array_close(self) -> None:
        self._close("]", (_Ctx.ARRAY_START, _Ctx.IN_ARRAY))

    def _fail(self, status: GenStatus, message: str) -> None:
        self._failed = True
        raise GeneratorError(status, message)

    def _check_usable(self) -> None:
        if self._failed:
            raise GeneratorError(GenStatus.IN_ERROR_STATE, "generator is in an error state")

    def _check_value_allowed(self) -> None:
        self._check_usable()
        ctx = self._stack[-1]
        if ctx is _Ctx.COMPLETE:
            self._fail(GenStatus.GENERATION_COMPLETE, "a complete JSON document was already generated")
        if ctx in (_Ctx.MAP_START, _Ctx.MAP_KEY):
            self._fail(GenStatus.KEYS_MUST_BE_STRINGS, "object keys must be strings")

    def _newline(self, depth: int) -> None:
        if self.beautify:
            self._parts.append("\n" + self.indent * depth)

    def _separate(self) -> None:
        """Emit whatever must precede the next element at the current position."""
        ctx = self._stack[-1]
        if ctx in (_Ctx.MAP_KEY, _Ctx.IN_ARRAY):
            self._parts.append(",")
        if ctx in (_Ctx.MAP_START, _Ctx.MAP_KEY, _Ctx.ARRAY_START, _Ctx.IN_ARRAY):
            self._newline(self.depth)

    def _appended(self) -> None:
        """Advance the current context after a complete value."""
        ctx = self._stack[-1]
        if ctx is _Ctx.MAP_VAL:
            self._stack[-1] = _Ctx.MAP_KEY
        elif ctx in (_Ctx.ARRAY_START, _Ctx.IN_ARRAY):
            self._stack[-1] = _Ctx.IN_ARRAY
        elif ctx is _Ctx.START:
            self._stack[-1] = _Ctx.COMPLETE
            if self.beautify:
                self._parts.append("\n")

    def _atom(self, text: str) -> None:
        self._check_value_allowed()
        self._separate()
        self._parts.append(text)
        self._appended()

    def _open(self, bracket: str, ctx: _Ctx) -> None:
        self._check_value_allowed()
        if self.depth >= self.max_depth:
            self._fail(GenStatus.MAX_DEPTH_EXCEEDED, f"nesting deeper than {self.max_depth}")
        self._separate()
        self._parts.append(bracket)
        self._stack.append(ctx)

    def _close(self, bracket: str, allowed: tuple[_Ctx, _Ctx]) -> None:
        self._check_usable()
        ctx = self._stack[-1]
        if ctx not in allowed:
            self._fail(GenStatus.UNBALANCED_CLOSE, f"unexpected '{bracket}'")
        self._stack.pop()
        if ctx in (_Ctx.MAP_KEY, _Ctx.IN_ARRAY):
            self._newline(self.depth)
        self._parts.append(bracket)
        self._appended()
