"""Incremental push-style JSON parser.

The parser never builds a document tree. It recognises tokens as bytes arrive
and reports each one to a ``JsonVisitor``. Input may be fed in arbitrary
chunks; a token split across two chunks is held back until it is complete.
"""

from __future__ import annotations

import json
import math
import re
from enum import Enum, StrEnum

WHITESPACE = frozenset(b" \t\n\r")
_NUMBER_START = frozenset(b"-0123456789")
_NUMBER_SPAN = re.compile(rb"[-+0-9.eE]+")
NUMBER_LITERAL = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?\Z")
_STRING_BODY = re.compile(rb'[^"\\]*(?:\\[\s\S][^"\\]*)*')
_LITERALS = {ord("t"): b"true", ord("f"): b"false", ord("n"): b"null"}


class ParseStatus(StrEnum):
    OK = "ok"
    CLIENT_CANCELED = "client_canceled"
    ERROR = "error"


class JsonVisitor:
    """Receives one call per token. Return ``False`` from any method to stop parsing.

    With ``raw_numbers`` set, every number is reported through ``on_number``
    with its literal text; otherwise integers go to ``on_integer`` and all
    other numbers to ``on_double``.
    """

    raw_numbers = False

    def on_null(self) -> bool | None:
        return None

    def on_boolean(self, value: bool) -> bool | None:
        return None

    def on_integer(self, value: int) -> bool | None:
        return None

    def on_double(self, value: float) -> bool | None:
        return None

    def on_number(self, literal: str) -> bool | None:
        return None

    def on_string(self, value: str) -> bool | None:
        return None

    def on_start_map(self) -> bool | None:
        return None

    def on_map_key(self, key: str) -> bool | None:
        return None

    def on_end_map(self) -> bool | None:
        return None

    def on_start_array(self) -> bool | None:
        return None

    def on_end_array(self) -> bool | None:
        return None


class _State(Enum):
    START = "start"
    PARSE_COMPLETE = "parse_complete"
    MAP_START = "map_start"
    MAP_NEED_KEY = "map_need_key"
    MAP_SEP = "map_sep"
    MAP_NEED_VAL = "map_need_val"
    MAP_GOT_VAL = "map_got_val"
    ARRAY_START = "array_start"
    ARRAY_NEED_VAL = "array_need_val"
    ARRAY_GOT_VAL = "array_got_val"


class _Tok(Enum):
    LBRACE = "{"
    RBRACE = "}"
    LBRACK = "["
    RBRACK = "]"
    COLON = ":"
    COMMA = ","
    STRING = "string"
    NUMBER = "number"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"


_PUNCTUATION = {ord(t.value): t for t in (_Tok.LBRACE, _Tok.RBRACE, _Tok.LBRACK, _Tok.RBRACK, _Tok.COLON, _Tok.COMMA)}
_KEYWORDS = {b"true": _Tok.TRUE, b"false": _Tok.FALSE, b"null": _Tok.NULL}

# Where the enclosing state moves once a value has been read in it.
_AFTER_VALUE = {
    _State.START: _State.PARSE_COMPLETE,
    _State.MAP_NEED_VAL: _State.MAP_GOT_VAL,
    _State.ARRAY_START: _State.ARRAY_GOT_VAL,
    _State.ARRAY_NEED_VAL: _State.ARRAY_GOT_VAL,
}


class _SyntaxError(Exception):
    def __init__(self, message: str, pos: int) -> None:
        self.message = message
        self.pos = pos
        super().__init__(message)


class _Canceled(Exception):
    def __init__(self, pos: int) -> None:
        self.pos = pos
        super().__init__("canceled")


class JsonParser:
    """Feeds bytes through a JSON state machine, reporting tokens to ``visitor``.

    ``bytes_consumed`` is the number of bytes of the most recent ``feed`` call
    that were used. With ``allow_trailing_garbage``, parsing stops right after
    the first complete value and anything after it is left unconsumed.
    """

    def __init__(self, visitor: JsonVisitor, allow_trailing_garbage: bool = False) -> None:
        self.visitor = visitor
        self.allow_trailing_garbage = allow_trailing_garbage
        self.bytes_consumed = 0
        self.error: str | None = None
        self._status = ParseStatus.OK
        self._stack: list[_State] = [_State.START]
        self._pending = b""
        self._seen = 0

    @property
    def status(self) -> ParseStatus:
        return self._status

    @property
    def finished(self) -> bool:
        return self._stack[-1] is _State.PARSE_COMPLETE

    def feed(self, data: bytes) -> ParseStatus:
        if self._status is not ParseStatus.OK:
            return self._status
        held = len(self._pending)
        buf = self._pending + bytes(data)
        self._pending = b""
        base = self._seen - held
        self._seen += len(data)

        pos = self._run(buf, base, final=False)
        self.bytes_consumed = max(pos - held, 0)
        return self._status

    def complete(self) -> ParseStatus:
        """Signal end of input; flushes a held-back number and rejects truncated documents."""
        if self._status is not ParseStatus.OK:
            return self._status
        if self._pending:
            buf = self._pending
            self._pending = b""
            self._run(buf, self._seen - len(buf), final=True)
            if self._status is not ParseStatus.OK:
                return self._status
        if not self.finished:
            self._status = ParseStatus.ERROR
            self.error = f"premature EOF at byte {self._seen}"
        return self._status

    def _run(self, buf: bytes, base: int, final: bool) -> int:
        pos = 0
        end = len(buf)
        try:
            while pos < end:
                if self._stack[-1] is _State.PARSE_COMPLETE:
                    if self.allow_trailing_garbage:
                        return pos
                    if buf[pos] in WHITESPACE:
                        pos += 1
                        continue
                    raise _SyntaxError("trailing garbage", pos)
                if buf[pos] in WHITESPACE:
                    pos += 1
                    continue
                lexed = self._lex(buf, pos, final)
                if lexed is None:
                    self._pending = buf[pos:]
                    return end
                tok, value, next_pos = lexed
                self._handle(tok, value, pos)
                pos = next_pos
        except _SyntaxError as e:
            self._status = ParseStatus.ERROR
            self.error = f"parse error: {e.message} at byte {base + e.pos}"
            return e.pos
        except _Canceled as e:
            self._status = ParseStatus.CLIENT_CANCELED
            self.error = f"client canceled parse at byte {base + e.pos}"
            return e.pos
        return pos

    def _lex(self, buf: bytes, pos: int, final: bool) -> tuple[_Tok, object, int] | None:
        """Return the token at ``pos``, or None when it may continue past the buffer."""
        c = buf[pos]
        if c in _PUNCTUATION:
            return _PUNCTUATION[c], None, pos + 1

        if c == ord('"'):
            m = _STRING_BODY.match(buf, pos + 1)
            stop = m.end()
            # The body only stops early on the closing quote or a lone trailing backslash.
            if stop >= len(buf) or buf[stop] != ord('"'):
                if final:
                    raise _SyntaxError("premature EOF inside string", pos)
                return None
            literal = buf[pos : stop + 1]
            try:
                return _Tok.STRING, json.loads(literal.decode("utf-8")), stop + 1
            except ValueError as e:
                raise _SyntaxError(f"invalid string ({e})", pos) from e

        if c in _NUMBER_START:
            stop = _NUMBER_SPAN.match(buf, pos).end()
            if stop >= len(buf) and not final:
                return None
            literal = buf[pos:stop].decode("ascii")
            if not NUMBER_LITERAL.match(literal):
                raise _SyntaxError(f"malformed number {literal!r}", pos)
            return _Tok.NUMBER, literal, stop

        if c in _LITERALS:
            word = _LITERALS[c]
            avail = buf[pos : pos + len(word)]
            if avail == word:
                return _KEYWORDS[word], None, pos + len(word)
            if word.startswith(avail):
                if final:
                    raise _SyntaxError("premature EOF inside literal", pos)
                return None
            raise _SyntaxError("invalid literal", pos)

        raise _SyntaxError(f"invalid char {chr(c)!r}", pos)

    def _emit(self, pos: int, method: str, *args: object) -> None:
        if getattr(self.visitor, method)(*args) is False:
            raise _Canceled(pos)

    def _handle(self, tok: _Tok, value: object, pos: int) -> None:
        state = self._stack[-1]

        if state in (_State.MAP_START, _State.MAP_NEED_KEY):
            if tok is _Tok.STRING:
                self._stack[-1] = _State.MAP_SEP
                self._emit(pos, "on_map_key", value)
                return
            if tok is _Tok.RBRACE and state is _State.MAP_START:
                self._stack.pop()
                self._emit(pos, "on_end_map")
                return
            raise _SyntaxError("object key must be a string", pos)

        if state is _State.MAP_SEP:
            if tok is not _Tok.COLON:
                raise _SyntaxError("expected ':' after object key", pos)
            self._stack[-1] = _State.MAP_NEED_VAL
            return

        if state is _State.MAP_GOT_VAL:
            if tok is _Tok.COMMA:
                self._stack[-1] = _State.MAP_NEED_KEY
            elif tok is _Tok.RBRACE:
                self._stack.pop()
                self._emit(pos, "on_end_map")
            else:
                raise _SyntaxError("expected ',' or '}' after object value", pos)
            return

        if state is _State.ARRAY_GOT_VAL:
            if tok is _Tok.COMMA:
                self._stack[-1] = _State.ARRAY_NEED_VAL
            elif tok is _Tok.RBRACK:
                self._stack.pop()
                self._emit(pos, "on_end_array")
            else:
                raise _SyntaxError("expected ',' or ']' after array element", pos)
            return

        if tok is _Tok.RBRACK and state is _State.ARRAY_START:
            self._stack.pop()
            self._emit(pos, "on_end_array")
            return

        self._value(tok, value, pos)

    def _value(self, tok: _Tok, value: object, pos: int) -> None:
        after = _AFTER_VALUE[self._stack[-1]]

        if tok is _Tok.LBRACE:
            self._stack[-1] = after
            self._stack.append(_State.MAP_START)
            self._emit(pos, "on_start_map")
        elif tok is _Tok.LBRACK:
            self._stack[-1] = after
            self._stack.append(_State.ARRAY_START)
            self._emit(pos, "on_start_array")
        elif tok is _Tok.STRING:
            self._stack[-1] = after
            self._emit(pos, "on_string", value)
        elif tok is _Tok.NUMBER:
            self._stack[-1] = after
            self._number(str(value), pos)
        elif tok is _Tok.TRUE or tok is _Tok.FALSE:
            self._stack[-1] = after
            self._emit(pos, "on_boolean", tok is _Tok.TRUE)
        elif tok is _Tok.NULL:
            self._stack[-1] = after
            self._emit(pos, "on_null")
        else:
            raise _SyntaxError(f"unexpected '{tok.value}'", pos)

    def _number(self, literal: str, pos: int) -> None:
        if self.visitor.raw_numbers:
            self._emit(pos, "on_number", literal)
        elif any(ch in literal for ch in ".eE"):
            value = float(literal)
            if math.isinf(value):
                raise _SyntaxError("numeric (floating point) overflow", pos)
            self._emit(pos, "on_double", value)
        else:
            self._emit(pos, "on_integer", int(literal))
