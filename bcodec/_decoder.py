"""bcodec decoder: bytes -> value tree.

The decoder is an explicit-stack state machine, not a recursive descent
parser, so nesting depth is bounded only by `max_depth` and memory, never
by the interpreter's recursion limit.

State while decoding:

    current  the innermost open container (None at top level)
    stack    the containers enclosing `current`, outermost first

so the nesting depth is `len(stack) + 1` whenever `current` is set.  A
new container is attached to its parent at the moment it opens; closing
it is just a pop.  That is why the depth check happens on open.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional

from ._constants import (
    DIGIT_0,
    DIGIT_9,
    INT_CHUNK_DIGITS,
    TOKEN_COLON,
    TOKEN_DICT,
    TOKEN_END,
    TOKEN_INT,
    TOKEN_LIST,
    TOKEN_MINUS,
)
from ._errors import (
    ERR_DICT_KEY_NOT_STRING,
    ERR_DUP_KEY,
    ERR_INVALID_STRING_LENGTH,
    ERR_KEY_ORDER,
    ERR_MALFORMED_INTEGER,
    ERR_STRUCTURE_TOO_DEEP,
    ERR_TRAILING_GARBAGE,
    ERR_UNEXPECTED_CONTAINER_END,
    ERR_UNEXPECTED_INTEGER_END,
    ERR_UNEXPECTED_STRING_END,
    ERR_UNKNOWN_ELEMENT_TYPE,
    DecodeError,
)
from ._options import DecodeOptions

# Canonical integer body: no leading zeros, no "-0", at least one digit.
_CANONICAL_INT = re.compile(rb"0|-?[1-9][0-9]*")


# ── Cursor ───────────────────────────────────────────────────

class _Cursor:
    """Read position over an immutable buffer.  Never reads past the end."""

    __slots__ = ("data", "pos", "end")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0
        self.end = len(data)

    @property
    def remaining(self) -> int:
        return self.end - self.pos

    def peek(self) -> Optional[int]:
        if self.pos >= self.end:
            return None
        return self.data[self.pos]

    def advance(self, n: int = 1) -> None:
        if n > self.remaining:
            raise IndexError("cursor advanced past end of input")
        self.pos += n

    def take(self, n: int) -> bytes:
        if n > self.remaining:
            raise IndexError("cursor read past end of input")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk


def parse_signed_integer(cur: _Cursor) -> int:
    """Consume an optional '-' and a run of ASCII digits; return the value.

    No validation happens here: an empty digit run gives 0 and leaves the
    cursor on whatever followed.  Callers check terminators and, in strict
    mode, the digit text itself.
    """
    sign = 1
    if cur.peek() == TOKEN_MINUS:
        sign = -1
        cur.advance()
    return sign * _digits_value(_scan_digits(cur))


def _scan_digits(cur: _Cursor) -> bytes:
    """Consume a (possibly empty) run of ASCII digits and return it."""
    data = cur.data
    start = pos = cur.pos
    while pos < cur.end and DIGIT_0 <= data[pos] <= DIGIT_9:
        pos += 1
    cur.pos = pos
    return data[start:pos]


def _digits_value(digits: bytes) -> int:
    """Value of a run of ASCII digits; the empty run is 0.

    Long runs are split in half and recombined, so no single int() call
    sees more than INT_CHUNK_DIGITS digits.
    """
    if len(digits) <= INT_CHUNK_DIGITS:
        return int(digits) if digits else 0
    k = len(digits) // 2
    return _digits_value(digits[:-k]) * 10 ** k + _digits_value(digits[-k:])


# ── Scalars ──────────────────────────────────────────────────

def _read_integer(cur: _Cursor, strict: bool) -> int:
    cur.advance()  # 'i'
    body_start = cur.pos
    val = parse_signed_integer(cur)

    c = cur.peek()
    if c is None:
        raise DecodeError(ERR_UNEXPECTED_INTEGER_END, cur.pos, None,
                          "unexpected integer end")
    if c != TOKEN_END:
        raise DecodeError(ERR_MALFORMED_INTEGER, cur.pos, c, "malformed integer")

    # Lenient mode keeps "ie", "i-e", "i03e" and "i-0e" (the first two as 0).
    if strict and not _CANONICAL_INT.fullmatch(cur.data, body_start, cur.pos):
        raise DecodeError(ERR_MALFORMED_INTEGER, body_start, cur.data[body_start],
                          "non-canonical integer")
    cur.advance()
    return val


def _read_bytestring(cur: _Cursor, strict: bool) -> bytes:
    start = cur.pos
    digits = _scan_digits(cur)

    if strict and len(digits) > 1 and digits[0] == DIGIT_0:
        raise DecodeError(ERR_INVALID_STRING_LENGTH, start, cur.data[start],
                          "leading zero in string length")

    c = cur.peek()
    if c is not None and c != TOKEN_COLON:
        raise DecodeError(ERR_INVALID_STRING_LENGTH, cur.pos, c,
                          "invalid string length")

    # A length with more significant digits than the input size has
    # cannot fit, however long the digit run is.
    digits = digits.lstrip(b"0")
    if len(digits) > len(str(cur.remaining)):
        raise DecodeError(ERR_UNEXPECTED_STRING_END, start, None,
                          "unexpected string end ({}-digit length, {} bytes available)".format(
                              len(digits), max(cur.remaining - 1, 0)))
    length = _digits_value(digits)
    if cur.remaining < length + 1:
        raise DecodeError(ERR_UNEXPECTED_STRING_END, start, None,
                          "unexpected string end ({} bytes declared, {} available)".format(
                              length, max(cur.remaining - 1, 0)))

    cur.advance()  # ':'
    return cur.take(length)


# ── Containers ───────────────────────────────────────────────

class _Frame:
    """An open list or dict, plus the dict key waiting for its value."""

    __slots__ = ("container", "key", "last_key")

    def __init__(self, container: Any) -> None:
        self.container = container
        self.key: Optional[bytes] = None
        self.last_key: Optional[bytes] = None  # strict mode ordering


def _attach(frame: _Frame, value: Any, offset: int, cur: _Cursor, strict: bool) -> None:
    """Put a freshly produced value into the current container."""
    container = frame.container
    if isinstance(container, list):
        container.append(value)
        return

    if frame.key is None:
        if not isinstance(value, bytes):
            raise DecodeError(ERR_DICT_KEY_NOT_STRING, offset, cur.data[offset],
                              "dictionary key is not a string")
        if strict and frame.last_key is not None:
            # bytes comparison is unsigned-octet memcmp with the
            # shorter-prefix-first rule, which is what canonical form wants.
            if value == frame.last_key:
                raise DecodeError(ERR_DUP_KEY, offset, cur.data[offset],
                                  "duplicate dictionary key")
            if value < frame.last_key:
                raise DecodeError(ERR_KEY_ORDER, offset, cur.data[offset],
                                  "dictionary keys out of order")
        frame.key = value
        return

    # Last write wins; the key keeps its first position.
    container[frame.key] = value
    frame.last_key = frame.key
    frame.key = None


# ── Entry point ──────────────────────────────────────────────

def decode_bytes(data: bytes, options: DecodeOptions) -> Any:
    """Decode exactly one value from `data`.

    Returns None for empty input.  Raises DecodeError on anything else
    that is not a single well-formed value.
    """
    cur = _Cursor(data)
    if not cur.remaining:
        return None

    max_depth = options.max_depth
    strict = options.strict
    stack: List[_Frame] = []
    current: Optional[_Frame] = None
    result: Any = None

    while cur.remaining:
        start = cur.pos
        c = data[start]
        frame: Optional[_Frame] = None

        if c == TOKEN_END:
            if current is None:
                raise DecodeError(ERR_UNEXPECTED_CONTAINER_END, start, c,
                                  "unexpected container end")
            if current.key is not None:
                raise DecodeError(ERR_UNEXPECTED_CONTAINER_END, start, c,
                                  "dictionary key without a value")
            cur.advance()
            current = stack.pop() if stack else None
            if current is None:
                break  # root container closed
            continue

        if c == TOKEN_LIST or c == TOKEN_DICT:
            depth = len(stack) + 2 if current is not None else 1
            if max_depth is not None and depth > max_depth:
                raise DecodeError(ERR_STRUCTURE_TOO_DEEP, start, c,
                                  "structure nested deeper than {}".format(max_depth))
            cur.advance()
            value: Any = [] if c == TOKEN_LIST else {}
            frame = _Frame(value)
        elif c == TOKEN_INT:
            value = _read_integer(cur, strict)
        elif DIGIT_0 <= c <= DIGIT_9:
            value = _read_bytestring(cur, strict)
        else:
            raise DecodeError(ERR_UNKNOWN_ELEMENT_TYPE, start, c, "unknown element type")

        if current is None:
            result = value
            if frame is None:
                break  # scalar root
            current = frame
            continue

        _attach(current, value, start, cur, strict)
        if frame is not None:
            stack.append(current)
            current = frame
    else:
        if current is not None:
            raise DecodeError(ERR_UNEXPECTED_CONTAINER_END, cur.pos, None,
                              "input ended inside an open container")

    if cur.remaining:
        raise DecodeError(ERR_TRAILING_GARBAGE, cur.pos, cur.peek(),
                          "garbage after the end of the value")
    return result
