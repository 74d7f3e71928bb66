"""bcodec error codes and exception classes.

Every failure carries a `.code` string from the tables below.  Decode
failures also carry the byte offset of the offending token and, when the
input had not run out, the offending byte itself.  Any error aborts the
whole call; no partial value is ever returned.
"""

from __future__ import annotations

from typing import Optional

# ── Decode error codes ───────────────────────────────────────

ERR_UNEXPECTED_INTEGER_END: str = "ERR_UNEXPECTED_INTEGER_END"      # input ended inside i...e
ERR_MALFORMED_INTEGER: str = "ERR_MALFORMED_INTEGER"                # something other than 'e' after digits
ERR_INVALID_STRING_LENGTH: str = "ERR_INVALID_STRING_LENGTH"        # length not followed by ':'
ERR_UNEXPECTED_STRING_END: str = "ERR_UNEXPECTED_STRING_END"        # declared length overruns input
ERR_UNKNOWN_ELEMENT_TYPE: str = "ERR_UNKNOWN_ELEMENT_TYPE"          # byte that starts no token
ERR_DICT_KEY_NOT_STRING: str = "ERR_DICT_KEY_NOT_STRING"            # dict key is not a byte string
ERR_UNEXPECTED_CONTAINER_END: str = "ERR_UNEXPECTED_CONTAINER_END"  # stray 'e' or unterminated container
ERR_STRUCTURE_TOO_DEEP: str = "ERR_STRUCTURE_TOO_DEEP"              # nesting exceeds max_depth
ERR_TRAILING_GARBAGE: str = "ERR_TRAILING_GARBAGE"                  # bytes left after the root value

# Strict (canonical form) decoding only.
ERR_KEY_ORDER: str = "ERR_KEY_ORDER"  # dict keys not in ascending byte order
ERR_DUP_KEY: str = "ERR_DUP_KEY"      # dict key repeated

# ── Encode error codes ───────────────────────────────────────

ERR_UNSUPPORTED_TYPE: str = "ERR_UNSUPPORTED_TYPE"
ERR_NON_STRING_KEY: str = "ERR_NON_STRING_KEY"
ERR_CIRCULAR_REFERENCE: str = "ERR_CIRCULAR_REFERENCE"

DECODE_ERRORS = (
    ERR_UNEXPECTED_INTEGER_END,
    ERR_MALFORMED_INTEGER,
    ERR_INVALID_STRING_LENGTH,
    ERR_UNEXPECTED_STRING_END,
    ERR_UNKNOWN_ELEMENT_TYPE,
    ERR_DICT_KEY_NOT_STRING,
    ERR_UNEXPECTED_CONTAINER_END,
    ERR_STRUCTURE_TOO_DEEP,
    ERR_TRAILING_GARBAGE,
    ERR_KEY_ORDER,
    ERR_DUP_KEY,
)

ENCODE_ERRORS = (
    ERR_UNSUPPORTED_TYPE,
    ERR_NON_STRING_KEY,
    ERR_CIRCULAR_REFERENCE,
)


class BencodeError(Exception):
    """Base class for bcodec failures.

    The `.code` attribute is one of the ERR_* strings above and is what
    tests and callers should compare against.
    """

    def __init__(self, code: str, msg: str = "") -> None:
        super().__init__(msg or code)
        self.code = code


class DecodeError(BencodeError, ValueError):
    """Malformed or disallowed bencode input.

    `offset` is the index of the offending token in the original input
    (its length when the input ran out); `byte` is the byte found there,
    or None at end of input.
    """

    def __init__(self, code: str, offset: int, byte: Optional[int] = None,
                 msg: str = "") -> None:
        text = "{} at byte {}".format(msg or code, offset)
        if byte is not None:
            text += ": {!r}".format(chr(byte))
        super().__init__(code, text)
        self.offset = offset
        self.byte = byte


class EncodeError(BencodeError, TypeError):
    """Value outside the four bencode kinds (or a bad dict key)."""
