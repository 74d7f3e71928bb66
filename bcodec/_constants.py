"""bcodec constants: token bytes, text encoding, and the default depth limit.

Grammar (over bytes):

    value      := integer | bytestring | list | dict
    integer    := 'i' '-'? digit+ 'e'
    bytestring := length ':' <length bytes>
    list       := 'l' value* 'e'
    dict       := 'd' (bytestring value)* 'e'
"""

from __future__ import annotations

from typing import Optional

# ── Token bytes ──────────────────────────────────────────────
# Indexing a bytes object yields ints, so the scanner compares against
# these rather than one-byte slices.
TOKEN_INT: int = ord("i")
TOKEN_LIST: int = ord("l")
TOKEN_DICT: int = ord("d")
TOKEN_END: int = ord("e")
TOKEN_COLON: int = ord(":")
TOKEN_MINUS: int = ord("-")
DIGIT_0: int = ord("0")
DIGIT_9: int = ord("9")

# Text values (str) are written as their UTF-8 bytes.  The decoder never
# produces str; text always comes back as bytes.
TEXT_ENCODING: str = "utf-8"

# ── Depth limit ──────────────────────────────────────────────
# Nesting of lists/dicts only; scalars never count.  None disables the
# check entirely.
DEFAULT_MAX_DEPTH: int = 5000
UNLIMITED: Optional[int] = None

# ── Long integers ────────────────────────────────────────────
# Decimal text <-> int conversions are done in pieces of at most this many
# digits.  That stays under the interpreter's int/str digit limit (4300 on
# 3.11+) and keeps huge values subquadratic.
INT_CHUNK_DIGITS: int = 4000
