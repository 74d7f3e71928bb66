"""bcodec: bencode encoder/decoder.

Bencode is the BitTorrent serialization format: integers, byte strings,
lists, and dicts with byte-string keys.

Quick start:
    >>> from bcodec import decode, encode
    >>> decode(b"d3:cow3:moo4:spam4:eggse")
    {b'cow': b'moo', b'spam': b'eggs'}
    >>> encode({"spam": [1, -2, b"eggs"]})
    b'd4:spamli1ei-2e4:eggsee'

Decoding is iterative and depth-limited (5000 levels by default), so
hostile input can't blow the stack:
    >>> decode(b"l" * 3 + b"e" * 3, DecodeOptions(max_depth=2))
    Traceback (most recent call last):
      ...
    bcodec._errors.DecodeError: structure nested deeper than 2 at byte 2: 'l'
"""

from __future__ import annotations

import logging
import os
from typing import Any, BinaryIO, Optional, Union

from ._constants import DEFAULT_MAX_DEPTH, UNLIMITED
from ._decoder import decode_bytes
from ._encoder import encode_value
from ._errors import (
    ERR_CIRCULAR_REFERENCE,
    ERR_DICT_KEY_NOT_STRING,
    ERR_DUP_KEY,
    ERR_INVALID_STRING_LENGTH,
    ERR_KEY_ORDER,
    ERR_MALFORMED_INTEGER,
    ERR_NON_STRING_KEY,
    ERR_STRUCTURE_TOO_DEEP,
    ERR_TRAILING_GARBAGE,
    ERR_UNEXPECTED_CONTAINER_END,
    ERR_UNEXPECTED_INTEGER_END,
    ERR_UNEXPECTED_STRING_END,
    ERR_UNKNOWN_ELEMENT_TYPE,
    ERR_UNSUPPORTED_TYPE,
    BencodeError,
    DecodeError,
    EncodeError,
)
from ._options import DecodeOptions, default_options, get_max_depth, set_max_depth

__version__ = "1.0.0"

__all__ = [
    # Public API functions
    "decode",
    "decode_file",
    "encode",
    # Configuration
    "DecodeOptions",
    "get_max_depth",
    "set_max_depth",
    "DEFAULT_MAX_DEPTH",
    "UNLIMITED",
    # Exceptions
    "BencodeError",
    "DecodeError",
    "EncodeError",
    # Error codes
    "ERR_UNEXPECTED_INTEGER_END",
    "ERR_MALFORMED_INTEGER",
    "ERR_INVALID_STRING_LENGTH",
    "ERR_UNEXPECTED_STRING_END",
    "ERR_UNKNOWN_ELEMENT_TYPE",
    "ERR_DICT_KEY_NOT_STRING",
    "ERR_UNEXPECTED_CONTAINER_END",
    "ERR_STRUCTURE_TOO_DEEP",
    "ERR_TRAILING_GARBAGE",
    "ERR_KEY_ORDER",
    "ERR_DUP_KEY",
    "ERR_UNSUPPORTED_TYPE",
    "ERR_NON_STRING_KEY",
    "ERR_CIRCULAR_REFERENCE",
]

logger = logging.getLogger(__name__)

Source = Union[str, "os.PathLike[str]", BinaryIO]


# ── Core API ──────────────────────────────────────────────────

def decode(data: Union[bytes, bytearray, memoryview],
           options: Optional[DecodeOptions] = None) -> Any:
    """Decode one bencoded value.

    Returns int, bytes, list or dict (with bytes keys), or None when
    `data` is empty.  Raises DecodeError for malformed input, trailing
    bytes, or nesting beyond the depth limit.

    Without `options`, the process-wide default depth (see
    set_max_depth) is read once here and used for the whole call.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("decode expects bytes, not {}".format(type(data).__name__))
    if options is None:
        options = default_options()
    return decode_bytes(bytes(data), options)


def encode(value: Any, sort_keys: bool = False) -> bytes:
    """Encode a value as bencode.

    Accepts int (not bool), bytes-like, str (written as UTF-8), list,
    tuple and dict with bytes/str keys.  Dict keys go out in insertion
    order; pass sort_keys=True for canonical (byte-sorted) output.
    """
    return encode_value(value, sort_keys)


def decode_file(source: Source, options: Optional[DecodeOptions] = None) -> Any:
    """Read a whole file (path or binary file object) and decode it.

    I/O errors propagate unchanged; only the decode step raises
    DecodeError.
    """
    if hasattr(source, "read"):
        data = source.read()  # type: ignore[union-attr]
        name = getattr(source, "name", repr(source))
    else:
        name = os.fspath(source)
        with open(name, "rb") as f:
            data = f.read()
    logger.debug("read %d bytes from %s", len(data), name)
    return decode(data, options)
