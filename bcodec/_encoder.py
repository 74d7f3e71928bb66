"""bcodec encoder: value tree -> bytes.

Serialization rules:

    int            i<decimal>e
    bytes / str    <len>:<raw bytes>      (str is written as UTF-8)
    list / tuple   l<items>e
    dict           d<key><value>...e      (insertion order unless sort_keys)

The walk is depth-first with an explicit stack of child iterators, so
anything the decoder can build with the depth limit switched off can be
written back out.
"""

from __future__ import annotations

from operator import itemgetter
from typing import Any, Iterator, List, Set, Tuple

from ._constants import INT_CHUNK_DIGITS, TEXT_ENCODING
from ._errors import (
    ERR_CIRCULAR_REFERENCE,
    ERR_NON_STRING_KEY,
    ERR_UNSUPPORTED_TYPE,
    EncodeError,
)


def _text_bytes(val: str) -> bytes:
    try:
        return val.encode(TEXT_ENCODING)
    except UnicodeEncodeError:
        raise EncodeError(ERR_UNSUPPORTED_TYPE,
                          "str is not encodable as {}".format(TEXT_ENCODING))


_CHUNK_LIMIT = 10 ** INT_CHUNK_DIGITS


def _decimal(val: int) -> bytes:
    """Decimal digits of `val`, however many there are.

    Values of INT_CHUNK_DIGITS digits or more are split around a power of
    ten close to half their length, and the pieces formatted separately.
    """
    if val < 0:
        return b"-" + _decimal(-val)
    if val < _CHUNK_LIMIT:
        return b"%d" % val
    # log10(2) lower bound, so 10**k never exceeds val.
    k = int(val.bit_length() * 0.30102) // 2
    hi, lo = divmod(val, 10 ** k)
    return _decimal(hi) + _decimal(lo).rjust(k, b"0")


def _encode_scalar(val: Any) -> bytes:
    # ── bool must be checked before int ──────────────────────
    # bool subclasses int, so True would otherwise go out as i1e.
    # bencode has no booleans; callers must pick 0/1 themselves.
    if isinstance(val, bool):
        raise EncodeError(ERR_UNSUPPORTED_TYPE, "cannot bencode bool")

    if isinstance(val, int):
        return b"i%se" % _decimal(val)

    if isinstance(val, (bytes, bytearray, memoryview)):
        raw = bytes(val)
        return b"%d:%s" % (len(raw), raw)

    if isinstance(val, str):
        raw = _text_bytes(val)
        return b"%d:%s" % (len(raw), raw)

    raise EncodeError(ERR_UNSUPPORTED_TYPE,
                      "cannot bencode {}".format(type(val).__name__))


def _key_bytes(key: Any) -> bytes:
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    if isinstance(key, str):
        return _text_bytes(key)
    raise EncodeError(ERR_NON_STRING_KEY,
                      "dictionary keys must be bytes or str, not {}".format(type(key).__name__))


def _dict_children(val: dict, sort_keys: bool) -> Iterator[Any]:
    """Yield key, value, key, value... for one dict.

    Keys are normalized up front so a bad key fails before anything
    from this dict is emitted.
    """
    pairs = [(_key_bytes(k), v) for k, v in val.items()]
    if sort_keys:
        pairs.sort(key=itemgetter(0))
    for kb, v in pairs:
        yield kb
        yield v


def encode_value(value: Any, sort_keys: bool = False) -> bytes:
    """Serialize `value`; raise EncodeError on anything not bencodable."""
    parts: List[bytes] = []
    stack: List[Tuple[Iterator[Any], int]] = []
    open_ids: Set[int] = set()
    item = value

    while True:
        if isinstance(item, (list, tuple, dict)):
            ident = id(item)
            if ident in open_ids:
                raise EncodeError(ERR_CIRCULAR_REFERENCE,
                                  "{} contains itself".format(type(item).__name__))
            if isinstance(item, dict):
                parts.append(b"d")
                children = _dict_children(item, sort_keys)
            else:
                parts.append(b"l")
                children = iter(item)
            open_ids.add(ident)
            stack.append((children, ident))
        else:
            parts.append(_encode_scalar(item))

        # Find the next item to write, closing every container that has
        # run out on the way.
        while stack:
            children, ident = stack[-1]
            try:
                item = next(children)
                break
            except StopIteration:
                stack.pop()
                open_ids.discard(ident)
                parts.append(b"e")
        else:
            return b"".join(parts)
