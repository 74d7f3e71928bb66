"""Bencode value <-> JSON mapping, used by the command-line tool.

Type mapping:
    bencode integer     <-> JSON integer
    bencode byte string <-> JSON string
    bencode list        <-> JSON array
    bencode dict        <-> JSON object
    JSON true/false/null/float -> EncodeError (bencode has none of them)

Byte strings are not guaranteed to be text.  They are turned into str
with UTF-8 and the `surrogateescape` error handler, so undecodable bytes
become lone surrogates U+DC80..U+DCFF.  `json.dumps` writes those as
\\udcXX escapes and `json.loads` reads them back, so the mapping is
lossless in both directions:

    >>> value_to_json(b"caf\\xc3\\xa9 \\xff")
    'café \\udcff'
    >>> json_to_value('café \\udcff')
    b'caf\\xc3\\xa9 \\xff'

Both walks are iterative, like the codec itself.
"""

from __future__ import annotations

from typing import Any, Callable, List, Tuple

from ._constants import TEXT_ENCODING
from ._errors import ERR_UNSUPPORTED_TYPE, EncodeError

_ERRORS = "surrogateescape"


def _text(b: bytes) -> str:
    return b.decode(TEXT_ENCODING, _ERRORS)


def _raw(s: str) -> bytes:
    try:
        return s.encode(TEXT_ENCODING, _ERRORS)
    except UnicodeEncodeError:
        # A surrogate outside U+DC80..U+DCFF can't stand for a byte.
        raise EncodeError(ERR_UNSUPPORTED_TYPE, "string holds an unpaired surrogate")


def _convert(root: Any, scalar: Callable[[Any], Any], key: Callable[[Any], Any]) -> Any:
    """Rebuild a list/dict tree bottom-up without recursion.

    `scalar` maps leaves, `key` maps dict keys.  Each stack entry is a
    source container paired with the output container being filled.
    """
    def fresh(src: Any) -> Tuple[Any, Any]:
        if isinstance(src, dict):
            return src, {}
        if isinstance(src, (list, tuple)):
            return src, []
        return src, None

    src, out = fresh(root)
    if out is None:
        return scalar(root)

    pending: List[Tuple[Any, Any]] = [(src, out)]
    while pending:
        src, out = pending.pop()
        if isinstance(src, dict):
            for k, v in src.items():
                child_src, child_out = fresh(v)
                out[key(k)] = scalar(v) if child_out is None else child_out
                if child_out is not None:
                    pending.append((child_src, child_out))
        else:
            for v in src:
                child_src, child_out = fresh(v)
                out.append(scalar(v) if child_out is None else child_out)
                if child_out is not None:
                    pending.append((child_src, child_out))
    return out


def _bencode_scalar_to_json(val: Any) -> Any:
    if isinstance(val, (bytes, bytearray, memoryview)):
        return _text(bytes(val))
    return val


def _bencode_key_to_json(key: Any) -> str:
    if isinstance(key, (bytes, bytearray, memoryview)):
        return _text(bytes(key))
    return key


def _json_scalar_to_bencode(val: Any) -> Any:
    # bool before int: json.loads gives True/False for true/false.
    if isinstance(val, bool) or val is None or isinstance(val, float):
        raise EncodeError(ERR_UNSUPPORTED_TYPE,
                          "JSON {} has no bencode equivalent".format(
                              "null" if val is None else type(val).__name__))
    if isinstance(val, str):
        return _raw(val)
    if isinstance(val, int):
        return val
    raise EncodeError(ERR_UNSUPPORTED_TYPE, "unexpected JSON value {}".format(
        type(val).__name__))


def value_to_json(value: Any) -> Any:
    """Map a decoded bencode value to a json.dumps()-ready object."""
    return _convert(value, _bencode_scalar_to_json, _bencode_key_to_json)


def json_to_value(obj: Any) -> Any:
    """Map a json.loads() result to a bencode value (bytes for all text)."""
    return _convert(obj, _json_scalar_to_bencode, _raw)
