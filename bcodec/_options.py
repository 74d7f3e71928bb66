"""Decode options and the process-wide default depth limit.

Each decode call works from a frozen DecodeOptions.  When a caller
doesn't pass one, `decode()` builds it from the process-wide default at
call start, so a decode in flight never sees a later `set_max_depth()`.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from ._constants import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_default_max_depth: Optional[int] = DEFAULT_MAX_DEPTH


def _check_depth(n: Optional[int]) -> None:
    if n is None:
        return
    # bool is an int subclass; max_depth=True is almost certainly a bug.
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError("max depth must be a non-negative int or None, not {}".format(
            type(n).__name__))
    if n < 0:
        raise ValueError("max depth must be non-negative, got {}".format(n))


@dataclass(frozen=True)
class DecodeOptions:
    """Per-call decoder settings.

    max_depth: deepest permitted container nesting; None means unlimited.
    strict:    enforce canonical form (no leading zeros, no "-0", no empty
               integers, dict keys strictly ascending).
    """

    max_depth: Optional[int] = DEFAULT_MAX_DEPTH
    strict: bool = False

    def __post_init__(self) -> None:
        _check_depth(self.max_depth)


def get_max_depth() -> Optional[int]:
    """Return the process-wide default depth limit (None = unlimited)."""
    with _lock:
        return _default_max_depth


def set_max_depth(n: Optional[int]) -> None:
    """Replace the process-wide default depth limit.

    Only affects decode calls that start afterwards without explicit
    options.
    """
    global _default_max_depth
    _check_depth(n)
    with _lock:
        old, _default_max_depth = _default_max_depth, n
    logger.debug("default max depth changed: %s -> %s", old, n)


def default_options(strict: bool = False) -> DecodeOptions:
    """Snapshot the current default depth into a DecodeOptions."""
    return DecodeOptions(max_depth=get_max_depth(), strict=strict)
