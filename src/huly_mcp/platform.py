"""Vocabulary shared with the Huly platform: references, enums, ids and ranks."""
import enum
import itertools
import os
import secrets
import time
from typing import Optional


class Ref(str):
    """An opaque identifier owned by the remote store.

    Values read back from remote records (``_id``, ``_class``, ``space``) are
    wrapped in ``Ref`` so the bridge passes them through without resolving them
    as class paths.
    """

    __slots__ = ()


class ClassRef(Ref):
    """A reference to a remote document class, space or mixin."""

    __slots__ = ()


class SortingOrder(enum.IntEnum):
    """Sort direction understood by ``find_all`` options."""
    ASCENDING = 1
    DESCENDING = -1


class IssuePriority(enum.IntEnum):
    """Issue priorities as stored by the tracker."""
    NO_PRIORITY = 0
    URGENT = 1
    HIGH = 2
    MEDIUM = 3
    LOW = 4


# Tool-facing priority names -> stored priority
PRIORITY_BY_NAME: dict[str, IssuePriority] = {
    "Urgent": IssuePriority.URGENT,
    "High": IssuePriority.HIGH,
    "Normal": IssuePriority.MEDIUM,
    "Low": IssuePriority.LOW,
}


_id_counter = itertools.count(secrets.randbelow(0xFFFFFF))
_process_marker = f"{secrets.randbits(24):06x}{os.getpid() & 0xFFFF:04x}"


def generate_id() -> Ref:
    """Generate a fresh document id (24 hex chars: time, process, counter)."""
    timestamp = int(time.time()) & 0xFFFFFFFF
    counter = next(_id_counter) & 0xFFFFFF
    return Ref(f"{timestamp:08x}{_process_marker}{counter:06x}")


# Printable ASCII, '!' .. '~'
_RANK_MIN = 0x21
_RANK_BASE = 0x7E - _RANK_MIN + 1


def _rank_digit(rank: Optional[str], index: int, default: int) -> int:
    if rank is None or index >= len(rank):
        return default
    return min(max(ord(rank[index]) - _RANK_MIN, 0), _RANK_BASE - 1)


def make_rank(prev: Optional[str] = None, next: Optional[str] = None) -> str:
    """Return a rank string that sorts strictly between ``prev`` and ``next``.

    Either bound may be None (unbounded). Ranks are compared as plain strings,
    the same way the tracker orders issues.
    """
    result = []
    index = 0
    upper = next
    while True:
        low = _rank_digit(prev, index, 0)
        high = _rank_digit(upper, index, _RANK_BASE)
        if high - low > 1:
            result.append(chr(_RANK_MIN + (low + high) // 2))
            return "".join(result)
        result.append(chr(_RANK_MIN + low))
        if high > low:
            # The prefix is already below the upper bound.
            upper = None
        index += 1
