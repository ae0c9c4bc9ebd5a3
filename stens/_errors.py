"""Strict encoding error codes and exception classes.

Every failure raised by this package is a `StrictError`.  The `.code`
attribute is one of the ERR_* strings below; the subclasses additionally
carry the offending values so callers can tell exactly which invariant
broke.  The stream verifier never raises these for bad input; it
collapses every failure into ``False``.
"""

from __future__ import annotations

from typing import Optional

from ._constants import STRICT_COLLECTION_MAX_LEN

# ── Error codes ──────────────────────────────────────────────

ERR_OVERSIZE: str = "ERR_OVERSIZE"              # length above the maximum
ERR_UNDERSIZE: str = "ERR_UNDERSIZE"            # length below min_len
ERR_INVALID_CHAR: str = "ERR_INVALID_CHAR"      # non-ASCII byte in ASCII string
ERR_INDEX_BOUNDS: str = "ERR_INDEX_BOUNDS"      # removal/insertion index
ERR_REPEATED_VALUE: str = "ERR_REPEATED_VALUE"  # duplicate set element / map key
ERR_OUT_OF_RANGE: str = "ERR_OUT_OF_RANGE"      # decoded value outside its range
ERR_UTF8: str = "ERR_UTF8"                      # invalid UTF-8 payload
ERR_EOF: str = "ERR_EOF"                        # stream ended early
ERR_TRAILING: str = "ERR_TRAILING"              # bytes left after the value
ERR_SCHEMA: str = "ERR_SCHEMA"                  # malformed type schema


class StrictError(Exception):
    """Base exception for strict encoding errors.

    The `.code` attribute is one of the ERR_* strings above.
    """

    def __init__(self, code: str, msg: str = "") -> None:
        super().__init__(msg or code)
        self.code = code


class OversizeError(StrictError):
    def __init__(self, length: int, max_len: int = STRICT_COLLECTION_MAX_LEN) -> None:
        super().__init__(
            ERR_OVERSIZE,
            "operation results in collection size {} exceeding {:#06X}, "
            "which is prohibited".format(length, max_len),
        )
        self.len = length
        self.max_len = max_len


class UndersizeError(StrictError):
    def __init__(self, length: int, min_len: int) -> None:
        super().__init__(
            ERR_UNDERSIZE,
            "operation results in collection size {} less than lower boundary "
            "of {}, which is prohibited".format(length, min_len),
        )
        self.len = length
        self.min_len = min_len


class InvalidCharError(StrictError):
    def __init__(self, byte: int) -> None:
        super().__init__(
            ERR_INVALID_CHAR,
            "non-ASCII character {:#04x} in ASCII-only string".format(byte),
        )
        self.byte = byte


class IndexOutOfBoundsError(StrictError):
    def __init__(self, index: int, length: int) -> None:
        super().__init__(
            ERR_INDEX_BOUNDS,
            "index {} is out of bounds of the collection size {}".format(index, length),
        )
        self.index = index
        self.len = length


class RepeatedValueError(StrictError):
    def __init__(self, detail: str) -> None:
        super().__init__(ERR_REPEATED_VALUE, detail)
        self.detail = detail


class OutOfRangeError(StrictError):
    """A decoded or encoded value lies outside ``lo..hi`` (``hi`` exclusive)."""

    def __init__(self, what: str, lo: int, hi: int, value: int) -> None:
        super().__init__(
            ERR_OUT_OF_RANGE,
            "{} {} is out of range {}..{}".format(what, value, lo, hi),
        )
        self.what = what
        self.lo = lo
        self.hi = hi
        self.value = value


class Utf8Error(StrictError):
    def __init__(self, msg: str = "invalid utf-8") -> None:
        super().__init__(ERR_UTF8, msg)


class UnexpectedEofError(StrictError):
    def __init__(self, wanted: int, got: int) -> None:
        super().__init__(
            ERR_EOF,
            "unexpected end of stream: wanted {} bytes, got {}".format(wanted, got),
        )
        self.wanted = wanted
        self.got = got


class DataNotEntirelyConsumedError(StrictError):
    def __init__(self, remaining: Optional[int] = None) -> None:
        msg = "data were not entirely consumed"
        if remaining is not None:
            msg += " ({} trailing bytes)".format(remaining)
        super().__init__(ERR_TRAILING, msg)
        self.remaining = remaining


class SchemaError(StrictError):
    def __init__(self, msg: str) -> None:
        super().__init__(ERR_SCHEMA, msg)


# Groupings matching the operations that raise them; usable in `except`.
CollectionError = (OversizeError, UndersizeError)
AsciiStringError = (OversizeError, UndersizeError, InvalidCharError)
RemoveError = (UndersizeError, IndexOutOfBoundsError)
