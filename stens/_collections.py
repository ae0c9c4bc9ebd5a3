"""Bounded strict collections: StrictVec, StrictSet, StrictMap, StrictStr, AsciiString.

Each collection carries a minimum length (and, for ASCII strings, a
maximum) as part of its *type*.  ``StrictVec.of(U8, min_len=2)`` returns a
cached subclass with those bounds baked in, so two call sites asking for the
same bounds share one class and a value can never change its bounds after
construction.

Size rules, shared by the whole family:

    construction: min_len <= len <= 0xFFFF (ASCII: <= max_len), else
                  OversizeError / UndersizeError; ASCII also scans bytes
    push/insert:  OversizeError if the count *before* growth exceeds 0xFFFF
    remove:       UndersizeError if already at min_len, even when the
                  target is absent
    decode:       u16 count; below min_len is ERR_OUT_OF_RANGE; set/map
                  reject repeats with RepeatedValueError

Sets and maps key their entries by the element's serialized bytes.
Iteration and encoding both follow canonical order (byte-lexicographic
order of the serialized form), which is exactly what the stream verifier
demands for SetType/MapType.  Decoding checks uniqueness only: a set read
from the wire out of canonical order is accepted here and rejected by the
verifier.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from functools import lru_cache
from typing import Any, BinaryIO, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ._codec import (
    StrictEncoding,
    codec_name,
    read_exact,
    read_len,
    strict_serialize,
    write_len,
)
from ._constants import STRICT_COLLECTION_MAX_LEN
from ._errors import (
    IndexOutOfBoundsError,
    InvalidCharError,
    OutOfRangeError,
    OversizeError,
    RepeatedValueError,
    StrictError,
    UndersizeError,
    Utf8Error,
)

_MISSING = object()


# ── Bound helpers ────────────────────────────────────────────

def _check_bounds(length: int, min_len: int,
                  max_len: int = STRICT_COLLECTION_MAX_LEN) -> None:
    # Oversize wins over undersize, matching the order of the checks at
    # construction time.
    if length > max_len:
        raise OversizeError(length, max_len)
    if length < min_len:
        raise UndersizeError(length, min_len)


def _check_growth(length: int) -> None:
    # Compares the pre-growth count: a collection holding 0xFFFF items
    # accepts one more, and only the following call is refused.
    if length > STRICT_COLLECTION_MAX_LEN:
        raise OversizeError(length)


def _check_shrink(length: int, min_len: int) -> None:
    if length <= min_len:
        raise UndersizeError(length, min_len)


def _check_decoded_len(what: str, length: int, min_len: int,
                       max_len: int = STRICT_COLLECTION_MAX_LEN) -> None:
    if length < min_len or length > max_len:
        raise OutOfRangeError(what, min_len, max_len + 1, length)


def _check_min_len(min_len: int) -> None:
    if not 0 <= min_len <= STRICT_COLLECTION_MAX_LEN:
        raise ValueError("min_len must be within 0..0xFFFF, got {}".format(min_len))


def _param_repr(value: Any) -> str:
    return str(value) if isinstance(value, int) else codec_name(value)


@lru_cache(maxsize=None)
def _specialize(base: type, params: Tuple[Tuple[str, Any], ...]) -> type:
    """Create (once) the subclass of `base` with `params` as class attributes."""
    name = "{}[{}]".format(base.__name__, ", ".join(_param_repr(v) for _, v in params))
    namespace: Dict[str, Any] = dict(params)
    namespace["__slots__"] = ()
    namespace["__module__"] = base.__module__
    namespace["__qualname__"] = name
    return type(base)(name, (base,), namespace)


def _codec_attr(cls: type, attr: str) -> Any:
    codec = getattr(cls, attr)
    if codec is None:
        raise TypeError("{} has no {} codec; create the type with {}.of(...)".format(
            cls.__name__, attr, cls.__name__))
    return codec


class _Bounded(StrictEncoding):
    """Shared construction entry points for the whole family."""

    __slots__ = ()

    min_len: int = 0

    @classmethod
    def new(cls) -> Any:
        """Return the empty collection.  Only defined when min_len is 0."""
        if cls.min_len != 0:
            raise TypeError("{}.new() requires min_len == 0; use try_from()".format(
                cls.__name__))
        return cls()

    @classmethod
    def try_from(cls, raw: Any) -> Any:
        """Validate `raw` against the bounds of this type and wrap it."""
        return cls(raw)

    __hash__ = None  # type: ignore[assignment]


# ── StrictVec ────────────────────────────────────────────────

class StrictVec(_Bounded, Sequence):
    """Ordered, length-bounded sequence.  Duplicates are allowed."""

    __slots__ = ("_items",)

    element: Any = None

    @classmethod
    def of(cls, element: Any, min_len: int = 0) -> type:
        _check_min_len(min_len)
        return _specialize(StrictVec, (("element", element), ("min_len", min_len)))

    def __init__(self, items: Iterable[Any] = ()) -> None:
        items = list(items)
        _check_bounds(len(items), self.min_len)
        self._items: List[Any] = items

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: Any) -> Any:
        return self._items[index]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._items == other._items  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        return "{}({!r})".format(type(self).__name__, self._items)

    def to_list(self) -> List[Any]:
        return list(self._items)

    def push(self, item: Any) -> int:
        """Append `item` and return the count before the append."""
        length = len(self._items)
        _check_growth(length)
        self._items.append(item)
        return length

    def insert(self, index: int, item: Any) -> int:
        length = len(self._items)
        _check_growth(length)
        if not 0 <= index <= length:
            raise IndexOutOfBoundsError(index, length)
        self._items.insert(index, item)
        return length

    def remove(self, index: int) -> Any:
        """Remove and return the element at `index`.

        The floor is checked first: at min_len the call fails with
        UndersizeError whatever the index.  Indexes are valid strictly below
        the current length.
        """
        length = len(self._items)
        _check_shrink(length, self.min_len)
        if not 0 <= index < length:
            raise IndexOutOfBoundsError(index, length)
        return self._items.pop(index)

    def strict_encode(self, stream: BinaryIO) -> None:
        element = _codec_attr(type(self), "element")
        write_len(stream, len(self._items))
        for item in self._items:
            element.strict_encode(item, stream)

    @classmethod
    def strict_decode(cls, stream: BinaryIO) -> "StrictVec":
        element = _codec_attr(cls, "element")
        length = read_len(stream)
        _check_decoded_len("array length", length, cls.min_len)
        return cls(element.strict_decode(stream) for _ in range(length))


# ── StrictSet ────────────────────────────────────────────────

class StrictSet(_Bounded, Collection):
    """Length-bounded set of unique elements, kept in canonical order."""

    __slots__ = ("_items",)

    element: Any = None

    @classmethod
    def of(cls, element: Any, min_len: int = 0) -> type:
        _check_min_len(min_len)
        return _specialize(StrictSet, (("element", element), ("min_len", min_len)))

    @classmethod
    def _key(cls, item: Any) -> bytes:
        return strict_serialize(_codec_attr(cls, "element"), item)

    @classmethod
    def _from_entries(cls, entries: Dict[bytes, Any]) -> "StrictSet":
        obj = cls.__new__(cls)
        obj._items = entries
        return obj

    def __init__(self, items: Iterable[Any] = ()) -> None:
        entries: Dict[bytes, Any] = {}
        for item in items:
            entries.setdefault(self._key(item), item)
        _check_bounds(len(entries), self.min_len)
        self._items: Dict[bytes, Any] = entries

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        for key in sorted(self._items):
            yield self._items[key]

    def __contains__(self, item: object) -> bool:
        try:
            key = self._key(item)
        except (TypeError, StrictError):
            # Not encodable as this element type, so it cannot be a member.
            return False
        return key in self._items

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._items.keys() == other._items.keys()  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        return "{}({!r})".format(type(self).__name__, list(self))

    def insert(self, item: Any) -> int:
        """Add `item` and return the count before the insertion.

        Inserting an element that is already present leaves the set as is.
        """
        length = len(self._items)
        _check_growth(length)
        self._items.setdefault(self._key(item), item)
        return length

    def remove(self, item: Any) -> bool:
        """Remove `item`, returning whether it was present."""
        length = len(self._items)
        _check_shrink(length, self.min_len)
        return self._items.pop(self._key(item), _MISSING) is not _MISSING

    def strict_encode(self, stream: BinaryIO) -> None:
        write_len(stream, len(self._items))
        for key in sorted(self._items):
            stream.write(key)

    @classmethod
    def strict_decode(cls, stream: BinaryIO) -> "StrictSet":
        element = _codec_attr(cls, "element")
        length = read_len(stream)
        _check_decoded_len("set length", length, cls.min_len)
        entries: Dict[bytes, Any] = {}
        for pos in range(length):
            item = element.strict_decode(stream)
            key = strict_serialize(element, item)
            if key in entries:
                raise RepeatedValueError(
                    "non-unique set element at position {}".format(pos))
            entries[key] = item
        return cls._from_entries(entries)


# ── StrictMap ────────────────────────────────────────────────

class StrictMap(_Bounded, Mapping):
    """Length-bounded mapping with unique keys, kept in canonical key order."""

    __slots__ = ("_items",)

    key: Any = None
    value: Any = None

    @classmethod
    def of(cls, key: Any, value: Any, min_len: int = 0) -> type:
        _check_min_len(min_len)
        return _specialize(StrictMap, (("key", key), ("value", value), ("min_len", min_len)))

    @classmethod
    def _key(cls, key: Any) -> bytes:
        return strict_serialize(_codec_attr(cls, "key"), key)

    @classmethod
    def _from_entries(cls, entries: Dict[bytes, Tuple[Any, Any]]) -> "StrictMap":
        obj = cls.__new__(cls)
        obj._items = entries
        return obj

    def __init__(self, items: Union[Mapping, Iterable[Tuple[Any, Any]]] = ()) -> None:
        pairs = items.items() if isinstance(items, Mapping) else items
        entries: Dict[bytes, Tuple[Any, Any]] = {}
        for k, v in pairs:
            entries[self._key(k)] = (k, v)
        _check_bounds(len(entries), self.min_len)
        self._items: Dict[bytes, Tuple[Any, Any]] = entries

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        for kb in sorted(self._items):
            yield self._items[kb][0]

    def __getitem__(self, key: Any) -> Any:
        try:
            kb = self._key(key)
        except (TypeError, StrictError):
            raise KeyError(key) from None
        try:
            return self._items[kb][1]
        except KeyError:
            raise KeyError(key) from None

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        mine = {kb: v for kb, (_, v) in self._items.items()}
        theirs = {kb: v for kb, (_, v) in other._items.items()}  # type: ignore[attr-defined]
        return mine == theirs

    def __repr__(self) -> str:
        return "{}({!r})".format(type(self).__name__, list(self.items()))

    def insert(self, key: Any, value: Any) -> int:
        """Set `key` to `value` and return the count before the insertion."""
        length = len(self._items)
        _check_growth(length)
        kb = self._key(key)
        if kb in self._items:
            key = self._items[kb][0]
        self._items[kb] = (key, value)
        return length

    def remove(self, key: Any) -> Optional[Any]:
        """Remove `key`, returning its value or None when absent."""
        length = len(self._items)
        _check_shrink(length, self.min_len)
        entry = self._items.pop(self._key(key), None)
        return None if entry is None else entry[1]

    def strict_encode(self, stream: BinaryIO) -> None:
        value_codec = _codec_attr(type(self), "value")
        write_len(stream, len(self._items))
        for kb in sorted(self._items):
            stream.write(kb)
            value_codec.strict_encode(self._items[kb][1], stream)

    @classmethod
    def strict_decode(cls, stream: BinaryIO) -> "StrictMap":
        key_codec = _codec_attr(cls, "key")
        value_codec = _codec_attr(cls, "value")
        length = read_len(stream)
        _check_decoded_len("map length", length, cls.min_len)
        entries: Dict[bytes, Tuple[Any, Any]] = {}
        for _ in range(length):
            k = key_codec.strict_decode(stream)
            v = value_codec.strict_decode(stream)
            kb = strict_serialize(key_codec, k)
            if kb in entries:
                raise RepeatedValueError("non-unique map key {!r}".format(k))
            entries[kb] = (k, v)
        return cls._from_entries(entries)


# ── Strings ──────────────────────────────────────────────────
# Lengths are byte lengths of the UTF-8 form, as on the wire, so len()
# of a StrictStr holding non-ASCII text exceeds its character count.

class _BoundedText(_Bounded):
    __slots__ = ("_value", "_raw")

    def __len__(self) -> int:
        return len(self._raw)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return "{}({!r})".format(type(self).__name__, self._value)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._raw == other._raw  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._raw))

    def as_bytes(self) -> bytes:
        return self._raw

    def strict_encode(self, stream: BinaryIO) -> None:
        write_len(stream, len(self._raw))
        stream.write(self._raw)


class StrictStr(_BoundedText):
    """UTF-8 string of at least min_len and at most 0xFFFF bytes."""

    __slots__ = ()

    @classmethod
    def of(cls, min_len: int = 0) -> type:
        _check_min_len(min_len)
        return _specialize(StrictStr, (("min_len", min_len),))

    def __init__(self, value: str = "") -> None:
        if not isinstance(value, str):
            raise TypeError("{} expects str, got {}".format(
                type(self).__name__, type(value).__name__))
        raw = value.encode("utf-8")
        _check_bounds(len(raw), self.min_len)
        self._value = value
        self._raw = raw

    @classmethod
    def strict_decode(cls, stream: BinaryIO) -> "StrictStr":
        length = read_len(stream)
        _check_decoded_len("string length", length, cls.min_len)
        raw = read_exact(stream, length)
        try:
            return cls(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise Utf8Error("invalid utf-8: {}".format(e.reason)) from e


class AsciiString(_BoundedText):
    """ASCII-only string of min_len..max_len bytes."""

    __slots__ = ()

    max_len: int = STRICT_COLLECTION_MAX_LEN

    @classmethod
    def of(cls, min_len: int = 0, max_len: int = STRICT_COLLECTION_MAX_LEN) -> type:
        _check_min_len(min_len)
        if not min_len <= max_len <= STRICT_COLLECTION_MAX_LEN:
            raise ValueError("max_len must be within {}..0xFFFF, got {}".format(
                min_len, max_len))
        return _specialize(AsciiString, (("min_len", min_len), ("max_len", max_len)))

    def __init__(self, value: Union[str, bytes] = "") -> None:
        if isinstance(value, str):
            raw = value.encode("utf-8")
        elif isinstance(value, (bytes, bytearray)):
            raw = bytes(value)
        else:
            raise TypeError("{} expects str or bytes, got {}".format(
                type(self).__name__, type(value).__name__))
        _check_bounds(len(raw), self.min_len, self.max_len)
        for byte in raw:
            if byte >= 0x80:
                raise InvalidCharError(byte)
        self._value = raw.decode("ascii")
        self._raw = raw

    @classmethod
    def strict_decode(cls, stream: BinaryIO) -> "AsciiString":
        length = read_len(stream)
        _check_decoded_len("ASCII string length", length, cls.min_len, cls.max_len)
        raw = read_exact(stream, length)
        for byte in raw:
            if byte >= 0x80:
                raise OutOfRangeError("ASCII char", 0, 0x80, byte)
        return cls(raw)
