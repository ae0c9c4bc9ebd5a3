"""Strict encoding scalar codecs and stream helpers.

A *codec* is anything with a ``strict_encode(value, stream)`` method and a
``strict_decode(stream)`` method.  The scalar codecs below are instances;
the bounded collections are classes whose methods line up with the same
calls (``Cls.strict_encode(instance, stream)``), so collections nest
inside each other without adapters.

Wire rules:

    integers:  fixed width, little-endian, two's complement when signed
    floats:    IEEE-754, little-endian
    bool:      one byte, 0x00 or 0x01
    bytes/str: u16 length prefix, then the raw (UTF-8) bytes
    option:    presence byte, then the value when present
    array:     exactly n values, no prefix
"""

from __future__ import annotations

import io
import struct
from typing import Any, BinaryIO, Optional, Protocol, Tuple

from ._constants import (
    BYTE_ORDER,
    LEN_PREFIX_WIDTH,
    PRESENCE_ABSENT,
    PRESENCE_PRESENT,
    STRICT_COLLECTION_MAX_LEN,
)
from ._errors import (
    DataNotEntirelyConsumedError,
    OutOfRangeError,
    OversizeError,
    UnexpectedEofError,
    Utf8Error,
)


class Codec(Protocol):
    def strict_encode(self, value: Any, stream: BinaryIO, /) -> None:
        ...

    def strict_decode(self, stream: BinaryIO, /) -> Any:
        ...


def codec_name(codec: Any) -> str:
    """Human-readable name of a codec, for reprs and generated class names."""
    return getattr(codec, "__name__", None) or repr(codec)


# ── Stream helpers ───────────────────────────────────────────

def read_exact(stream: BinaryIO, n: int) -> bytes:
    """Read exactly n bytes or raise ERR_EOF."""
    data = stream.read(n)
    if data is None or len(data) != n:
        raise UnexpectedEofError(n, len(data or b""))
    return data


def write_len(stream: BinaryIO, n: int, max_len: int = STRICT_COLLECTION_MAX_LEN) -> None:
    """Write a u16 length prefix."""
    if n > max_len:
        raise OversizeError(n, max_len)
    stream.write(n.to_bytes(LEN_PREFIX_WIDTH, BYTE_ORDER))


def read_len(stream: BinaryIO) -> int:
    """Read a u16 length prefix."""
    return int.from_bytes(read_exact(stream, LEN_PREFIX_WIDTH), BYTE_ORDER)


def strict_serialize(codec: Any, value: Any) -> bytes:
    # Class codecs encode through an unbound method, so check the instance.
    if isinstance(codec, type) and not isinstance(value, codec):
        raise TypeError("expected {}, got {}".format(codec.__name__, type(value).__name__))
    buf = io.BytesIO()
    codec.strict_encode(value, buf)
    return buf.getvalue()


def strict_deserialize(codec: Any, data: bytes) -> Any:
    """Decode one value from `data`, rejecting trailing bytes."""
    buf = io.BytesIO(data)
    value = codec.strict_decode(buf)
    remaining = len(data) - buf.tell()
    if remaining:
        raise DataNotEntirelyConsumedError(remaining)
    return value


class StrictEncoding:
    """Mixin for classes that implement `strict_encode` / `strict_decode`."""

    __slots__ = ()

    def strict_encode(self, stream: BinaryIO) -> None:
        raise NotImplementedError

    @classmethod
    def strict_decode(cls, stream: BinaryIO) -> Any:
        raise NotImplementedError

    def strict_serialize(self) -> bytes:
        return strict_serialize(type(self), self)

    @classmethod
    def strict_deserialize(cls, data: bytes) -> Any:
        return strict_deserialize(cls, data)


# ── Integers ─────────────────────────────────────────────────
# Python ints are arbitrary-precision, so every width is range-checked
# on encode; decode cannot overflow by construction.

class _Int:
    __slots__ = ("name", "width", "signed", "lo", "hi")

    def __init__(self, name: str, width: int, signed: bool) -> None:
        self.name = name
        self.width = width
        self.signed = signed
        bits = width * 8
        if signed:
            self.lo, self.hi = -(1 << (bits - 1)), 1 << (bits - 1)
        else:
            self.lo, self.hi = 0, 1 << bits

    def __repr__(self) -> str:
        return self.name.upper()

    def strict_encode(self, value: int, stream: BinaryIO) -> None:
        # bool is an int subclass; refuse it rather than encode True as 1.
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("{} expects int, got {}".format(self, type(value).__name__))
        if not self.lo <= value < self.hi:
            raise OutOfRangeError(self.name, self.lo, self.hi, value)
        stream.write(value.to_bytes(self.width, BYTE_ORDER, signed=self.signed))

    def strict_decode(self, stream: BinaryIO) -> int:
        return int.from_bytes(read_exact(stream, self.width), BYTE_ORDER, signed=self.signed)


U8 = _Int("u8", 1, False)
U16 = _Int("u16", 2, False)
U32 = _Int("u32", 4, False)
U64 = _Int("u64", 8, False)
U128 = _Int("u128", 16, False)
U256 = _Int("u256", 32, False)
U512 = _Int("u512", 64, False)
U1024 = _Int("u1024", 128, False)

I8 = _Int("i8", 1, True)
I16 = _Int("i16", 2, True)
I32 = _Int("i32", 4, True)
I64 = _Int("i64", 8, True)
I128 = _Int("i128", 16, True)
I256 = _Int("i256", 32, True)
I512 = _Int("i512", 64, True)
I1024 = _Int("i1024", 128, True)


# ── Floats ───────────────────────────────────────────────────

class _Float:
    __slots__ = ("name", "fmt")

    def __init__(self, name: str, fmt: str) -> None:
        self.name = name
        self.fmt = fmt

    def __repr__(self) -> str:
        return self.name.upper()

    def strict_encode(self, value: float, stream: BinaryIO) -> None:
        stream.write(struct.pack(self.fmt, value))

    def strict_decode(self, stream: BinaryIO) -> float:
        return struct.unpack(self.fmt, read_exact(stream, struct.calcsize(self.fmt)))[0]


F32 = _Float("f32", "<f")
F64 = _Float("f64", "<d")


# ── Bool ─────────────────────────────────────────────────────

class _Bool:
    __slots__ = ()

    def __repr__(self) -> str:
        return "Bool"

    def strict_encode(self, value: bool, stream: BinaryIO) -> None:
        stream.write(b"\x01" if value else b"\x00")

    def strict_decode(self, stream: BinaryIO) -> bool:
        b = read_exact(stream, 1)[0]
        if b not in (0, 1):
            raise OutOfRangeError("bool", 0, 2, b)
        return b == 1


Bool = _Bool()


# ── Length-prefixed blobs ────────────────────────────────────

class _Bytes:
    __slots__ = ()

    def __repr__(self) -> str:
        return "Bytes"

    def strict_encode(self, value: bytes, stream: BinaryIO) -> None:
        write_len(stream, len(value))
        stream.write(bytes(value))

    def strict_decode(self, stream: BinaryIO) -> bytes:
        return read_exact(stream, read_len(stream))


class _String:
    __slots__ = ()

    def __repr__(self) -> str:
        return "String"

    def strict_encode(self, value: str, stream: BinaryIO) -> None:
        raw = value.encode("utf-8")
        write_len(stream, len(raw))
        stream.write(raw)

    def strict_decode(self, stream: BinaryIO) -> str:
        raw = read_exact(stream, read_len(stream))
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise Utf8Error("invalid utf-8: {}".format(e.reason)) from e


Bytes = _Bytes()
String = _String()


# ── Compound ─────────────────────────────────────────────────

class Option:
    """Codec for an optional value: a presence byte, then the inner value."""

    __slots__ = ("inner",)

    def __init__(self, inner: Any) -> None:
        self.inner = inner

    def __repr__(self) -> str:
        return "Option({})".format(codec_name(self.inner))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Option) and other.inner == self.inner

    def __hash__(self) -> int:
        return hash((Option, self.inner))

    def strict_encode(self, value: Optional[Any], stream: BinaryIO) -> None:
        if value is None:
            stream.write(bytes([PRESENCE_ABSENT]))
            return
        stream.write(bytes([PRESENCE_PRESENT]))
        self.inner.strict_encode(value, stream)

    def strict_decode(self, stream: BinaryIO) -> Optional[Any]:
        tag = read_exact(stream, 1)[0]
        if tag == PRESENCE_ABSENT:
            return None
        if tag == PRESENCE_PRESENT:
            return self.inner.strict_decode(stream)
        raise OutOfRangeError("option presence byte", 0, 2, tag)


class Array:
    """Codec for exactly `length` inner values with no count prefix."""

    __slots__ = ("inner", "length")

    def __init__(self, inner: Any, length: int) -> None:
        if length < 0:
            raise ValueError("array length must be non-negative")
        self.inner = inner
        self.length = length

    def __repr__(self) -> str:
        return "Array({}, {})".format(codec_name(self.inner), self.length)

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, Array)
                and other.inner == self.inner and other.length == self.length)

    def __hash__(self) -> int:
        return hash((Array, self.inner, self.length))

    def strict_encode(self, value: Tuple[Any, ...], stream: BinaryIO) -> None:
        if len(value) != self.length:
            raise OutOfRangeError("array item count", self.length, self.length + 1, len(value))
        for item in value:
            self.inner.strict_encode(item, stream)

    def strict_decode(self, stream: BinaryIO) -> Tuple[Any, ...]:
        return tuple(self.inner.strict_decode(stream) for _ in range(self.length))
