"""Stream verifier: check a byte stream against a schema type without decoding it.

`verify()` walks the schema and the stream in lockstep, consuming exactly
the bytes a full decode would, and answers only pass/fail.  It is meant as
a gate in front of the real decode: callers wanting a detailed error re-run
the decode through the collections and codecs.

Canonical order (sets and maps):

    For every element (map: every key) the verifier remembers where the
    element starts, verifies it, then rewinds and re-reads the exact bytes
    it spanned.  Each span must be strictly greater than the previous one
    under byte-lexicographic order (a proper prefix sorts first).  Strict
    monotonicity rules out duplicates as well as inversions.

    Ordering is over serialized bytes, never over decoded values: for
    little-endian integers the two orders disagree (256 encodes as
    00 01 and sorts before 1, encoded 01 00).

Failure handling: every check short-circuits to False.  Short reads, seeks
past the end and stream errors are failures too, never exceptions.  The
only exception raised is SchemaError, for objects that are not schema
nodes at all (a programming error, not bad input).

Nesting: recursive types nest as deep as the data does.  The walk keeps
its own stack, so depth is bounded by memory (and `Settings.max_depth`
when set).  A named type that re-enters itself without consuming input
would never terminate and fails instead.
"""

from __future__ import annotations

import io
from typing import Any, BinaryIO, Generator, List, Optional, Set, Tuple

from ._config import Settings
from ._constants import BYTE_ORDER, LEN_PREFIX_WIDTH, PRESENCE_ABSENT, PRESENCE_PRESENT
from ._errors import SchemaError
from ._logging import get_logger
from ._schema import (
    ArrayType,
    InPlace,
    KeyArray,
    KeyList,
    ListType,
    MapType,
    NameRef,
    PlainType,
    PrimitiveType,
    SetType,
    StructField,
    StructType,
    TypeSystem,
)

logger = get_logger(__name__)

# A node visit: yields (child, depth) pairs, is sent back each child's verdict,
# and returns its own.
Visit = Generator[Tuple[Any, int], Optional[bool], bool]


class _Walker:
    """One verification pass: the schema, the stream, and where it ends.

    The walk keeps its own stack of pending nodes instead of recursing, so
    how deep a value may nest is bounded by memory, not by the
    interpreter's recursion limit.  Each node is visited by a generator
    that yields `(child, depth)` for every sub-node and receives the
    child's verdict back.
    """

    def __init__(self, ts: TypeSystem, stream: BinaryIO, end: int,
                 max_depth: Optional[int]) -> None:
        self.ts = ts
        self.stream = stream
        self.end = end
        self.max_depth = max_depth
        # (name, offset) of every named type currently being resolved.
        self.active: Set[Tuple[str, int]] = set()

    # ── Stream primitives ────────────────────────────────────

    def _read(self, n: int) -> Optional[bytes]:
        data = self.stream.read(n)
        if data is None or len(data) != n:
            logger.debug("short read: wanted %d bytes", n)
            return None
        return data

    def _read_len(self) -> Optional[int]:
        raw = self._read(LEN_PREFIX_WIDTH)
        return None if raw is None else int.from_bytes(raw, BYTE_ORDER)

    def _skip(self, n: int) -> bool:
        # In-memory streams happily seek past the end, so measure first.
        pos = self.stream.tell()
        if pos + n > self.end:
            logger.debug("cannot skip %d bytes at offset %d of %d", n, pos, self.end)
            return False
        self.stream.seek(n, io.SEEK_CUR)
        return True

    def _span(self, start: int) -> Optional[bytes]:
        """Rewind to `start` and re-read everything up to the current position."""
        stop = self.stream.tell()
        self.stream.seek(start)
        return self._read(stop - start)

    # ── Driver ───────────────────────────────────────────────

    def run(self, ty: Any) -> bool:
        stack: List[Visit] = [self._visit(ty, 0)]
        verdict: Optional[bool] = None
        while stack:
            try:
                child = stack[-1].send(verdict)
            except StopIteration as stop:
                stack.pop()
                verdict = stop.value
                continue
            stack.append(self._visit(*child))
            verdict = None
        return bool(verdict)

    # ── Dispatch ─────────────────────────────────────────────

    def _visit(self, ty: Any, depth: int) -> Visit:
        if isinstance(ty, str):
            return (yield from self._named(ty, depth))
        if isinstance(ty, StructType):
            return (yield from self._struct(ty, depth))
        if isinstance(ty, StructField):
            return (yield from self._field(ty, depth))
        if isinstance(ty, (InPlace, NameRef, PlainType)):
            return (yield ty.ty, depth)
        if isinstance(ty, (ArrayType, KeyArray)):
            return (yield from self._repeat(ty.ty, ty.length, depth))
        if isinstance(ty, (ListType, KeyList)):
            count = self._read_len()
            if count is None:
                return False
            return (yield from self._repeat(ty.ty, count, depth))
        if isinstance(ty, SetType):
            return (yield from self._set(ty, depth))
        if isinstance(ty, MapType):
            return (yield from self._map(ty, depth))
        if isinstance(ty, PrimitiveType):
            return self._primitive(ty)
        raise SchemaError("unsupported schema node: {}".format(type(ty).__name__))

    def _named(self, name: str, depth: int) -> Visit:
        definition = self.ts.get(name)
        if definition is None:
            logger.debug("unknown type name %r", name)
            return False
        if self.max_depth is not None and depth >= self.max_depth:
            logger.debug("type %r nested deeper than %d", name, self.max_depth)
            return False
        # Re-entering a type at the offset where it is already being
        # resolved repeats the same walk forever.
        key = (name, self.stream.tell())
        if key in self.active:
            logger.debug("type %r recurses at offset %d without consuming input", *key)
            return False
        self.active.add(key)
        ok = yield definition, depth + 1
        self.active.discard(key)
        return ok

    def _struct(self, ty: StructType, depth: int) -> Visit:
        for field in ty:
            if not (yield field, depth):
                return False
        return True

    def _field(self, field: StructField, depth: int) -> Visit:
        if not field.optional:
            return (yield field.ty, depth)
        tag = self._read(1)
        if tag is None:
            return False
        if tag[0] == PRESENCE_ABSENT:
            return True
        if tag[0] == PRESENCE_PRESENT:
            return (yield field.ty, depth)
        logger.debug("invalid presence byte %#04x", tag[0])
        return False

    def _repeat(self, ty: Any, count: int, depth: int) -> Visit:
        for _ in range(count):
            if not (yield ty, depth):
                return False
        return True

    def _set(self, ty: SetType, depth: int) -> Visit:
        count = self._read_len()
        if count is None:
            return False
        prev: Optional[bytes] = None
        for i in range(count):
            start = self.stream.tell()
            if not (yield ty.ty, depth):
                return False
            span = self._span(start)
            if span is None:
                return False
            if prev is not None and span <= prev:
                logger.debug("set element %d is not above its predecessor", i)
                return False
            prev = span
        return True

    def _map(self, ty: MapType, depth: int) -> Visit:
        count = self._read_len()
        if count is None:
            return False
        prev: Optional[bytes] = None
        for i in range(count):
            start = self.stream.tell()
            if not (yield ty.key, depth):
                return False
            span = self._span(start)
            if span is None:
                return False
            if prev is not None and span <= prev:
                logger.debug("map key %d is not above its predecessor", i)
                return False
            prev = span
            if not (yield ty.value, depth):
                return False
        return True

    def _primitive(self, ty: PrimitiveType) -> bool:
        width = ty.width
        if width is None:
            # ascii_char / unicode_char: u16 length, then that many bytes.
            # Charset checks belong to the full decode, not to this pass.
            width = self._read_len()
            if width is None:
                return False
        return self._skip(width)


# ── Public helpers ────────────────────────────────────────────

def verify(ty: Any, type_system: TypeSystem, stream: BinaryIO, *,
           settings: Optional[Settings] = None) -> bool:
    """Check that `stream` continues with a valid encoding of `ty`.

    `ty` is a type name or any schema node.  On success the stream is left
    just past the verified value; on failure its position is unspecified.
    """
    settings = settings or Settings()
    try:
        pos = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        stream.seek(pos)
        return _Walker(type_system, stream, end, settings.max_depth).run(ty)
    except (OSError, ValueError) as e:
        logger.debug("stream error during verification: %s", e)
        return False
    except RecursionError:
        logger.debug("schema nests too deeply to walk")
        return False


def verify_bytes(ty: Any, type_system: TypeSystem, data: bytes, *,
                 allow_trailing: bool = False,
                 settings: Optional[Settings] = None) -> bool:
    """Verify an in-memory buffer, requiring it to hold exactly one value
    unless `allow_trailing` is set."""
    buf = io.BytesIO(data)
    if not verify(ty, type_system, buf, settings=settings):
        return False
    if not allow_trailing and buf.tell() != len(data):
        logger.debug("%d trailing bytes after root value", len(data) - buf.tell())
        return False
    return True
