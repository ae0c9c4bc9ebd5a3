"""Type schema model consumed by the stream verifier.

A `TypeSystem` maps type names to definitions.  Definitions are built from:

    PrimitiveType   fixed-width numbers, or the two length-prefixed char kinds
    KeyType         what may key a set or map: a primitive, KeyArray, KeyList
    TypeConstr      PlainType / ArrayType / ListType / SetType / MapType
    TypeRef         InPlace (primitive leaves) or NameRef (type-name leaves)
    StructField     a TypeRef plus an `optional` flag
    StructType      ordered fields

Everything is an immutable value.  Nothing holds a reference back to the
`TypeSystem`; name lookups always go through the registry the caller passes
into `verify()`.
"""

from __future__ import annotations

import collections.abc
import enum
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from ._constants import FLOAT_WIDTHS, INT_WIDTHS
from ._errors import SchemaError

TypeName = str


class PrimitiveType(enum.Enum):
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"
    U256 = "u256"
    U512 = "u512"
    U1024 = "u1024"

    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    I128 = "i128"
    I256 = "i256"
    I512 = "i512"
    I1024 = "i1024"

    F16B = "f16b"
    F16 = "f16"
    F32 = "f32"
    F64 = "f64"
    F80 = "f80"
    F128 = "f128"
    F256 = "f256"
    F512 = "f512"

    ASCII_CHAR = "ascii_char"
    UNICODE_CHAR = "unicode_char"

    @property
    def width(self) -> Optional[int]:
        """Encoded width in bytes, or None for the length-prefixed char kinds."""
        return _WIDTHS.get(self)

    @classmethod
    def from_name(cls, name: str) -> "PrimitiveType":
        try:
            return cls(name)
        except ValueError:
            raise SchemaError("unknown primitive type {!r}".format(name)) from None


_P = PrimitiveType
_WIDTHS: Dict[PrimitiveType, int] = {}
_WIDTHS.update(zip((_P.U8, _P.U16, _P.U32, _P.U64, _P.U128, _P.U256, _P.U512, _P.U1024),
                   INT_WIDTHS))
_WIDTHS.update(zip((_P.I8, _P.I16, _P.I32, _P.I64, _P.I128, _P.I256, _P.I512, _P.I1024),
                   INT_WIDTHS))
_WIDTHS.update(zip((_P.F16B, _P.F16, _P.F32, _P.F64, _P.F80, _P.F128, _P.F256, _P.F512),
                   FLOAT_WIDTHS))


def _require_primitive(what: str, ty: Any) -> None:
    if not isinstance(ty, PrimitiveType):
        raise SchemaError("{} requires a primitive type, got {!r}".format(what, ty))


# ── Key types ────────────────────────────────────────────────
# Restricted to primitives and flat containers of primitives, so every key
# has a cheap, well-defined byte form to order by.

@dataclass(frozen=True)
class KeyArray:
    length: int
    ty: PrimitiveType

    def __post_init__(self) -> None:
        _require_primitive("key array", self.ty)
        if self.length < 0:
            raise SchemaError("array length must be non-negative")


@dataclass(frozen=True)
class KeyList:
    ty: PrimitiveType

    def __post_init__(self) -> None:
        _require_primitive("key list", self.ty)


KeyType = Union[PrimitiveType, KeyArray, KeyList]


# ── Type constructors ────────────────────────────────────────
# Inner types are PrimitiveType for in-place references and TypeName
# strings for name references.

@dataclass(frozen=True)
class PlainType:
    ty: Any


@dataclass(frozen=True)
class ArrayType:
    length: int
    ty: Any

    def __post_init__(self) -> None:
        if self.length < 0:
            raise SchemaError("array length must be non-negative")


@dataclass(frozen=True)
class ListType:
    ty: Any


@dataclass(frozen=True)
class SetType:
    ty: Any


@dataclass(frozen=True)
class MapType:
    key: KeyType
    value: Any

    def __post_init__(self) -> None:
        if not isinstance(self.key, (PrimitiveType, KeyArray, KeyList)):
            raise SchemaError("map key must be a key type, got {!r}".format(self.key))


TypeConstr = Union[PlainType, ArrayType, ListType, SetType, MapType]
_CONSTRS = (PlainType, ArrayType, ListType, SetType, MapType)


def _constr_leaf(constr: Any) -> Any:
    if not isinstance(constr, _CONSTRS):
        raise SchemaError("expected a type constructor, got {!r}".format(constr))
    return constr.value if isinstance(constr, MapType) else constr.ty


# ── Type references ──────────────────────────────────────────

@dataclass(frozen=True)
class InPlace:
    """A type defined at the point of use, over primitive types."""

    ty: TypeConstr

    def __post_init__(self) -> None:
        _require_primitive("in-place type", _constr_leaf(self.ty))


@dataclass(frozen=True)
class NameRef:
    """A type defined by reference to a name in the TypeSystem."""

    ty: TypeConstr

    def __post_init__(self) -> None:
        leaf = _constr_leaf(self.ty)
        if not isinstance(leaf, str):
            raise SchemaError("name reference requires a type name, got {!r}".format(leaf))


TypeRef = Union[InPlace, NameRef]


# ── Structs ──────────────────────────────────────────────────

@dataclass(frozen=True)
class StructField:
    ty: TypeRef
    optional: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.ty, (InPlace, NameRef)):
            raise SchemaError("struct field requires a type reference, got {!r}".format(self.ty))

    @classmethod
    def primitive(cls, ty: PrimitiveType, optional: bool = False) -> "StructField":
        return cls(InPlace(PlainType(ty)), optional)

    @classmethod
    def named(cls, name: TypeName, optional: bool = False) -> "StructField":
        return cls(NameRef(PlainType(name)), optional)


@dataclass(frozen=True)
class StructType:
    fields: Tuple[StructField, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable but store a tuple so the value stays hashable.
        object.__setattr__(self, "fields", tuple(self.fields))

    def __iter__(self) -> Iterator[StructField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)


TypeDef = Union[StructType, InPlace, NameRef, PlainType, ArrayType, ListType,
                SetType, MapType, PrimitiveType]


class TypeSystem(collections.abc.Mapping):
    """Read-only registry of named type definitions."""

    def __init__(self, types: Optional[Mapping[TypeName, TypeDef]] = None) -> None:
        self._types: Dict[TypeName, TypeDef] = dict(types or {})

    def __getitem__(self, name: TypeName) -> TypeDef:
        return self._types[name]

    def __iter__(self) -> Iterator[TypeName]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return "TypeSystem({!r})".format(self._types)
