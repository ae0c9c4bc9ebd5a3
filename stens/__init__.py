"""stens: bounded collections with a strict binary encoding.

Collections refuse to grow past 0xFFFF elements or shrink below their
declared minimum, and encode as a little-endian u16 count followed by the
elements.  Sets and maps always encode in canonical (byte-sorted) order.

Quick start:
    >>> from stens import StrictVec, U8
    >>> ByteVec = StrictVec.of(U8, min_len=1)
    >>> v = ByteVec([1, 2, 3])
    >>> v.strict_serialize().hex()
    '0300010203'
    >>> ByteVec.strict_deserialize(bytes.fromhex('0300010203')) == v
    True

A schema-driven verifier checks a stream against a type without decoding it:
    >>> from stens import TypeSystem, SetType, InPlace, PrimitiveType, verify_bytes
    >>> ts = TypeSystem({"Ids": InPlace(SetType(PrimitiveType.U8))})
    >>> verify_bytes("Ids", ts, bytes.fromhex("02000102"))
    True
    >>> verify_bytes("Ids", ts, bytes.fromhex("02000201"))
    False
"""

from __future__ import annotations

from ._codec import (
    I8, I16, I32, I64, I128, I256, I512, I1024,
    U8, U16, U32, U64, U128, U256, U512, U1024,
    F32, F64,
    Array,
    Bool,
    Bytes,
    Codec,
    Option,
    StrictEncoding,
    String,
    read_exact,
    strict_deserialize,
    strict_serialize,
)
from ._collections import AsciiString, StrictMap, StrictSet, StrictStr, StrictVec
from ._config import Settings
from ._constants import STRICT_COLLECTION_MAX_LEN
from ._errors import (
    ERR_EOF,
    ERR_INDEX_BOUNDS,
    ERR_INVALID_CHAR,
    ERR_OUT_OF_RANGE,
    ERR_OVERSIZE,
    ERR_REPEATED_VALUE,
    ERR_SCHEMA,
    ERR_TRAILING,
    ERR_UNDERSIZE,
    ERR_UTF8,
    AsciiStringError,
    CollectionError,
    DataNotEntirelyConsumedError,
    IndexOutOfBoundsError,
    InvalidCharError,
    OutOfRangeError,
    OversizeError,
    RemoveError,
    RepeatedValueError,
    SchemaError,
    StrictError,
    UndersizeError,
    UnexpectedEofError,
    Utf8Error,
)
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
from ._schema_json import type_from_json, type_system_from_json
from ._verify import verify, verify_bytes

__version__ = "0.7.1"

__all__ = [
    # Collections
    "StrictVec",
    "StrictSet",
    "StrictMap",
    "StrictStr",
    "AsciiString",
    # Codecs
    "Codec",
    "StrictEncoding",
    "U8", "U16", "U32", "U64", "U128", "U256", "U512", "U1024",
    "I8", "I16", "I32", "I64", "I128", "I256", "I512", "I1024",
    "F32", "F64",
    "Bool",
    "Bytes",
    "String",
    "Option",
    "Array",
    "read_exact",
    "strict_serialize",
    "strict_deserialize",
    # Schema
    "PrimitiveType",
    "KeyArray",
    "KeyList",
    "PlainType",
    "ArrayType",
    "ListType",
    "SetType",
    "MapType",
    "InPlace",
    "NameRef",
    "StructField",
    "StructType",
    "TypeSystem",
    "type_from_json",
    "type_system_from_json",
    # Verifier
    "verify",
    "verify_bytes",
    "Settings",
    # Limits
    "STRICT_COLLECTION_MAX_LEN",
    # Exceptions
    "StrictError",
    "OversizeError",
    "UndersizeError",
    "InvalidCharError",
    "IndexOutOfBoundsError",
    "RepeatedValueError",
    "OutOfRangeError",
    "Utf8Error",
    "UnexpectedEofError",
    "DataNotEntirelyConsumedError",
    "SchemaError",
    "CollectionError",
    "AsciiStringError",
    "RemoveError",
    # Error codes
    "ERR_OVERSIZE",
    "ERR_UNDERSIZE",
    "ERR_INVALID_CHAR",
    "ERR_INDEX_BOUNDS",
    "ERR_REPEATED_VALUE",
    "ERR_OUT_OF_RANGE",
    "ERR_UTF8",
    "ERR_EOF",
    "ERR_TRAILING",
    "ERR_SCHEMA",
]
