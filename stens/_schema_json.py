"""JSON schema documents → TypeSystem.

Document shape:

    {"types": {"Name": <definition>, ...}}

    <definition>  {"struct": [<field>, ...]} | <ref> | <constr> | "<primitive>"
    <field>       {"ty": <ref>, "optional": false}
    <ref>         {"in_place": <constr>} | {"name_ref": <constr>}
    <constr>      {"plain": x} | {"array": [n, x]} | {"list": x}
                  | {"set": x} | {"map": [<key>, x]}
    <key>         "<primitive>" | {"array": [n, "<primitive>"]} | {"list": "<primitive>"}

Leaves `x` are primitive names ("u8", "ascii_char", ...) inside `in_place`
and type names inside `name_ref`.  A bare <constr> definition takes
primitive leaves.

Parsing is strict: a UTF-8 BOM, invalid UTF-8, duplicate object keys, and
unknown or malformed nodes all raise SchemaError.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, List

from ._errors import SchemaError
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
    TypeDef,
    TypeSystem,
)

# Leading whitespace pattern for BOM detection.
_WS = re.compile(rb"^[\x20\x09\x0A\x0D]*")


def _pairs_hook(pairs: List[Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise SchemaError("duplicate key {!r} in schema document".format(key))
        result[key] = value
    return result


def _single(node: Any, what: str) -> Any:
    """Unwrap a one-entry object, returning (tag, payload)."""
    if not isinstance(node, dict) or len(node) != 1:
        raise SchemaError("{} must be an object with exactly one key, got {!r}".format(what, node))
    return next(iter(node.items()))


def _primitive(node: Any) -> PrimitiveType:
    if not isinstance(node, str):
        raise SchemaError("primitive type name must be a string, got {!r}".format(node))
    return PrimitiveType.from_name(node)


def _type_name(node: Any) -> str:
    if not isinstance(node, str) or not node:
        raise SchemaError("type name must be a non-empty string, got {!r}".format(node))
    return node


def _length(node: Any) -> int:
    # bool before int: True is an int in Python.
    if isinstance(node, bool) or not isinstance(node, int) or node < 0:
        raise SchemaError("array length must be a non-negative integer, got {!r}".format(node))
    return node


def _pair(payload: Any, what: str) -> List[Any]:
    if not isinstance(payload, list) or len(payload) != 2:
        raise SchemaError("{} expects a two-element list, got {!r}".format(what, payload))
    return payload


def key_from_json(node: Any) -> Any:
    if isinstance(node, str):
        return _primitive(node)
    tag, payload = _single(node, "key type")
    if tag == "array":
        n, inner = _pair(payload, "key array")
        return KeyArray(_length(n), _primitive(inner))
    if tag == "list":
        return KeyList(_primitive(payload))
    raise SchemaError("unknown key type {!r}".format(tag))


def constr_from_json(node: Any, leaf: Callable[[Any], Any]) -> Any:
    tag, payload = _single(node, "type constructor")
    if tag == "plain":
        return PlainType(leaf(payload))
    if tag == "array":
        n, inner = _pair(payload, "array")
        return ArrayType(_length(n), leaf(inner))
    if tag == "list":
        return ListType(leaf(payload))
    if tag == "set":
        return SetType(leaf(payload))
    if tag == "map":
        key, value = _pair(payload, "map")
        return MapType(key_from_json(key), leaf(value))
    raise SchemaError("unknown type constructor {!r}".format(tag))


def ref_from_json(node: Any) -> Any:
    tag, payload = _single(node, "type reference")
    if tag == "in_place":
        return InPlace(constr_from_json(payload, _primitive))
    if tag == "name_ref":
        return NameRef(constr_from_json(payload, _type_name))
    raise SchemaError("unknown type reference {!r}".format(tag))


def field_from_json(node: Any) -> StructField:
    if not isinstance(node, dict) or "ty" not in node:
        raise SchemaError("struct field must be an object with a 'ty' key, got {!r}".format(node))
    extra = set(node) - {"ty", "optional"}
    if extra:
        raise SchemaError("unknown struct field keys: {}".format(sorted(extra)))
    optional = node.get("optional", False)
    if not isinstance(optional, bool):
        raise SchemaError("'optional' must be a boolean, got {!r}".format(optional))
    return StructField(ref_from_json(node["ty"]), optional)


def type_from_json(node: Any) -> TypeDef:
    """Build one type definition from its JSON form."""
    if isinstance(node, str):
        return _primitive(node)
    tag, payload = _single(node, "type definition")
    if tag == "struct":
        if not isinstance(payload, list):
            raise SchemaError("struct expects a list of fields, got {!r}".format(payload))
        return StructType(tuple(field_from_json(f) for f in payload))
    if tag in ("in_place", "name_ref"):
        return ref_from_json(node)
    return constr_from_json(node, _primitive)


def type_system_from_json(raw: bytes) -> TypeSystem:
    """Parse a JSON schema document into a TypeSystem."""
    m = _WS.match(raw)
    start = m.end() if m else 0
    if raw[start:start + 3] == b"\xef\xbb\xbf":
        raise SchemaError("UTF-8 BOM rejected")

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise SchemaError("invalid UTF-8 in schema document")

    try:
        doc = json.loads(text, object_pairs_hook=_pairs_hook)
    except json.JSONDecodeError as e:
        raise SchemaError("schema JSON parse error: {}".format(e))
    except RecursionError:
        raise SchemaError("schema JSON nests too deeply")

    if not isinstance(doc, dict) or not isinstance(doc.get("types"), dict):
        raise SchemaError("schema document must be an object with a 'types' object")

    types: Dict[str, TypeDef] = {}
    for name, node in doc["types"].items():
        types[_type_name(name)] = type_from_json(node)
    return TypeSystem(types)
