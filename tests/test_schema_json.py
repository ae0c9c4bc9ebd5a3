"""Unit tests for the JSON schema loader."""

from __future__ import annotations

import json
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from stens import (
    ERR_SCHEMA,
    ArrayType,
    InPlace,
    KeyArray,
    KeyList,
    ListType,
    MapType,
    NameRef,
    PlainType,
    PrimitiveType,
    SchemaError,
    SetType,
    StructField,
    StructType,
    type_from_json,
    type_system_from_json,
    verify_bytes,
)

P = PrimitiveType


def doc(types) -> bytes:
    return json.dumps({"types": types}).encode("utf-8")


class TestTypeFromJson(unittest.TestCase):
    def test_bare_primitive(self):
        self.assertIs(type_from_json("u32"), P.U32)

    def test_struct(self):
        node = {"struct": [
            {"ty": {"in_place": {"plain": "u8"}}},
            {"ty": {"name_ref": {"plain": "Other"}}, "optional": True},
        ]}
        self.assertEqual(type_from_json(node), StructType([
            StructField.primitive(P.U8),
            StructField.named("Other", optional=True),
        ]))

    def test_refs(self):
        self.assertEqual(type_from_json({"in_place": {"list": "u16"}}),
                         InPlace(ListType(P.U16)))
        self.assertEqual(type_from_json({"name_ref": {"set": "Tag"}}),
                         NameRef(SetType("Tag")))

    def test_bare_constructors_take_primitives(self):
        self.assertEqual(type_from_json({"array": [4, "u8"]}), ArrayType(4, P.U8))
        self.assertEqual(type_from_json({"plain": "i64"}), PlainType(P.I64))

    def test_map_keys(self):
        self.assertEqual(type_from_json({"in_place": {"map": ["u8", "u16"]}}),
                         InPlace(MapType(P.U8, P.U16)))
        self.assertEqual(type_from_json({"name_ref": {"map": [{"list": "u8"}, "V"]}}),
                         NameRef(MapType(KeyList(P.U8), "V")))
        self.assertEqual(type_from_json({"in_place": {"map": [{"array": [2, "u8"]}, "u8"]}}),
                         InPlace(MapType(KeyArray(2, P.U8), P.U8)))

    def test_rejections(self):
        bad = [
            "u7",
            42,
            {},
            {"plain": "u8", "list": "u8"},
            {"vector": "u8"},
            {"array": [-1, "u8"]},
            {"array": [True, "u8"]},
            {"array": ["2", "u8"]},
            {"array": [2]},
            {"in_place": {"plain": "Name"}},
            {"name_ref": {"plain": ""}},
            {"name_ref": {"plain": "u8"}, "x": 1},
            {"in_place": {"map": [{"list": {"list": "u8"}}, "u8"]}},
            {"in_place": {"map": [{"set": "u8"}, "u8"]}},
            {"struct": {"ty": "u8"}},
            {"struct": [{"optional": True}]},
            {"struct": [{"ty": {"in_place": {"plain": "u8"}}, "optional": "yes"}]},
            {"struct": [{"ty": {"in_place": {"plain": "u8"}}, "extra": 1}]},
            {"struct": [{"ty": {"plain": "u8"}}]},
        ]
        for node in bad:
            with self.subTest(node=node):
                with self.assertRaises(SchemaError) as ctx:
                    type_from_json(node)
                self.assertEqual(ctx.exception.code, ERR_SCHEMA)


class TestTypeSystemFromJson(unittest.TestCase):
    def test_document(self):
        ts = type_system_from_json(doc({
            "Tag": {"in_place": {"list": "u8"}},
            "Tags": {"name_ref": {"set": "Tag"}},
        }))
        self.assertEqual(sorted(ts), ["Tag", "Tags"])
        self.assertTrue(verify_bytes("Tags", ts, bytes.fromhex("0200 0100 61 0100 62")))

    def test_whitespace_allowed(self):
        raw = b'  \n{"types": {"A": "u8"}}\n'
        self.assertIn("A", type_system_from_json(raw))

    def test_empty_types(self):
        self.assertEqual(len(type_system_from_json(b'{"types": {}}')), 0)

    def test_duplicate_type_name(self):
        with self.assertRaises(SchemaError):
            type_system_from_json(b'{"types": {"A": "u8", "A": "u16"}}')

    def test_duplicate_nested_key(self):
        with self.assertRaises(SchemaError):
            type_system_from_json(
                b'{"types": {"A": {"struct": [{"ty": {"in_place": {"plain": "u8"}},'
                b' "ty": {"in_place": {"plain": "u8"}}}]}}}')

    def test_bom_rejected(self):
        with self.assertRaises(SchemaError):
            type_system_from_json(b'\xef\xbb\xbf{"types": {}}')

    def test_invalid_utf8(self):
        with self.assertRaises(SchemaError):
            type_system_from_json(b'{"types": {"\xff": "u8"}}')

    def test_invalid_json(self):
        with self.assertRaises(SchemaError):
            type_system_from_json(b'{"types": ')

    def test_deep_nesting(self):
        depth = 1000000
        raw = b'{"types": ' + b"[" * depth + b"]" * depth + b"}"
        with self.assertRaises(SchemaError):
            type_system_from_json(raw)

    def test_missing_types(self):
        for raw in (b"[]", b"{}", b'{"types": []}'):
            with self.subTest(raw=raw):
                with self.assertRaises(SchemaError):
                    type_system_from_json(raw)


if __name__ == "__main__":
    unittest.main()
