"""Unit tests for the type schema model."""

from __future__ import annotations

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
    TypeSystem,
)

P = PrimitiveType


class TestPrimitiveType(unittest.TestCase):
    def test_integer_widths(self):
        self.assertEqual(P.U8.width, 1)
        self.assertEqual(P.I64.width, 8)
        self.assertEqual(P.U1024.width, 128)

    def test_float_widths(self):
        self.assertEqual(P.F16B.width, 2)
        self.assertEqual(P.F80.width, 10)
        self.assertEqual(P.F512.width, 64)

    def test_char_kinds_are_length_prefixed(self):
        self.assertIsNone(P.ASCII_CHAR.width)
        self.assertIsNone(P.UNICODE_CHAR.width)

    def test_every_member_accounted_for(self):
        for prim in P:
            if prim not in (P.ASCII_CHAR, P.UNICODE_CHAR):
                self.assertIsInstance(prim.width, int, prim)

    def test_from_name(self):
        self.assertIs(P.from_name("u16"), P.U16)
        with self.assertRaises(SchemaError) as ctx:
            P.from_name("u7")
        self.assertEqual(ctx.exception.code, ERR_SCHEMA)


class TestConstructors(unittest.TestCase):
    def test_in_place_requires_primitive_leaf(self):
        InPlace(ListType(P.U8))
        with self.assertRaises(SchemaError):
            InPlace(ListType("Name"))

    def test_name_ref_requires_name_leaf(self):
        NameRef(SetType("Name"))
        with self.assertRaises(SchemaError):
            NameRef(PlainType(P.U8))

    def test_map_leaf_is_value(self):
        NameRef(MapType(P.U8, "Value"))
        InPlace(MapType(KeyList(P.U8), P.U16))
        with self.assertRaises(SchemaError):
            InPlace(MapType(P.U8, "Value"))

    def test_map_key_must_be_key_type(self):
        with self.assertRaises(SchemaError):
            MapType(StructType(), P.U8)
        with self.assertRaises(SchemaError):
            MapType("Name", P.U8)

    def test_key_types_require_primitives(self):
        KeyArray(4, P.U8)
        with self.assertRaises(SchemaError):
            KeyArray(4, "Name")
        with self.assertRaises(SchemaError):
            KeyList(ListType(P.U8))

    def test_negative_array_length(self):
        with self.assertRaises(SchemaError):
            ArrayType(-1, P.U8)
        with self.assertRaises(SchemaError):
            KeyArray(-1, P.U8)

    def test_ref_requires_constructor(self):
        with self.assertRaises(SchemaError):
            InPlace(P.U8)

    def test_values_compare_by_content(self):
        self.assertEqual(InPlace(ArrayType(3, P.U8)), InPlace(ArrayType(3, P.U8)))
        self.assertNotEqual(ArrayType(3, P.U8), ArrayType(4, P.U8))


class TestStruct(unittest.TestCase):
    def test_field_helpers(self):
        self.assertEqual(StructField.primitive(P.U8),
                         StructField(InPlace(PlainType(P.U8)), False))
        self.assertEqual(StructField.named("Name", optional=True),
                         StructField(NameRef(PlainType("Name")), True))

    def test_field_requires_ref(self):
        with self.assertRaises(SchemaError):
            StructField(P.U8)

    def test_struct_from_list(self):
        st = StructType([StructField.primitive(P.U8), StructField.primitive(P.U16)])
        self.assertEqual(len(st), 2)
        self.assertIsInstance(st.fields, tuple)
        self.assertEqual(hash(st), hash(StructType(list(st))))

    def test_empty_struct(self):
        self.assertEqual(len(StructType()), 0)


class TestTypeSystem(unittest.TestCase):
    def test_mapping(self):
        ts = TypeSystem({"A": P.U8, "B": StructType()})
        self.assertEqual(len(ts), 2)
        self.assertIn("A", ts)
        self.assertIs(ts["A"], P.U8)
        self.assertIsNone(ts.get("C"))
        self.assertEqual(sorted(ts), ["A", "B"])

    def test_copies_input(self):
        src = {"A": P.U8}
        ts = TypeSystem(src)
        src["B"] = P.U16
        self.assertNotIn("B", ts)

    def test_empty(self):
        self.assertEqual(len(TypeSystem()), 0)


if __name__ == "__main__":
    unittest.main()
