#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Differential fuzzing: stream verifier vs full decoder.
#
# For each case a schema node is paired with the codec that decodes the
# same wire form.  Two fuzz categories:
#   A) random VALID values -> strict_serialize -> verifier must accept
#   B) random byte MUTATIONS of valid encodings -> verifier and decoder
#      must agree: the verifier accepts exactly the payloads that decode
#      and re-encode to the same bytes (canonical form)
#
# Any mismatch prints a minimal repro payload and exits non-zero.

import os, sys, random
from typing import Any, Callable, List, Tuple

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from stens import (
    U8, U16, U32,
    Array,
    ArrayType,
    InPlace,
    KeyList,
    ListType,
    MapType,
    NameRef,
    Option,
    PrimitiveType as P,
    SetType,
    StrictError,
    StrictMap,
    StrictSet,
    StrictVec,
    StructField,
    StructType,
    TypeSystem,
    strict_deserialize,
    strict_serialize,
    verify_bytes,
)

SEED = int(os.environ.get("STENS_SEED", "4242"))
ROUNDS = int(os.environ.get("STENS_FUZZ_ROUNDS", "2000"))

random.seed(SEED)

Tag = StrictVec.of(U8)

TS = TypeSystem({
    "Tag": InPlace(ListType(P.U8)),
})

# --- generators ---

def rand_u8s(nmax: int) -> List[int]:
    return [random.randint(0, 0xFF) for _ in range(random.randint(0, nmax))]

def rand_tag() -> Any:
    return Tag(rand_u8s(4))

def gen_vec() -> Any:
    return Tag(rand_u8s(8))

def gen_set() -> Any:
    return StrictSet.of(U16)(random.randint(0, 0xFFFF) for _ in range(random.randint(0, 6)))

def gen_map() -> Any:
    return StrictMap.of(U8, U32)(
        (random.randint(0, 0xFF), random.randint(0, 0xFFFFFFFF))
        for _ in range(random.randint(0, 6)))

def gen_array() -> Any:
    return tuple(random.randint(0, 0xFFFF) for _ in range(3))

def gen_option() -> Any:
    return None if random.random() < 0.3 else random.randint(0, 0xFFFF)

def gen_tag_set() -> Any:
    return StrictSet.of(Tag)(rand_tag() for _ in range(random.randint(0, 4)))

def gen_tag_map() -> Any:
    return StrictMap.of(Tag, Tag)((rand_tag(), rand_tag()) for _ in range(random.randint(0, 4)))

# (label, schema node, codec, value generator, canonical)
# `canonical` cases have exactly one encoding per value, so a payload that
# decodes but re-encodes differently must be rejected by the verifier.
CASES: List[Tuple[str, Any, Any, Callable[[], Any], bool]] = [
    ("list_u8", InPlace(ListType(P.U8)), Tag, gen_vec, False),
    ("set_u16", InPlace(SetType(P.U16)), StrictSet.of(U16), gen_set, True),
    ("map_u8_u32", InPlace(MapType(P.U8, P.U32)), StrictMap.of(U8, U32), gen_map, True),
    ("array_u16", InPlace(ArrayType(3, P.U16)), Array(U16, 3), gen_array, False),
    ("optional_u16", StructType([StructField.primitive(P.U16, optional=True)]),
     Option(U16), gen_option, False),
    ("set_of_tags", NameRef(SetType("Tag")), StrictSet.of(Tag), gen_tag_set, True),
    ("map_of_tags", NameRef(MapType(KeyList(P.U8), "Tag")), StrictMap.of(Tag, Tag),
     gen_tag_map, True),
]

def mutate(data: bytes) -> bytes:
    b = bytearray(data)
    op = random.random()
    if op < 0.4 and b:
        i = random.randrange(len(b))
        b[i] = random.randint(0, 0xFF)
    elif op < 0.6 and b:
        del b[random.randrange(len(b)):]
    elif op < 0.8:
        b.insert(random.randint(0, len(b)), random.randint(0, 0xFF))
    elif len(b) >= 4:
        # swap two adjacent halves to disturb ordering
        mid = 2 + random.randrange(len(b) - 2)
        b = b[:2] + b[mid:] + b[2:mid]
    return bytes(b)

def decoded(codec: Any, data: bytes) -> Any:
    """Decode and re-encode; None when the decoder refuses the payload."""
    try:
        return strict_serialize(codec, strict_deserialize(codec, data))
    except StrictError:
        return None

def mismatch(label: str, data: bytes, ver: bool, dec: Any) -> None:
    print("MISMATCH:", label)
    print("HEX :", data.hex())
    print("VERIFY:", ver)
    print("DECODE:", "refused" if dec is None else dec.hex())
    raise SystemExit(1)

# --- main ---

def main() -> None:
    for r in range(ROUNDS):
        label, node, codec, gen, canonical = CASES[r % len(CASES)]

        # A) valid encodings verify
        data = strict_serialize(codec, gen())
        if not verify_bytes(node, TS, data):
            mismatch(label + "/valid", data, False, data)

        # B) mutations: verifier and decoder agree
        bad = mutate(data)
        ver = verify_bytes(node, TS, bad)
        dec = decoded(codec, bad)
        if canonical:
            agree = ver == (dec == bad)
        else:
            agree = ver == (dec is not None)
        if not agree:
            mismatch(label + "/mutated", bad, ver, dec)

    print("OK: {} rounds (seed {})".format(ROUNDS, SEED))

if __name__ == "__main__":
    main()
