"""Verifier conformance suite.

Runs every vector in conformance/verify_vectors.json: each names a type in
the shared schema, a hex payload, and whether the verifier must accept it.

Usage:
    python tests/test_conformance.py [--vectors-file FILE]
    python -m pytest tests/test_conformance.py -v
    STENS_VECTORS_FILE=path/to/vectors.json python tests/test_conformance.py
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import unittest
from typing import Any, Dict, List, Optional, Tuple

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from stens import TypeSystem, type_system_from_json, verify_bytes

# ── Locate conformance data ───────────────────────────────────

_VECTORS_FILE: Optional[str] = os.environ.get("STENS_VECTORS_FILE", None)


def _find_vectors_file() -> str:
    if _VECTORS_FILE:
        return _VECTORS_FILE
    path = os.path.join(os.path.dirname(__file__), "..", "conformance", "verify_vectors.json")
    if os.path.isfile(path):
        return path
    raise FileNotFoundError(
        "Cannot find verify_vectors.json. Set STENS_VECTORS_FILE or --vectors-file."
    )


def _load_data() -> Tuple[TypeSystem, List[Dict[str, Any]]]:
    with open(_find_vectors_file(), "rb") as f:
        doc = json.loads(f.read())
    ts = type_system_from_json(json.dumps(doc["schema"]).encode("utf-8"))
    return ts, doc["vectors"]


def _run_vector(ts: TypeSystem, vec: Dict[str, Any]) -> bool:
    data = bytes.fromhex(vec["hex"])
    return verify_bytes(vec["type"], ts, data, allow_trailing=vec.get("allow_trailing", False))


# ── unittest integration ──────────────────────────────────────

class ConformanceTests(unittest.TestCase):
    """Dynamically generated: one test method per vector."""
    pass


def _make_test(ts: TypeSystem, vec: Dict[str, Any]):
    def test_fn(self: unittest.TestCase) -> None:
        got = _run_vector(ts, vec)
        self.assertEqual(got, vec["valid"],
                         "{}: got {} expected {}".format(vec["test_id"], got, vec["valid"]))
    return test_fn


# Attach test methods at import time.
try:
    _ts, _vectors = _load_data()
    for _vec in _vectors:
        _tid = _vec["test_id"]
        _fn = _make_test(_ts, _vec)
        _fn.__name__ = "test_{}".format(_tid)
        _fn.__qualname__ = "ConformanceTests.test_{}".format(_tid)
        setattr(ConformanceTests, "test_{}".format(_tid), _fn)
except FileNotFoundError:
    pass


# ── Standalone CLI runner ─────────────────────────────────────

def main() -> None:
    global _VECTORS_FILE

    parser = argparse.ArgumentParser(description="stens verifier conformance runner")
    parser.add_argument("--vectors-file", default=None,
                        help="JSON file with schema and vectors")
    args, _remaining = parser.parse_known_args()

    if args.vectors_file:
        _VECTORS_FILE = args.vectors_file

    ts, vectors = _load_data()

    failures: List[Tuple[str, bool, bool]] = []
    for vec in vectors:
        got = _run_vector(ts, vec)
        if got != vec["valid"]:
            failures.append((vec["test_id"], got, vec["valid"]))

    total = len(vectors)
    print("CONFORMANCE: {}/{} PASS".format(total - len(failures), total))
    for tid, got, exp in failures:
        print("  FAIL {}: got={} expected={}".format(tid, got, exp))

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
