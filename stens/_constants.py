"""Strict encoding constants: wire conventions and normative limits."""

from __future__ import annotations

# Every collection carries a u16 count, so 0xFFFF is the hard ceiling for
# element counts and string byte lengths alike.  Configured bounds can only
# narrow it.
STRICT_COLLECTION_MAX_LEN: int = 0xFFFF

# Length prefixes and all multi-byte integers are little-endian.
BYTE_ORDER = "little"
LEN_PREFIX_WIDTH: int = 2

# ── Optional presence byte ───────────────────────────────────
# Written for every optional struct field, present or not.
PRESENCE_ABSENT: int = 0x00
PRESENCE_PRESENT: int = 0x01

# ── Primitive widths (bytes) ─────────────────────────────────
INT_WIDTHS = (1, 2, 4, 8, 16, 32, 64, 128)
FLOAT_WIDTHS = (2, 2, 4, 8, 10, 16, 32, 64)  # f16b, f16, f32 ... f512
