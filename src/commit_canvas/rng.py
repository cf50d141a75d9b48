"""Seeded pseudo-random generator with exact 32-bit wrapping arithmetic.

Identical seed and identical call order produce an identical sequence on any
platform, so plans and mutation logs are reproducible from a seed string.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Callable

from commit_canvas.errors import ValidationError

MASK_32 = 0xFFFFFFFF
FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
STATE_INCREMENT = 0x6D2B79F5

Rng = Callable[[], float]


def _imul(a: int, b: int) -> int:
    """Multiply two 32-bit values, keeping the low 32 bits."""
    return (a * b) & MASK_32


def hash_seed(seed: str) -> int:
    """Hash a seed string into an unsigned 32-bit integer with FNV-1a.

    The hash walks UTF-16 code units, which equal the bytes of ASCII seeds.
    """
    encoded = seed.encode("utf-16-le")
    units = struct.unpack(f"<{len(encoded) // 2}H", encoded)
    value = FNV_OFFSET_BASIS
    for unit in units:
        value = _imul(value ^ unit, FNV_PRIME)
    return value


def create_rng(seed: str) -> Rng:
    """Create a generator returning floats in ``[0, 1)`` from a string seed."""
    state = hash_seed(seed)

    def next_float() -> float:
        nonlocal state
        state = (state + STATE_INCREMENT) & MASK_32
        t = state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK_32
        return ((t ^ (t >> 14)) & MASK_32) / 4294967296

    return next_float


def random_int(rng: Rng, minimum: float, maximum: float) -> int:
    """Return an integer in the inclusive range ``[ceil(minimum), floor(maximum)]``."""
    low = math.ceil(minimum)
    high = math.floor(maximum)
    if high < low:
        raise ValidationError(f"Invalid random range {minimum}..{maximum}.", kind="InvalidRange")
    return math.floor(rng() * (high - low + 1)) + low
