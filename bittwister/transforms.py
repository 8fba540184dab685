"""
Byte Transforms — deterministic (and two randomized) header corruptions.

The input is split into ``prefix = data[:header_size]`` and
``suffix = data[header_size:]``.  Every method rewrites only the prefix and
re-attaches the suffix untouched, so total length is preserved.  The one
exception is OVERWRITE_ALL, which replaces the entire file with random
bytes of the same length; no repair rule can undo it.

Strategies are registered in ``PREFIX_TRANSFORMS`` keyed by method, so a
new method is one function plus one registry entry.
"""

from __future__ import annotations

import os
import random
from typing import Callable, Optional

from .models import CorruptionMethod, DEFAULT_HEADER_SIZE

PrefixTransform = Callable[[bytes, Optional[random.Random]], bytes]


def _random_bytes(count: int, rng: Optional[random.Random]) -> bytes:
    if rng is None:
        return os.urandom(count)
    return bytes(rng.getrandbits(8) for _ in range(count))


def flip_bits(prefix: bytes, rng: Optional[random.Random] = None) -> bytes:
    """Bitwise complement of every byte (self-inverse)."""
    return bytes(0xFF - b for b in prefix)


def randomize(prefix: bytes, rng: Optional[random.Random] = None) -> bytes:
    return _random_bytes(len(prefix), rng)


def zero_fill(prefix: bytes, rng: Optional[random.Random] = None) -> bytes:
    return bytes(len(prefix))


def reverse(prefix: bytes, rng: Optional[random.Random] = None) -> bytes:
    """Reverse byte order (self-inverse)."""
    return prefix[::-1]


def shift_left(prefix: bytes, rng: Optional[random.Random] = None) -> bytes:
    """Shift each byte left by one bit; bit 7 is lost."""
    return bytes((b << 1) & 0xFF for b in prefix)


PREFIX_TRANSFORMS: dict[CorruptionMethod, PrefixTransform] = {
    CorruptionMethod.HEADER_FLIP: flip_bits,
    CorruptionMethod.RANDOM_BYTES: randomize,
    CorruptionMethod.ZERO_FILL: zero_fill,
    CorruptionMethod.REVERSE_BYTES: reverse,
    CorruptionMethod.BIT_SHIFT_LEFT: shift_left,
}


def split_header(data: bytes, header_size: int) -> tuple[bytes, bytes]:
    """Return (prefix, suffix); suffix is empty for files shorter than the header."""
    return data[:header_size], data[header_size:]


def apply(method: CorruptionMethod, data: bytes,
          header_size: int = DEFAULT_HEADER_SIZE,
          rng: Optional[random.Random] = None) -> bytes:
    """Corrupt ``data`` with ``method``.

    Args:
        method: Corruption strategy
        data: Full file content
        header_size: Size of the region to corrupt (clipped to file length)
        rng: Random source for the randomized methods (os.urandom if None)

    Returns:
        Corrupted bytes, always ``len(data)`` long
    """
    if header_size < 0:
        raise ValueError(f"header_size must be >= 0, got {header_size}")

    if method is CorruptionMethod.OVERWRITE_ALL:
        return _random_bytes(len(data), rng)

    try:
        transform = PREFIX_TRANSFORMS[method]
    except KeyError:
        raise ValueError(f"No transform registered for {method!r}") from None

    prefix, suffix = split_header(data, header_size)
    return transform(prefix, rng) + suffix
