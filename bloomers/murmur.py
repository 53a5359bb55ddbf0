"""MurmurHash3 hash pair and Kirsch-Mitzenmacher index derivation.

Both base hashes are MurmurHash3 x86 32-bit (via mmh3) over the same bytes,
under two fixed seeds. The filter's ``k`` index functions are then synthesized
as ``(h1 + i * h2) mod m`` instead of running ``k`` independent hashes.
"""
from __future__ import annotations

from typing import Iterator, Tuple, Union

import mmh3

SEED1 = 0x9747B28C
SEED2 = 0x12345678

Item = Union[str, bytes, bytearray, memoryview]


def to_bytes(item: Item) -> bytes:
    """Return the byte sequence hashed for ``item`` (UTF-8 for text)."""
    if isinstance(item, str):
        return item.encode("utf-8")
    if isinstance(item, (bytes, bytearray, memoryview)):
        return bytes(item)
    raise TypeError(f"cannot hash {type(item).__name__!r}, expected str or bytes-like")


def murmur3_32(data: bytes, seed: int = 0) -> int:
    """Unsigned 32-bit MurmurHash3 (x86 variant) of ``data``."""
    return mmh3.hash(data, seed & 0xFFFFFFFF, signed=False)


def hash_pair(item: Item) -> Tuple[int, int]:
    """Return ``(h1, h2)`` for ``item`` under the two fixed seeds."""
    data = to_bytes(item)
    return murmur3_32(data, SEED1), murmur3_32(data, SEED2)


def bit_positions(h1: int, h2: int, hash_count: int, bit_count: int) -> Iterator[int]:
    """Yield the ``hash_count`` double-hashed positions in ``[0, bit_count)``."""
    for i in range(hash_count):
        yield (h1 + i * h2) % bit_count
