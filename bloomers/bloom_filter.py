"""Bloom filter sized from an expected capacity and false-positive target.

Index functions come from MurmurHash3 double hashing (see :mod:`bloomers.murmur`).
The bitset is packed most-significant-bit first within each byte, which is
also the order the binary codec writes it in.
"""
from __future__ import annotations

import math
import sys
from typing import Iterable, Iterator, List, Sequence, Tuple, Union

import structlog

from bloomers.errors import InvalidArgument
from bloomers.murmur import Item, bit_positions, hash_pair

logger = structlog.get_logger(__name__)

LN2 = math.log(2)

RawBits = Union[bytes, bytearray, memoryview, Sequence[bool]]


def optimal_parameters(expected_items: int, false_positive_rate: float) -> Tuple[int, int]:
    """Return ``(bit_count, hash_count)`` for the requested capacity.

    m = -(n * ln(p)) / ln(2)^2, truncated toward zero
    k = round((m / n) * ln(2))

    Raises:
        InvalidArgument: If ``expected_items`` is negative or
            ``false_positive_rate`` lies outside ``[0.0, 1.0]``.
    """
    if expected_items < 0:
        raise InvalidArgument(
            "expected_items", expected_items, "Expected items should be positive"
        )
    if not 0.0 <= false_positive_rate <= 1.0:
        raise InvalidArgument(
            "false_positive_rate",
            false_positive_rate,
            "False positive rate should be between 0.0 and 1.0",
        )
    if expected_items == 0:
        return 0, 0

    # ln(0) diverges; the smallest normal float keeps m finite.
    rate = max(float(false_positive_rate), sys.float_info.min)
    num_bits = -(expected_items * math.log(rate)) / (LN2 * LN2)
    bit_count = int(num_bits)
    hash_count = int(round((bit_count / expected_items) * LN2))
    return bit_count, hash_count


def _padding_mask(bit_count: int) -> int:
    """Mask keeping only the used (high) bits of the final byte."""
    used = bit_count & 7
    if not used:
        return 0xFF
    return (0xFF << (8 - used)) & 0xFF


class BloomFilter:
    """Bloom filter backed by an MSB-first packed bytearray bitset."""

    __slots__ = ("_bit_count", "_hash_count", "_bit_array")

    def __init__(self, expected_items: int, false_positive_rate: float) -> None:
        """Size a filter for ``expected_items`` at ``false_positive_rate``.

        Args:
            expected_items: Number of items the filter should hold.
            false_positive_rate: Target false-positive probability, 0.0 to 1.0.

        Raises:
            InvalidArgument: If either parameter is out of range.
        """
        bit_count, hash_count = optimal_parameters(expected_items, false_positive_rate)
        self._bit_count = bit_count
        self._hash_count = hash_count
        self._bit_array = bytearray((bit_count + 7) // 8)
        logger.debug(
            "bloom_filter_sized",
            expected_items=expected_items,
            false_positive_rate=false_positive_rate,
            bit_count=bit_count,
            hash_count=hash_count,
        )

    @classmethod
    def from_capacity(cls, expected_items: int, false_positive_rate: float) -> "BloomFilter":
        """Alias of the constructor, for symmetry with :meth:`from_raw`."""
        return cls(expected_items, false_positive_rate)

    @classmethod
    def from_raw(cls, bit_count: int, bits: RawBits, hash_count: int) -> "BloomFilter":
        """Rebuild a filter from persisted state.

        ``bits`` is either a sequence of ``bit_count`` booleans or the packed
        MSB-first bytes (``ceil(bit_count / 8)`` of them). The state is copied.
        Mismatched lengths are a caller bug and raise ``ValueError``.
        """
        if bit_count < 0 or hash_count < 0:
            raise ValueError("bit_count and hash_count must be non-negative")

        byte_len = (bit_count + 7) // 8
        if isinstance(bits, (bytes, bytearray, memoryview)):
            packed = bytearray(bits)
            if len(packed) != byte_len:
                raise ValueError(
                    f"expected {byte_len} packed bytes for {bit_count} bits, got {len(packed)}"
                )
            if packed:
                packed[-1] &= _padding_mask(bit_count)
        else:
            flags = list(bits)
            if len(flags) != bit_count:
                raise ValueError(f"expected {bit_count} bits, got {len(flags)}")
            packed = bytearray(byte_len)
            for index, flag in enumerate(flags):
                if flag:
                    packed[index >> 3] |= 0x80 >> (index & 7)

        bloom = cls.__new__(cls)
        bloom._bit_count = bit_count
        bloom._hash_count = hash_count
        bloom._bit_array = packed
        return bloom

    def insert(self, item: Item) -> None:
        """Insert ``item`` into the filter."""
        for bit_index in self._hashes(item):
            self._bit_array[bit_index >> 3] |= 0x80 >> (bit_index & 7)

    add = insert

    def update(self, items: Iterable[Item]) -> None:
        """Insert all ``items`` into the filter."""
        for item in items:
            self.insert(item)

    def possibly_contains(self, item: Item) -> bool:
        """Return False if ``item`` was definitely never inserted."""
        for bit_index in self._hashes(item):
            if not self._bit_array[bit_index >> 3] & (0x80 >> (bit_index & 7)):
                return False
        return True

    __contains__ = possibly_contains

    def _hashes(self, item: Item) -> Iterator[int]:
        # An empty bitset has no positions to touch; queries are vacuously true.
        if not self._bit_count:
            return iter(())
        h1, h2 = hash_pair(item)
        return bit_positions(h1, h2, self._hash_count, self._bit_count)

    def get_bit(self, index: int) -> bool:
        """Return the flag at ``index``."""
        if not 0 <= index < self._bit_count:
            raise IndexError(f"bit index {index} out of range for {self._bit_count} bits")
        return bool(self._bit_array[index >> 3] & (0x80 >> (index & 7)))

    def inspect(self, full: bool = True) -> str:
        """Render the filter parameters and, if ``full``, every bit."""
        if full:
            bitset = "".join("1" if bit else "0" for bit in self.bits)
        else:
            bitset = str(self._bit_count)
        return f"bits: {self._bit_count}, n_hashes: {self._hash_count}, bitset: {bitset}"

    def count_set_bits(self) -> int:
        return sum(bin(byte).count("1") for byte in self._bit_array)

    def estimated_false_positive_rate(self) -> float:
        """False-positive probability implied by the current fill ratio."""
        if not self._bit_count:
            return 1.0
        return (self.count_set_bits() / self._bit_count) ** self._hash_count

    @property
    def bit_count(self) -> int:
        return self._bit_count

    @property
    def hash_count(self) -> int:
        return self._hash_count

    @property
    def bits(self) -> List[bool]:
        """The bitset as booleans in index order (a copy)."""
        return [self.get_bit(index) for index in range(self._bit_count)]

    @property
    def bit_array(self) -> bytes:
        """The packed bitset, MSB-first, padding bits zero (a copy)."""
        return bytes(self._bit_array)

    def __len__(self) -> int:
        return self._bit_count

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return (
            self._bit_count == other._bit_count
            and self._hash_count == other._hash_count
            and self._bit_array == other._bit_array
        )

    def __repr__(self) -> str:
        return f"BloomFilter(bit_count={self._bit_count}, hash_count={self._hash_count})"
