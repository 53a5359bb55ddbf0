"""Binary encoding of a Bloom filter ("CCBF" version 1).

Big endian (>)
bytes 0-3:   magic, ASCII "CCBF"
bytes 4-5:   format version, as an unsigned short (always 1)
bytes 6-7:   hash_count, as an unsigned short
bytes 8-11:  bit_count, as an unsigned int
bytes 12+:   ceil(bit_count / 8) bytes of bitset, MSB-first, final byte zero padded
"""
from __future__ import annotations

import os
import struct
from typing import BinaryIO, Tuple, Union

import structlog

from bloomers.bloom_filter import BloomFilter
from bloomers.errors import FormatError

logger = structlog.get_logger(__name__)

MAGIC = b"CCBF"
VERSION = 1

header_struct = struct.Struct(">4sHHI")
HEADER_SIZE = header_struct.size

MAX_HASH_COUNT = 0xFFFF
MAX_BIT_COUNT = 0xFFFFFFFF


def _pack_header(bloom: BloomFilter) -> bytes:
    if bloom.hash_count > MAX_HASH_COUNT:
        raise FormatError(f"hash_count {bloom.hash_count} does not fit in 16 bits")
    if bloom.bit_count > MAX_BIT_COUNT:
        raise FormatError(f"bit_count {bloom.bit_count} does not fit in 32 bits")
    return header_struct.pack(MAGIC, VERSION, bloom.hash_count, bloom.bit_count)


def _unpack_header(header: bytes) -> Tuple[int, int]:
    """Return ``(hash_count, bit_count)`` from a 12-byte header."""
    if len(header) < HEADER_SIZE:
        raise FormatError(
            f"truncated header: expected {HEADER_SIZE} bytes, got {len(header)}"
        )
    magic, version, hash_count, bit_count = header_struct.unpack_from(header)
    if magic != MAGIC:
        raise FormatError(f"bad magic {magic!r}, expected {MAGIC!r}")
    if version != VERSION:
        raise FormatError(f"unsupported format version {version}")
    return hash_count, bit_count


def _build(hash_count: int, bit_count: int, payload: bytes) -> BloomFilter:
    expected = (bit_count + 7) // 8
    if len(payload) < expected:
        raise FormatError(
            f"truncated bitset: expected {expected} bytes for {bit_count} bits, "
            f"got {len(payload)}"
        )
    bloom = BloomFilter.from_raw(bit_count, payload[:expected], hash_count)
    logger.debug("bloom_filter_decoded", bit_count=bit_count, hash_count=hash_count)
    return bloom


def encode(bloom: BloomFilter) -> bytes:
    """Serialize ``bloom`` to bytes."""
    data = _pack_header(bloom) + bloom.bit_array
    logger.debug(
        "bloom_filter_encoded",
        bit_count=bloom.bit_count,
        hash_count=bloom.hash_count,
        size=len(data),
    )
    return data


def decode(data: Union[bytes, bytearray, memoryview]) -> BloomFilter:
    """Rebuild a filter from :func:`encode` output.

    Bytes after the bitset are ignored.

    Raises:
        FormatError: On a bad magic or version, or truncated input.
    """
    data = bytes(data)
    hash_count, bit_count = _unpack_header(data[:HEADER_SIZE])
    return _build(hash_count, bit_count, data[HEADER_SIZE:])


def dump(bloom: BloomFilter, fp: BinaryIO) -> None:
    """Write ``bloom`` to the binary stream ``fp``."""
    fp.write(encode(bloom))


def load(fp: BinaryIO) -> BloomFilter:
    """Read one filter from the binary stream ``fp``.

    Reads exactly the header and the bitset it declares.
    """
    hash_count, bit_count = _unpack_header(fp.read(HEADER_SIZE))
    return _build(hash_count, bit_count, fp.read((bit_count + 7) // 8))


def save(bloom: BloomFilter, path: Union[str, os.PathLike]) -> None:
    """Write ``bloom`` to ``path``, replacing any existing file."""
    try:
        with open(path, "wb") as f:
            dump(bloom, f)
    except OSError as exc:
        logger.warning("bloom_filter_format_error", path=str(path), error=str(exc))
        raise FormatError(f"could not write file: {path}") from exc


def open_filter(path: Union[str, os.PathLike]) -> BloomFilter:
    """Read a filter previously written with :func:`save`."""
    try:
        with open(path, "rb") as f:
            return load(f)
    except OSError as exc:
        logger.warning("bloom_filter_format_error", path=str(path), error=str(exc))
        raise FormatError(f"could not read file: {path}") from exc
    except FormatError as exc:
        logger.warning("bloom_filter_format_error", path=str(path), error=str(exc))
        raise
