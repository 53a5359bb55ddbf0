"""Tests for BloomFilter sizing, insertion and queries."""

import math

import pytest

from bloomers.bloom_filter import BloomFilter, optimal_parameters
from bloomers.errors import InvalidArgument
from bloomers.murmur import bit_positions, hash_pair


def basic_init(expected_items: int = 100, false_positive_rate: float = 0.01) -> BloomFilter:
    return BloomFilter(expected_items, false_positive_rate)


def test_basic_insert_check():
    bloom = basic_init()

    bloom.insert("apple")
    assert bloom.possibly_contains("apple")
    assert not bloom.possibly_contains("banana")

    bloom.insert("orange")
    assert bloom.possibly_contains("orange")


def test_empty_check():
    bloom = basic_init()

    assert not bloom.possibly_contains("some_value")
    assert not bloom.possibly_contains("other_value")


def test_high_failure_rate():
    # Two bits and zero hash functions: every query is vacuously true.
    bloom = basic_init(3, 0.70)
    assert bloom.bit_count == 2
    assert bloom.hash_count == 0

    bloom.insert("apple")
    bloom.insert("elephant")
    bloom.insert("parrot")
    assert bloom.possibly_contains("orange")


def test_invalid_expected_items():
    with pytest.raises(InvalidArgument) as excinfo:
        basic_init(-1, 0.01)
    assert excinfo.value.name == "expected_items"
    assert "Expected items should be positive: -1" in str(excinfo.value)


@pytest.mark.parametrize("rate", [1.1, -1.0, math.nan])
def test_invalid_false_positive_rate(rate):
    with pytest.raises(InvalidArgument) as excinfo:
        basic_init(100, rate)
    assert excinfo.value.name == "false_positive_rate"


def test_invalid_argument_is_value_error():
    with pytest.raises(ValueError):
        basic_init(-5, 0.5)


@pytest.mark.parametrize(
    "n, p, expected",
    [
        (100, 0.01, (958, 7)),
        (3, 0.70, (2, 0)),
        (0, 0.01, (0, 0)),
        (10, 1.0, (0, 0)),
        (1000, 0.001, (14377, 10)),
    ],
)
def test_optimal_parameters(n, p, expected):
    assert optimal_parameters(n, p) == expected


def test_zero_rate_is_clamped_to_finite_size():
    bit_count, hash_count = optimal_parameters(10, 0.0)
    assert bit_count > 0
    assert hash_count > 0


@pytest.mark.parametrize("n", [0, 1, 2, 7, 50, 999])
@pytest.mark.parametrize("p", [0.0, 0.001, 0.25, 0.5, 0.999, 1.0])
def test_valid_parameters_construct(n, p):
    bloom = BloomFilter(n, p)
    assert bloom.bit_count >= 0
    assert bloom.hash_count >= 0
    assert len(bloom.bit_array) == (bloom.bit_count + 7) // 8


def test_from_capacity_matches_constructor():
    assert BloomFilter.from_capacity(100, 0.01) == BloomFilter(100, 0.01)


def test_no_false_negatives():
    bloom = basic_init(500, 0.01)
    words = [f"word-{i}" for i in range(800)]  # past capacity on purpose
    bloom.update(words)
    assert all(word in bloom for word in words)


def test_insert_sets_derived_positions():
    bloom = basic_init()
    bloom.insert("apple")
    positions = set(bit_positions(*hash_pair("apple"), bloom.hash_count, bloom.bit_count))
    assert {i for i in range(bloom.bit_count) if bloom.get_bit(i)} == positions
    assert bloom.count_set_bits() == len(positions)


def test_insert_is_idempotent():
    bloom = basic_init()
    bloom.insert("apple")
    before = bloom.bit_array
    bloom.insert("apple")
    assert bloom.bit_array == before


def test_text_and_bytes_hash_alike():
    bloom = basic_init()
    bloom.add(b"apple")
    assert "apple" in bloom


def test_saturated_filter_degrades_to_true():
    bloom = basic_init(2, 0.5)
    bloom.update(f"item{i}" for i in range(200))
    assert all(bloom.bits)
    assert bloom.possibly_contains("never inserted")
    assert bloom.estimated_false_positive_rate() == 1.0


def test_estimated_false_positive_rate_empty():
    assert basic_init().estimated_false_positive_rate() == 0.0


def test_inspect():
    bloom = basic_init(3, 0.70)
    assert bloom.inspect() == "bits: 2, n_hashes: 0, bitset: 00"
    assert bloom.inspect(full=False) == "bits: 2, n_hashes: 0, bitset: 2"


def test_inspect_renders_index_order():
    bloom = BloomFilter.from_raw(10, [True, False, False, True, False, False, False, False, False, True], 2)
    assert bloom.inspect(full=True) == "bits: 10, n_hashes: 2, bitset: 1001000001"


def test_from_raw_bool_sequence():
    bloom = BloomFilter.from_raw(3, [True, False, True], 1)
    assert bloom.bit_count == 3
    assert bloom.hash_count == 1
    assert bloom.bits == [True, False, True]
    assert bloom.bit_array == bytes([0b10100000])


def test_from_raw_packed_clears_padding():
    bloom = BloomFilter.from_raw(3, b"\xff", 1)
    assert bloom.bits == [True, True, True]
    assert bloom.bit_array == b"\xe0"


def test_from_raw_copies_storage():
    raw = bytearray(b"\x00\x00")
    bloom = BloomFilter.from_raw(16, raw, 2)
    raw[0] = 0xFF
    assert bloom.bit_array == b"\x00\x00"

    exported = bloom.bit_array
    assert isinstance(exported, bytes)


@pytest.mark.parametrize(
    "bit_count, bits",
    [
        (4, [True, False]),
        (9, b"\x00"),
        (8, b"\x00\x00"),
    ],
)
def test_from_raw_length_mismatch(bit_count, bits):
    with pytest.raises(ValueError):
        BloomFilter.from_raw(bit_count, bits, 1)


def test_from_raw_negative_counts():
    with pytest.raises(ValueError):
        BloomFilter.from_raw(-1, [], 1)


def test_zero_bits_is_total():
    bloom = BloomFilter.from_raw(0, [], 3)
    bloom.insert("apple")
    assert bloom.possibly_contains("anything")
    assert bloom.inspect() == "bits: 0, n_hashes: 3, bitset: "


def test_get_bit_out_of_range():
    bloom = basic_init()
    with pytest.raises(IndexError):
        bloom.get_bit(bloom.bit_count)
    with pytest.raises(IndexError):
        bloom.get_bit(-1)


def test_len_eq_repr():
    a = basic_init()
    b = basic_init()
    assert len(a) == 958
    assert a == b
    a.insert("apple")
    assert a != b
    assert a != "not a filter"
    assert repr(a) == "BloomFilter(bit_count=958, hash_count=7)"


def test_parameters_are_read_only():
    bloom = basic_init()
    with pytest.raises(AttributeError):
        bloom.bit_count = 5
    with pytest.raises(AttributeError):
        bloom.hash_count = 5


def test_insert_rejects_integers():
    bloom = basic_init()
    with pytest.raises(TypeError):
        bloom.insert(5)
    with pytest.raises(TypeError):
        bloom.possibly_contains(5)
    assert bloom.count_set_bits() == 0
