"""
Tests for the partition constraint.
"""

import pytest

from fleetid.core.ids import (
    HashCodeKeyPartitioner,
    IdGenerator,
    PartitionValidator,
)
from fleetid.core.ids.partition import string_hash_code


class TestStringHashCode:
    """Tests for string_hash_code."""

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("", 0),
            ("a", 97),
            ("abc", 96354),
            ("hello", 99162322),
            ("polygenelubricants", -2147483648),
        ],
    )
    def test_known_values(self, key, expected):
        assert string_hash_code(key) == expected

    def test_stays_in_signed_32_bit_range(self):
        value = string_hash_code("TEST2401151030001230007005" * 10)
        assert -(2**31) <= value < 2**31


class TestHashCodeKeyPartitioner:
    """Tests for HashCodeKeyPartitioner."""

    def test_partition_in_range(self):
        partitioner = HashCodeKeyPartitioner(8)
        for key in ["", "abc", "hello", "polygenelubricants", "ORD2401151030001230007005"]:
            assert 0 <= partitioner.partition(key) < 8

    def test_partition_of_known_key(self):
        assert HashCodeKeyPartitioner(10).partition("abc") == 4

    @pytest.mark.parametrize("num_partitions", [0, -3])
    def test_invalid_partition_count(self, num_partitions):
        with pytest.raises(ValueError):
            HashCodeKeyPartitioner(num_partitions)


class TestPartitionValidator:
    """Tests for PartitionValidator."""

    def test_accepts_matching_partition(self, identifier_factory):
        identifier = identifier_factory()
        partitioner = HashCodeKeyPartitioner(16)
        expected = partitioner.partition(identifier.text)

        assert PartitionValidator(expected, partitioner).is_valid(identifier)
        assert not PartitionValidator((expected + 1) % 16, partitioner).is_valid(identifier)

    def test_is_retryable(self):
        assert PartitionValidator(0, HashCodeKeyPartitioner(2)).fail_fast() is False

    def test_generated_id_lands_in_partition(self):
        partitioner = HashCodeKeyPartitioner(4)
        generator = IdGenerator(node=5)

        for partition in range(4):
            identifier = generator.generate_with_constraints(
                "ORD", [PartitionValidator(partition, partitioner)]
            )
            assert identifier is not None
            assert partitioner.partition(identifier.text) == partition
