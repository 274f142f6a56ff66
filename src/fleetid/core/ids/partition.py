"""
Partition-based id constraint.

Some stores shard by a hash of the key. ``PartitionValidator`` lets a caller
ask for an id that lands in a specific shard: candidates that hash
elsewhere are rejected (retryably) and a new one is drawn.

The default partitioner uses the classic 31-multiplier 32-bit string hash
over UTF-16 code units. Unlike Python's ``hash`` it is stable across
processes and matches what JVM services compute for the same string.

Example:
    >>> partitioner = HashCodeKeyPartitioner(num_partitions=8)
    >>> validator = PartitionValidator(partition=3, partitioner=partitioner)
    >>> identifier = generate_with_constraints("ORD", [validator])  # doctest: +SKIP
    >>> partitioner.partition(identifier.text)  # doctest: +SKIP
    3
"""

from __future__ import annotations

from typing import Protocol

from fleetid.core.ids.constraints import IdValidationConstraint
from fleetid.core.ids.models import Identifier


class KeyPartitioner(Protocol):
    """Maps a key to a partition number."""

    def partition(self, key: str) -> int: ...


def string_hash_code(key: str) -> int:
    """
    32-bit polynomial hash of ``key`` (``s[0]*31^(n-1) + ... + s[n-1]``).

    Example:
        >>> string_hash_code("abc")
        96354
    """
    encoded = key.encode("utf-16-be")
    h = 0
    for i in range(0, len(encoded), 2):
        h = (31 * h + int.from_bytes(encoded[i : i + 2], "big")) & 0xFFFFFFFF
    # Reinterpret as signed 32-bit
    if h >= 0x80000000:
        h -= 0x100000000
    return h


class HashCodeKeyPartitioner:
    """Partitions keys by ``abs(string_hash_code(key)) % num_partitions``."""

    def __init__(self, num_partitions: int) -> None:
        if num_partitions < 1:
            raise ValueError(f"num_partitions must be >= 1, got {num_partitions}")
        self.num_partitions = num_partitions

    def partition(self, key: str) -> int:
        return abs(string_hash_code(key)) % self.num_partitions


class PartitionValidator(IdValidationConstraint):
    """Accepts ids whose text falls into ``partition``."""

    def __init__(self, partition: int, partitioner: KeyPartitioner) -> None:
        self.partition = partition
        self.partitioner = partitioner

    def is_valid(self, identifier: Identifier) -> bool:
        return self.partitioner.partition(identifier.text) == self.partition

    def __repr__(self) -> str:
        return f"PartitionValidator(partition={self.partition})"


__all__ = [
    "HashCodeKeyPartitioner",
    "KeyPartitioner",
    "PartitionValidator",
    "string_hash_code",
]
