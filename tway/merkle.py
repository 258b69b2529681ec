"""Merkle tree construction over serialized transactions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from tway.hashing import sha256


@dataclass
class MerkleNode:
    """A node of a Merkle tree; leaves have no children."""

    data: bytes
    left: MerkleNode | None = None
    right: MerkleNode | None = None


def new_merkle_node(
    left: MerkleNode | None, right: MerkleNode | None, data: bytes
) -> MerkleNode:
    """Build a leaf from data, or an inner node from two children."""
    if left is None and right is None:
        return MerkleNode(sha256(data))
    if left is None or right is None:
        raise ValueError("an inner node needs both children")
    return MerkleNode(sha256(left.data + right.data), left, right)


def merkle_root(data: Sequence[bytes]) -> MerkleNode:
    """Return the root of the tree over data, duplicating the last node of odd levels."""
    if not data:
        raise ValueError("cannot build a Merkle tree without data")
    nodes = [new_merkle_node(None, None, item) for item in data]
    if len(nodes) % 2:
        nodes.append(nodes[-1])
    while len(nodes) > 1:
        if len(nodes) % 2:
            nodes.append(nodes[-1])
        nodes = [
            new_merkle_node(left, right, b"")
            for left, right in zip(nodes[::2], nodes[1::2])
        ]
    return nodes[0]


def number_of_two_power(n: int) -> int:
    """Return one more than the number of doublings needed to reach n from 1."""
    count = 0
    power = 1
    while n > power:
        count += 1
        power *= 2
    return count + 1