"""
Implements the binary Merkle tree used by the multi-use signature scheme.

### Usage of Merkle Trees: Aggregating Keys

A Merkle tree aggregates many **one-time public keys** (the leaves of the
tree) into a single, compact **public key** (the root of the tree).

A verifier who knows only the root can be given a small proof (an
"authentication path") to efficiently verify that a specific one-time
public key is a legitimate part of the committed set.

### Padding

The leaf layer is padded up to the next power of two with a fixed sentinel
(`Hasher.padding()`), so every node always has a sibling. The sentinel is
domain-separated from real leaves and cannot be mistaken for one.
"""

from __future__ import annotations

import hmac
from enum import IntEnum
from typing import List, Sequence

from pydantic import Field, model_validator

from hashsig.types import IndexOutOfRange, StrictBaseModel

from ..hashing import Digest, Hasher


def tree_height(num_leaves: int) -> int:
    """Returns the height of a tree over `num_leaves` leaves padded to a power of two."""
    return (num_leaves - 1).bit_length()


class Side(IntEnum):
    """The side of its parent that a sibling node occupies."""

    LEFT = 0
    RIGHT = 1


class PathNode(StrictBaseModel):
    """One step of an authentication path."""

    sibling: Digest
    """The sibling of the node on the path at this level."""
    side: Side
    """Which side of the parent the sibling sits on."""


class AuthPath(StrictBaseModel):
    """
    A Merkle authentication path.

    This object contains the minimal proof required to connect a specific leaf
    to the Merkle root: one sibling per level, from the leaf up to (but not
    including) the root. Its length is the tree height.
    """

    nodes: tuple[PathNode, ...]
    """Sibling entries, from bottom to top."""

    def __len__(self) -> int:
        """Return the number of levels covered by the path."""
        return len(self.nodes)


class HashTree(StrictBaseModel):
    """
    A complete binary Merkle tree over an ordered sequence of leaf digests.

    Layers are stored bottom-up: `layers[0]` is the padded leaf layer and
    `layers[-1]` holds the root alone. Built once, immutable afterwards.
    """

    num_leaves: int = Field(ge=1)
    """The number of real (non-padding) leaves."""

    layers: tuple[tuple[Digest, ...], ...]
    """Every layer of the tree, from the padded leaves up to the root."""

    @model_validator(mode="after")
    def validate_shape(self) -> "HashTree":
        if not self.layers or len(self.layers[-1]) != 1:
            raise ValueError("The highest layer must hold exactly one node (the root).")
        for lower, upper in zip(self.layers, self.layers[1:]):
            if len(lower) != 2 * len(upper):
                raise ValueError("Each layer must hold twice as many nodes as the one above.")
        if len(self.layers[0]) != 1 << tree_height(self.num_leaves):
            raise ValueError("The leaf layer must be the least power of two covering the leaves.")

        length = len(self.root())
        if any(len(node) != length for layer in self.layers for node in layer):
            raise ValueError("Every node must have the digest length of the root.")
        return self

    @classmethod
    def build(cls, hasher: Hasher, leaves: Sequence[Digest]) -> HashTree:
        """
        Builds a new Merkle tree from an ordered sequence of leaf hashes.

        ### Construction Algorithm

        1.  **Padding**: Extend the leaves with the padding sentinel up to the
            next power of two.

        2.  **Parent Generation**: Group the current layer into adjacent
            `(left, right)` pairs and hash each pair into a parent. The pairing
            order follows the original leaf order and is never swapped.

        3.  **Termination**: Repeat until a layer with a single node remains.
            That node is the root.

        Args:
            hasher: The domain-separated hash function.
            leaves: The leaf digests, in order. At least one is required.

        Returns:
            The fully constructed `HashTree`.
        """
        if len(leaves) == 0:
            raise ValueError("Cannot build a Merkle tree without leaves.")

        width = 1 << tree_height(len(leaves))
        current: List[Digest] = list(leaves) + [hasher.padding()] * (width - len(leaves))

        layers = [tuple(current)]
        while len(current) > 1:
            current = [
                hasher.node(left, right)
                for left, right in zip(current[0::2], current[1::2], strict=True)
            ]
            layers.append(tuple(current))

        return cls(num_leaves=len(leaves), layers=tuple(layers))

    @property
    def height(self) -> int:
        """The number of levels between the leaves and the root."""
        return len(self.layers) - 1

    def root(self) -> Digest:
        """Extracts the root digest, which serves as the public commitment."""
        return self.layers[-1][0]

    def path(self, index: int) -> AuthPath:
        """
        Computes the authentication path for a leaf.

        The algorithm "climbs" the tree from the leaf level to the root. At
        each level, the sibling is found by flipping the last bit of the
        current position, and its side is recorded.

        Args:
            index: The position of the leaf among the real leaves.

        Returns:
            An `AuthPath` with one entry per level.

        Raises:
            IndexOutOfRange: If `index` does not address a real leaf.
        """
        if not 0 <= index < self.num_leaves:
            raise IndexOutOfRange(index, self.num_leaves)

        nodes: List[PathNode] = []
        position = index
        for layer in self.layers[:-1]:
            sibling_position = position ^ 1
            side = Side.RIGHT if position % 2 == 0 else Side.LEFT
            nodes.append(PathNode(sibling=layer[sibling_position], side=side))
            position //= 2

        return AuthPath(nodes=tuple(nodes))


def verify_path(
    hasher: Hasher,
    leaf: Digest,
    index: int,
    path: AuthPath,
    root: Digest,
) -> bool:
    """
    Verifies a Merkle authentication path against a known, trusted root.

    ### Verification Algorithm

    1.  **Bottom-Up Reconstruction**: Starting from `leaf`, combine the current
        node with each sibling of the path, placing the sibling on its
        indicated side and hashing with the node domain.

    2.  **Side Consistency**: Each indicated side must agree with the
        corresponding bit of `index`. A path that claims a different position
        than `index` is rejected.

    3.  **Final Comparison**: The path is valid if and only if the
        reconstructed node equals `root`.

    Args:
        hasher: The domain-separated hash function.
        leaf: The leaf digest being proven.
        index: The position the leaf is claimed to occupy.
        path: The authentication path.
        root: The trusted root.

    Returns:
        `True` if the path is valid and reconstructs the root, `False` otherwise.

    Raises:
        IndexOutOfRange: If `index` cannot be addressed by a path of this length.
    """
    limit = 1 << len(path)
    if not 0 <= index < limit:
        raise IndexOutOfRange(index, limit)

    consistent = True
    current = leaf
    position = index
    for node in path.nodes:
        expected_side = Side.RIGHT if position % 2 == 0 else Side.LEFT
        consistent &= node.side == expected_side

        if node.side == Side.RIGHT:
            current = hasher.node(current, node.sibling)
        else:
            current = hasher.node(node.sibling, current)
        position //= 2

    return consistent and hmac.compare_digest(current, root)
