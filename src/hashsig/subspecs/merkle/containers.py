"""
Data containers for the multi-use Merkle signature scheme.

This module defines the high-level containers: PublicKey, Signature, and SecretKey.
"""

from __future__ import annotations

from threading import Lock
from typing import Any

from pydantic import Field, PrivateAttr, model_validator

from hashsig.types import AlreadyUsedKey, IndexOutOfRange, KeyExhausted, StrictBaseModel

from .. import lamport
from ..hashing import Digest
from .tree import AuthPath, HashTree


class PublicKey(StrictBaseModel):
    """
    The public-facing component of a multi-use key pair.

    This is the data a verifier needs to check signatures. It is compact, safe
    to distribute publicly, and acts as the signer's identity.
    """

    root: Digest
    """The Merkle root, which commits to every one-time public key."""
    num_leaves: int = Field(ge=1)
    """The number of one-time leaves committed to by the root."""


class Signature(StrictBaseModel):
    """
    A signature produced by the multi-use `sign` function.

    It bundles the one-time signature with everything a verifier needs to
    tie the one-time public key back to the published root.
    """

    index: int = Field(ge=0)
    """The position of the leaf that produced this signature."""
    leaf_public_key: lamport.PublicKey
    """The one-time public key of that leaf."""
    signature: lamport.Signature
    """The one-time signature over the message."""
    path: AuthPath
    """The authentication path proving the leaf's inclusion in the Merkle tree."""


class LeafCounter:
    """
    The leaf counter of a multi-use secret key, with its lock.

    Copies of a key hold the same leaves, so they must also hold the same
    counter: copying (shallow or deep) returns this very object.
    """

    def __init__(self) -> None:
        self.next_index = 0
        self.lock = Lock()

    def __copy__(self) -> "LeafCounter":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "LeafCounter":
        return self


class SecretKey(StrictBaseModel):
    """
    The private component of a multi-use key pair. **MUST BE KEPT CONFIDENTIAL.**

    It owns one one-time secret key per leaf and the tree over their hashed
    public keys. The leaf counter `next_index` is the only mutable state of
    the scheme: it only ever grows, and every claim happens under a lock so
    that two signers can never obtain the same leaf.

    `model_copy()`, `copy.copy` and `copy.deepcopy` share the counter (and
    the consumed tags of the leaves) with the original key.

    The counter lives in memory only. Callers that keep the key across
    process restarts must persist `next_index` (see `set_next_index`)
    before releasing a signature.
    """

    leaves: tuple[lamport.SecretKey, ...]
    """The one-time secret keys, in leaf order."""

    leaf_public_keys: tuple[lamport.PublicKey, ...]
    """The matching one-time public keys, in leaf order."""

    tree: HashTree
    """The Merkle tree over the hashed one-time public keys."""

    _counter: LeafCounter = PrivateAttr(default_factory=LeafCounter)

    @model_validator(mode="after")
    def validate_leaf_count(self) -> "SecretKey":
        if not len(self.leaves) == len(self.leaf_public_keys) == self.tree.num_leaves:
            raise ValueError("Leaves, leaf public keys and tree must agree on the leaf count.")

        length = self.digest_length
        if any(leaf.digest_length != length for leaf in self.leaves) or any(
            pk.digest_length != length for pk in self.leaf_public_keys
        ):
            raise ValueError("Leaves and tree must share one digest length.")
        return self

    @property
    def digest_length(self) -> int:
        """The digest length of the parameter set this key belongs to."""
        return len(self.tree.root())

    @property
    def num_leaves(self) -> int:
        """The total number of one-time leaves."""
        return self.tree.num_leaves

    @property
    def next_index(self) -> int:
        """The index of the next leaf that will be claimed."""
        return self._counter.next_index

    @property
    def remaining(self) -> int:
        """How many signatures this key can still produce."""
        return self.num_leaves - self._counter.next_index

    def public_key(self) -> PublicKey:
        """Returns the public key committed to by this secret key."""
        return PublicKey(root=self.tree.root(), num_leaves=self.num_leaves)

    def claim_next_index(self) -> int:
        """
        Atomically reads and increments the leaf counter.

        Returns:
            The claimed leaf index. No other caller will ever receive it.

        Raises:
            KeyExhausted: If every leaf has already been claimed.
        """
        with self._counter.lock:
            index = self._counter.next_index
            if index >= self.num_leaves:
                raise KeyExhausted(self.num_leaves)
            self._counter.next_index = index + 1
            return index

    def set_next_index(self, value: int) -> None:
        """
        Restores the leaf counter from external storage.

        Every leaf below `value` is marked consumed so it can never sign.

        Args:
            value: The persisted counter, in `[next_index, num_leaves]`.

        Raises:
            AlreadyUsedKey: If `value` would move the counter backwards.
            IndexOutOfRange: If `value` exceeds the number of leaves.
        """
        with self._counter.lock:
            if value < self._counter.next_index:
                raise AlreadyUsedKey(
                    f"Leaf counter cannot move backwards from {self._counter.next_index} to {value}"
                )
            if value > self.num_leaves:
                raise IndexOutOfRange(value, self.num_leaves + 1)

            for leaf in self.leaves[self._counter.next_index : value]:
                leaf.mark_consumed()
            self._counter.next_index = value

    def __repr__(self) -> str:
        """Return a representation that does not list the secrets."""
        return f"SecretKey(num_leaves={self.num_leaves}, next_index={self._counter.next_index})"
