"""
Defines the domain-separated hash function used by both schemes.

### The Problem: Hash Function Overload

A single hash function is used for several different purposes:
1.  Digesting the **message** before signing.
2.  Committing to each **one-time secret** in the public key.
3.  Hashing a one-time public key into a **Merkle leaf**.
4.  Hashing pairs of nodes to build the **Merkle tree**.

If we simply called `hash(data)` for all these cases, an output in one
context could be replayed as a valid input in another. For example, a tree
node could be passed off as a message digest, opening the door to forgeries.

### The Solution: Domain Tags

Every call is `hash(domain, data)`, where `domain` is a fixed one-byte tag
unique to its context. Because all tags have the same length and are
pairwise distinct, inputs from different contexts can never coincide.

The underlying function is BLAKE3 in extendable-output mode, read out to
`DIGEST_LENGTH` bytes.
"""

from __future__ import annotations

import blake3
from pydantic import model_validator

from hashsig.types import StrictBaseModel

from .constants import (
    DOMAIN_LEAF,
    DOMAIN_MESSAGE,
    DOMAIN_NODE,
    DOMAIN_PADDING,
    DOMAIN_SECRET,
    PROD_CONFIG,
    TARGET_CONFIG,
    TEST_CONFIG,
    HashSigConfig,
)
from .types import Digest, Secret

DOMAINS: frozenset[bytes] = frozenset(
    [DOMAIN_MESSAGE, DOMAIN_SECRET, DOMAIN_LEAF, DOMAIN_NODE, DOMAIN_PADDING]
)
"""Every domain tag the hasher accepts."""


class Hasher(StrictBaseModel):
    """An instance of the domain-separated hash function for a given config."""

    config: HashSigConfig
    """Configuration parameters for the hasher."""

    @model_validator(mode="after")
    def enforce_strict_types(self) -> "Hasher":
        """Reject subclasses to prevent type confusion attacks."""
        if type(self.config) is not HashSigConfig:
            raise TypeError("config must be exactly HashSigConfig, not a subclass")
        return self

    def apply(self, domain: bytes, data: bytes) -> bytes:
        """
        Hashes `data` within the context identified by `domain`.

        Computes `BLAKE3(domain || data)` with an output of
        `DIGEST_LENGTH` bytes. Pure and deterministic.

        Args:
            domain: One of the domain tags from `constants`.
            data: Arbitrary input bytes.

        Returns:
            The raw digest bytes.

        Raises:
            ValueError: If `domain` is not a known domain tag.
        """
        if domain not in DOMAINS:
            raise ValueError(f"Unknown hash domain: {domain!r}")
        return blake3.blake3(domain + data).digest(length=self.config.DIGEST_LENGTH)

    def message(self, message: bytes) -> Digest:
        """Digests a message of any length before it is signed or verified."""
        return Digest(self.apply(DOMAIN_MESSAGE, message))

    def commit(self, secret: Secret) -> Digest:
        """Computes the public commitment to a one-time secret."""
        return Digest(self.apply(DOMAIN_SECRET, secret))

    def leaf(self, encoded_public_key: bytes) -> Digest:
        """Hashes an encoded one-time public key into a Merkle leaf."""
        return Digest(self.apply(DOMAIN_LEAF, encoded_public_key))

    def node(self, left: Digest, right: Digest) -> Digest:
        """
        Hashes two sibling nodes into their parent.

        The order is significant: swapping `left` and `right` yields a
        different parent.
        """
        return Digest(self.apply(DOMAIN_NODE, left + right))

    def padding(self) -> Digest:
        """
        Returns the sentinel that fills unused leaf slots.

        The sentinel is `hash(DOMAIN_PADDING, b"")`: fixed and deterministic,
        and distinct from any real leaf because of the domain tag.
        """
        return Digest(self.apply(DOMAIN_PADDING, b""))


PROD_HASHER = Hasher(config=PROD_CONFIG)
"""An instance configured for production-level parameters."""

TEST_HASHER = Hasher(config=TEST_CONFIG)
"""A lightweight instance for test environments."""

TARGET_HASHER = PROD_HASHER if TARGET_CONFIG is PROD_CONFIG else TEST_HASHER
"""The instance matching the active environment."""
