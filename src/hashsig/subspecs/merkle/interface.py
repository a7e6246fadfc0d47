"""
Defines the core interface for the multi-use Merkle signature scheme.

Home of the high-level functions (`key_gen`, `sign`, `verify`).

A multi-use key commits to N independent Lamport key pairs with a Merkle
tree. Each signature consumes the next unused leaf and carries the leaf's
one-time signature together with its authentication path.
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple

from hashsig.types import KeyExhausted

from .. import lamport
from ..hashing import (
    PROD_CONFIG,
    PROD_HASHER,
    TARGET_CONFIG,
    TARGET_HASHER,
    TEST_CONFIG,
    TEST_HASHER,
    Digest,
    Hasher,
    HashSigConfig,
)
from ..lamport import PROD_LAMPORT_SCHEME, TARGET_LAMPORT_SCHEME, TEST_LAMPORT_SCHEME
from .containers import PublicKey, SecretKey, Signature
from .tree import HashTree, tree_height, verify_path

logger = logging.getLogger(__name__)


class MerkleScheme:
    """Instance of the multi-use Merkle signature scheme for a given config."""

    def __init__(
        self,
        config: HashSigConfig,
        hasher: Hasher,
        lamport_scheme: lamport.LamportScheme,
    ):
        """Initializes the scheme with a specific parameter set."""
        self.config = config
        self.hasher = hasher
        self.lamport = lamport_scheme

    def leaf_hash(self, leaf_public_key: lamport.PublicKey) -> Digest:
        """Hashes a one-time public key into its Merkle leaf."""
        return self.hasher.leaf(leaf_public_key.to_bytes())

    def key_gen(self, num_leaves: int) -> Tuple[PublicKey, SecretKey]:
        """
        Generates a new key pair able to sign `num_leaves` messages.

        This is a **randomized** algorithm.

        ### Key Generation Algorithm

        1.  **Generate Leaves**: Create `num_leaves` independent one-time key pairs.
        2.  **Hash Leaves**: Hash every one-time public key in the leaf domain.
        3.  **Build Tree**: Build the Merkle tree over the leaf hashes.
            Its root (with the leaf count) is the public key.

        The leaf counter of the returned secret key starts at 0.

        Args:
            num_leaves: The number of one-time leaves, in `[1, MAX_LEAVES]`.

        Returns:
            A tuple containing the `PublicKey` and `SecretKey`.

        Raises:
            ValueError: If `num_leaves` is out of bounds.
            RandomnessFailure: If the secure random source fails.
        """
        if not 1 <= num_leaves <= self.config.MAX_LEAVES:
            raise ValueError(
                f"Number of leaves must be in [1, {self.config.MAX_LEAVES}], got {num_leaves}"
            )

        leaves = [self.lamport.key_gen() for _ in range(num_leaves)]
        sk = self._assemble(
            leaf_public_keys=[pk for pk, _ in leaves],
            leaf_secret_keys=[sk for _, sk in leaves],
        )

        logger.debug("Generated multi-use key with %d leaves", num_leaves)
        return sk.public_key(), sk

    def restore(self, leaves: Sequence[lamport.SecretKey], next_index: int = 0) -> SecretKey:
        """
        Rebuilds a secret key from stored one-time secret keys and a persisted counter.

        The public keys and the tree are recomputed from the secrets, so the
        restored key commits to the same root as the original one.

        Args:
            leaves: The one-time secret keys, in leaf order.
            next_index: The persisted leaf counter.

        Returns:
            The restored `SecretKey`.

        Raises:
            ValueError: If the leaf count is out of bounds, or a leaf belongs
                to another parameter set.
        """
        if not 1 <= len(leaves) <= self.config.MAX_LEAVES:
            raise ValueError(
                f"Number of leaves must be in [1, {self.config.MAX_LEAVES}], got {len(leaves)}"
            )

        sk = self._assemble(
            leaf_public_keys=[self.lamport.public_key(leaf) for leaf in leaves],
            leaf_secret_keys=list(leaves),
        )
        sk.set_next_index(next_index)
        return sk

    def _assemble(
        self,
        leaf_public_keys: Sequence[lamport.PublicKey],
        leaf_secret_keys: Sequence[lamport.SecretKey],
    ) -> SecretKey:
        tree = HashTree.build(self.hasher, [self.leaf_hash(pk) for pk in leaf_public_keys])
        return SecretKey(
            leaves=tuple(leaf_secret_keys),
            leaf_public_keys=tuple(leaf_public_keys),
            tree=tree,
        )

    def sign(self, sk: SecretKey, message: bytes) -> Signature:
        """
        Signs a message with the next unused leaf.

        **CRITICAL SECURITY WARNING**: The leaf counter is the only thing
        standing between this key and leaf reuse. If the key outlives the
        process, persist `sk.next_index` before publishing the signature.

        ### Signing Algorithm

        1.  **Claim**: Atomically read and increment the leaf counter. Concurrent
            callers always receive distinct leaves.
        2.  **One-Time Signature**: Sign the message with the claimed leaf. The
            leaf enforces single use on its own as well.
        3.  **Merkle Path**: Retrieve the authentication path of the claimed leaf.

        Args:
            sk: The secret key to use for signing.
            message: The message to be signed.

        Returns:
            The resulting `Signature`.

        Raises:
            KeyExhausted: If every leaf has been used.
            AlreadyUsedKey: If the claimed leaf was consumed through another path.
            ValueError: If `sk` belongs to another parameter set.
        """
        if sk.digest_length != self.config.DIGEST_LENGTH:
            raise ValueError(
                f"Secret key has {sk.digest_length}-byte digests, "
                f"this scheme uses {self.config.DIGEST_LENGTH}"
            )

        try:
            index = sk.claim_next_index()
        except KeyExhausted:
            logger.warning("Multi-use key exhausted after %d signatures", sk.num_leaves)
            raise

        logger.debug("Claimed leaf %d of %d", index, sk.num_leaves)

        ots = self.lamport.sign(sk.leaves[index], message)
        return Signature(
            index=index,
            leaf_public_key=sk.leaf_public_keys[index],
            signature=ots,
            path=sk.tree.path(index),
        )

    def verify(self, pk: PublicKey, message: bytes, sig: Signature) -> bool:
        """
        Verifies a multi-use signature against a public key and message.

        This is a **deterministic** algorithm.

        ### Verification Algorithm

        1.  **One-Time Signature**: Verify the embedded one-time signature against
            the embedded leaf public key. Stop here if it fails.
        2.  **Shape**: The leaf index must address a committed leaf and the path
            length must equal the tree height for `pk.num_leaves`.
        3.  **Leaf**: Hash the leaf public key in the leaf domain.
        4.  **Merkle Path**: Reconstruct the root from the leaf and the path, and
            compare it against `pk.root`.

        Args:
            pk: The public key to verify against.
            message: The message that was supposedly signed.
            sig: The signature to be verified.

        Returns:
            `True` if the signature is valid, `False` otherwise.
        """
        if not self.lamport.verify(sig.leaf_public_key, message, sig.signature):
            return False

        if sig.index >= pk.num_leaves or len(sig.path) != tree_height(pk.num_leaves):
            return False

        leaf = self.leaf_hash(sig.leaf_public_key)
        return verify_path(self.hasher, leaf, sig.index, sig.path, pk.root)


PROD_MERKLE_SCHEME = MerkleScheme(PROD_CONFIG, PROD_HASHER, PROD_LAMPORT_SCHEME)
"""An instance configured for production-level parameters."""

TEST_MERKLE_SCHEME = MerkleScheme(TEST_CONFIG, TEST_HASHER, TEST_LAMPORT_SCHEME)
"""A lightweight instance for test environments."""

TARGET_MERKLE_SCHEME = MerkleScheme(TARGET_CONFIG, TARGET_HASHER, TARGET_LAMPORT_SCHEME)
"""The instance matching the active environment."""
