"""
Defines the core interface for the Lamport one-time signature scheme.

Home of the high-level functions (`key_gen`, `sign`, `verify`).
"""

from __future__ import annotations

import hmac
import logging
from typing import List, Tuple

from hashsig.types import AlreadyUsedKey

from ..hashing import (
    PROD_CONFIG,
    PROD_HASHER,
    PROD_RAND,
    TARGET_CONFIG,
    TARGET_HASHER,
    TARGET_RAND,
    TEST_CONFIG,
    TEST_HASHER,
    TEST_RAND,
    HashSigConfig,
    Hasher,
    Rand,
)
from .containers import PublicKey, SecretKey, Signature

logger = logging.getLogger(__name__)


def digest_bits(digest: bytes) -> List[int]:
    """
    Splits a digest into its bits.

    Bit `i` is bit `i % 8` of byte `i // 8`, least significant bit first.

    Args:
        digest: The digest to split.

    Returns:
        A list of `8 * len(digest)` integers, each 0 or 1.
    """
    return [(digest[i // 8] >> (i % 8)) & 1 for i in range(8 * len(digest))]


class LamportScheme:
    """Instance of the Lamport one-time signature scheme for a given config."""

    def __init__(self, config: HashSigConfig, hasher: Hasher, rand: Rand):
        """Initializes the scheme with a specific parameter set."""
        self.config = config
        self.hasher = hasher
        self.rand = rand

    def _check_key(self, sk: SecretKey) -> None:
        if sk.digest_length != self.config.DIGEST_LENGTH:
            raise ValueError(
                f"Secret key has {sk.digest_length}-byte secrets, "
                f"this scheme uses {self.config.DIGEST_LENGTH}"
            )

    def key_gen(self) -> Tuple[PublicKey, SecretKey]:
        """
        Generates a new one-time key pair.

        This is a **randomized** algorithm. For every bit position it draws
        two fresh secrets from the CSPRNG, one for each possible bit value,
        and commits to each with the hash function.

        Key generation has no side effects besides consuming entropy, so it
        can be called once per message.

        Returns:
            A tuple containing the `PublicKey` and a fresh `SecretKey`.

        Raises:
            RandomnessFailure: If the secure random source fails.
        """
        num_bits = self.config.DIGEST_BITS
        zeros = tuple(self.rand.secret() for _ in range(num_bits))
        ones = tuple(self.rand.secret() for _ in range(num_bits))

        sk = SecretKey(zeros=zeros, ones=ones)
        return self.public_key(sk), sk

    def public_key(self, sk: SecretKey) -> PublicKey:
        """Derives the public key of a secret key by committing to every secret."""
        self._check_key(sk)
        return PublicKey(
            zeros=tuple(self.hasher.commit(secret) for secret in sk.zeros),
            ones=tuple(self.hasher.commit(secret) for secret in sk.ones),
        )

    def sign(self, sk: SecretKey, message: bytes) -> Signature:
        """
        Signs a message, consuming the secret key.

        **CRITICAL SECURITY WARNING**: A one-time secret key must **NEVER** sign
        two different messages. The key is marked consumed before any secret is
        selected, and a second call fails.

        ### Signing Algorithm

        1.  **Consume**: Atomically flip the key from fresh to consumed.
        2.  **Digest**: Hash the message in the message domain. Messages of any
            length are accepted; only the digest bits are used.
        3.  **Reveal**: For each bit position `i`, reveal `ones[i]` if the bit
            is 1 and `zeros[i]` otherwise.

        Args:
            sk: The secret key to use for signing.
            message: The message to be signed.

        Returns:
            The resulting `Signature`.

        Raises:
            AlreadyUsedKey: If `sk` was already consumed.
            ValueError: If `sk` belongs to another parameter set.
        """
        self._check_key(sk)
        try:
            sk.consume()
        except AlreadyUsedKey:
            logger.error("Refused to sign with a one-time key that was already used")
            raise

        digest = self.hasher.message(message)
        revealed = tuple(
            sk.ones[i] if bit else sk.zeros[i] for i, bit in enumerate(digest_bits(digest))
        )
        return Signature(revealed=revealed)

    def verify(self, pk: PublicKey, message: bytes, sig: Signature) -> bool:
        """
        Verifies a one-time signature against a public key and message.

        This is a **deterministic** algorithm.

        Every position is checked with a constant-time comparison and the loop
        never exits early, so a failed verification does not reveal which
        position mismatched.

        Args:
            pk: The public key to verify against.
            message: The message that was supposedly signed.
            sig: The signature to be verified.

        Returns:
            `True` if every revealed secret matches its commitment, `False` otherwise.
        """
        n = self.config.DIGEST_LENGTH
        if pk.digest_length != n or sig.digest_length != n:
            logger.debug("Key or signature does not match the %d-byte parameter set", n)
            return False

        digest = self.hasher.message(message)

        valid = True
        for i, bit in enumerate(digest_bits(digest)):
            expected = pk.ones[i] if bit else pk.zeros[i]
            actual = self.hasher.commit(sig.revealed[i])
            valid &= hmac.compare_digest(actual, expected)
        return valid


PROD_LAMPORT_SCHEME = LamportScheme(PROD_CONFIG, PROD_HASHER, PROD_RAND)
"""An instance configured for production-level parameters."""

TEST_LAMPORT_SCHEME = LamportScheme(TEST_CONFIG, TEST_HASHER, TEST_RAND)
"""A lightweight instance for test environments."""

TARGET_LAMPORT_SCHEME = LamportScheme(TARGET_CONFIG, TARGET_HASHER, TARGET_RAND)
"""The instance matching the active environment."""
