"""
Data containers for the Lamport one-time signature scheme.

This module defines the high-level containers: PublicKey, SecretKey and Signature.
Base byte types (Digest, Secret) are defined in the hashing subspec.
"""

from __future__ import annotations

from threading import Lock
from typing import Any

from pydantic import PrivateAttr, model_validator

from hashsig.types import AlreadyUsedKey, StrictBaseModel

from ..hashing import Digest, Secret


def _check_width(name: str, values: tuple[bytes, ...]) -> int:
    """
    Ensure a per-bit component holds one entry per digest bit.

    Every entry must have the same length `n`, and there must be `8 * n` of
    them. Returns `n`.
    """
    if not values:
        raise ValueError(f"{name} must not be empty")
    length = len(values[0])
    if any(len(value) != length for value in values):
        raise ValueError(f"{name} mixes entries of different lengths")
    if len(values) != 8 * length:
        raise ValueError(f"{name} requires exactly {8 * length} entries, got {len(values)}")
    return length


class PublicKey(StrictBaseModel):
    """
    The public-facing component of a one-time key pair.

    For every bit position `i` of the message digest it holds two
    commitments: `zeros[i]` commits to the secret revealed when the bit is 0
    and `ones[i]` to the one revealed when the bit is 1.
    """

    zeros: tuple[Digest, ...]
    """Commitments to the secrets revealed for 0 bits."""

    ones: tuple[Digest, ...]
    """Commitments to the secrets revealed for 1 bits."""

    @model_validator(mode="after")
    def validate_width(self) -> "PublicKey":
        if _check_width("zeros", self.zeros) != _check_width("ones", self.ones):
            raise ValueError("zeros and ones must have the same digest length")
        return self

    @property
    def digest_length(self) -> int:
        """The digest length of the parameter set this key belongs to."""
        return len(self.zeros[0])

    def to_bytes(self) -> bytes:
        """
        Returns the fixed-size body layout `zeros || ones`.

        This is the byte string hashed into a Merkle leaf, and the body of the
        encoded public key.
        """
        return b"".join(self.zeros) + b"".join(self.ones)


class Signature(StrictBaseModel):
    """
    A signature produced by the one-time `sign` function.

    It reveals exactly one secret per bit position of the message digest.
    """

    revealed: tuple[Secret, ...]
    """The revealed secrets, in bit order."""

    @model_validator(mode="after")
    def validate_width(self) -> "Signature":
        _check_width("revealed", self.revealed)
        return self

    @property
    def digest_length(self) -> int:
        """The digest length of the parameter set this signature belongs to."""
        return len(self.revealed[0])

    def to_bytes(self) -> bytes:
        """Returns the fixed-size body layout: the revealed secrets in bit order."""
        return b"".join(self.revealed)


class UseState:
    """
    The fresh/consumed tag of a one-time secret key, with its lock.

    Copies of a key hold the same secrets, so they must also hold the same
    tag: copying (shallow or deep) returns this very object.
    """

    def __init__(self) -> None:
        self.consumed = False
        self.lock = Lock()

    def __copy__(self) -> "UseState":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "UseState":
        return self


class SecretKey(StrictBaseModel):
    """
    The private component of a one-time key pair. **MUST BE KEPT CONFIDENTIAL.**

    The key can sign exactly one message. It carries a two-state tag,
    fresh or consumed, which is flipped under a lock before any secret is
    revealed. Revealing secrets for two distinct digests leaks enough
    preimages to forge a signature on a third message.

    `model_copy()`, `copy.copy` and `copy.deepcopy` all share the tag with
    the original key: consuming one consumes every copy.
    """

    zeros: tuple[Secret, ...]
    """Secrets revealed for 0 bits."""

    ones: tuple[Secret, ...]
    """Secrets revealed for 1 bits."""

    _state: UseState = PrivateAttr(default_factory=UseState)

    @model_validator(mode="after")
    def validate_width(self) -> "SecretKey":
        if _check_width("zeros", self.zeros) != _check_width("ones", self.ones):
            raise ValueError("zeros and ones must have the same digest length")
        return self

    @property
    def digest_length(self) -> int:
        """The digest length of the parameter set this key belongs to."""
        return len(self.zeros[0])

    @property
    def is_consumed(self) -> bool:
        """Whether this key has already been used (or reserved) for signing."""
        return self._state.consumed

    def consume(self) -> None:
        """
        Atomically moves the key from fresh to consumed.

        Raises:
            AlreadyUsedKey: If the key was already consumed.
        """
        with self._state.lock:
            if self._state.consumed:
                raise AlreadyUsedKey("One-time secret key has already been used to sign")
            self._state.consumed = True

    def mark_consumed(self) -> None:
        """Marks the key consumed without signing. Idempotent."""
        with self._state.lock:
            self._state.consumed = True

    def to_bytes(self) -> bytes:
        """Returns the fixed-size body layout `zeros || ones || consumed flag`."""
        flag = b"\x01" if self.is_consumed else b"\x00"
        return b"".join(self.zeros) + b"".join(self.ones) + flag

    def __repr__(self) -> str:
        """Return a representation that does not list the secrets."""
        return f"SecretKey(bits={len(self.zeros)}, consumed={self.is_consumed})"
