"""Exception hierarchy for the hash-based signature schemes."""

from __future__ import annotations


class HashSigError(Exception):
    """
    Base exception for all signature scheme errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class RandomnessFailure(HashSigError):
    """
    Raised when the secure random source is unavailable or misbehaves.

    This is fatal. Secrets are never drawn from a weaker source instead.
    """


class AlreadyUsedKey(HashSigError):
    """
    Raised when one-time key material would be used a second time.

    Covers signing twice with the same one-time secret key and rewinding the
    leaf counter of a multi-use secret key. Both indicate a caller bug or an
    attack and are never ignored.
    """


class KeyExhausted(HashSigError):
    """
    Raised when every leaf of a multi-use secret key has been consumed.

    Recoverable: the caller must provision a new key pair.

    Attributes:
        num_leaves: The number of leaves the exhausted key was created with.
    """

    def __init__(self, num_leaves: int) -> None:
        self.num_leaves = num_leaves
        super().__init__(f"All {num_leaves} one-time leaves of this key have been used")


class IndexOutOfRange(HashSigError):
    """
    Raised when a leaf index falls outside the range a tree or path can address.

    Attributes:
        index: The offending index.
        limit: The exclusive upper bound of valid indices.
    """

    def __init__(self, index: int, limit: int) -> None:
        self.index = index
        self.limit = limit
        super().__init__(f"Index {index} is out of range (valid range: [0, {limit}))")


class MalformedInput(HashSigError):
    """Raised when encoded keys or signatures are structurally invalid."""
