"""Reusable type definitions for the hash-based signature schemes."""

from .base import StrictBaseModel
from .byte_arrays import BaseBytes
from .exceptions import (
    AlreadyUsedKey,
    HashSigError,
    IndexOutOfRange,
    KeyExhausted,
    MalformedInput,
    RandomnessFailure,
)

__all__ = [
    # Core types
    "BaseBytes",
    "StrictBaseModel",
    # Exceptions
    "HashSigError",
    "RandomnessFailure",
    "AlreadyUsedKey",
    "KeyExhausted",
    "IndexOutOfRange",
    "MalformedInput",
]
