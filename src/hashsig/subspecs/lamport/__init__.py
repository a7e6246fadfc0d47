"""
This package provides the Lamport one-time signature scheme.

It exposes the key containers and the main interface functions.
"""

from .containers import PublicKey, SecretKey, Signature
from .interface import (
    PROD_LAMPORT_SCHEME,
    TARGET_LAMPORT_SCHEME,
    TEST_LAMPORT_SCHEME,
    LamportScheme,
    digest_bits,
)

__all__ = [
    "LamportScheme",
    "PublicKey",
    "SecretKey",
    "Signature",
    "digest_bits",
    "PROD_LAMPORT_SCHEME",
    "TEST_LAMPORT_SCHEME",
    "TARGET_LAMPORT_SCHEME",
]
