"""
Hash primitive shared by the one-time and multi-use signature schemes.

It exposes the domain-separated hash function, the secure random generator
and the configuration presets.
"""

from .constants import DIGEST_LENGTHS, PROD_CONFIG, TARGET_CONFIG, TEST_CONFIG, HashSigConfig
from .hasher import PROD_HASHER, TARGET_HASHER, TEST_HASHER, Hasher
from .rand import PROD_RAND, TARGET_RAND, TEST_RAND, Rand
from .types import Digest, Secret

__all__ = [
    "HashSigConfig",
    "Hasher",
    "Rand",
    "Digest",
    "Secret",
    "DIGEST_LENGTHS",
    "PROD_CONFIG",
    "TEST_CONFIG",
    "TARGET_CONFIG",
    "PROD_HASHER",
    "TEST_HASHER",
    "TARGET_HASHER",
    "PROD_RAND",
    "TEST_RAND",
    "TARGET_RAND",
]
