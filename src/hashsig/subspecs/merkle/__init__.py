"""
This package provides the multi-use Merkle signature scheme.

It exposes the tree, the key containers and the main interface functions.
"""

from .containers import PublicKey, SecretKey, Signature
from .interface import (
    PROD_MERKLE_SCHEME,
    TARGET_MERKLE_SCHEME,
    TEST_MERKLE_SCHEME,
    MerkleScheme,
)
from .tree import AuthPath, HashTree, PathNode, Side, tree_height, verify_path

__all__ = [
    "MerkleScheme",
    "PublicKey",
    "SecretKey",
    "Signature",
    "AuthPath",
    "HashTree",
    "PathNode",
    "Side",
    "tree_height",
    "verify_path",
    "PROD_MERKLE_SCHEME",
    "TEST_MERKLE_SCHEME",
    "TARGET_MERKLE_SCHEME",
]
