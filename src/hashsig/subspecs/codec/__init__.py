"""
This package provides the versioned byte encoding of keys and signatures.
"""

from .header import MAGIC, VERSION, Header, Kind, SchemeId
from .objects import (
    Encodable,
    decode,
    decode_lamport_public_key,
    decode_lamport_secret_key,
    decode_lamport_signature,
    decode_merkle_public_key,
    decode_merkle_secret_key,
    decode_merkle_signature,
    encode,
    encode_lamport_public_key,
    encode_lamport_secret_key,
    encode_lamport_signature,
    encode_merkle_public_key,
    encode_merkle_secret_key,
    encode_merkle_signature,
)

__all__ = [
    "MAGIC",
    "VERSION",
    "Header",
    "Kind",
    "SchemeId",
    "Encodable",
    "encode",
    "decode",
    "encode_lamport_public_key",
    "encode_lamport_secret_key",
    "encode_lamport_signature",
    "encode_merkle_public_key",
    "encode_merkle_secret_key",
    "encode_merkle_signature",
    "decode_lamport_public_key",
    "decode_lamport_secret_key",
    "decode_lamport_signature",
    "decode_merkle_public_key",
    "decode_merkle_secret_key",
    "decode_merkle_signature",
]
