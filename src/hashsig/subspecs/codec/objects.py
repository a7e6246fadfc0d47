"""
Byte encoding of keys and signatures of both schemes.

Each object is a `Header` followed by a fixed-layout body. Digests and
secrets are written raw; integers are big-endian.

| object                | body                                                     |
|-----------------------|----------------------------------------------------------|
| one-time public key   | zeros || ones                                            |
| one-time secret key   | zeros || ones || consumed flag                           |
| one-time signature    | revealed                                                 |
| multi-use public key  | root                                                     |
| multi-use secret key  | next_index || N one-time secret key bodies               |
| multi-use signature   | index || one-time pk body || one-time sig body || path   |

A path is `height` entries of `side (0 left, 1 right) || sibling`.

Encoding takes the digest length from the object itself. Decoding checks it
against a config (the active preset unless told otherwise) and is strict:
anything other than exactly one well-formed object raises `MalformedInput`.
"""

from __future__ import annotations

from typing import List, Tuple, Union

from hashsig.types import MalformedInput

from .. import lamport, merkle
from ..hashing import TARGET_CONFIG, Digest, HashSigConfig, Secret
from ..merkle import TARGET_MERKLE_SCHEME, MerkleScheme
from .header import (
    Header,
    Kind,
    SchemeId,
    encode_uint,
    read_exact,
    read_uint,
)

Encodable = Union[
    lamport.PublicKey,
    lamport.SecretKey,
    lamport.Signature,
    merkle.PublicKey,
    merkle.SecretKey,
    merkle.Signature,
]
"""Every object the codec can serialize."""


def _header(
    scheme: SchemeId, kind: Kind, digest_length: int, size: int | None = None
) -> Header:
    return Header(scheme=scheme, kind=kind, digest_length=digest_length, size=size)


def _open(
    data: bytes, scheme: SchemeId, kind: Kind, config: HashSigConfig
) -> Tuple[Header, int]:
    """Parse and check the header of an object, returning it with the body offset."""
    header, offset = Header.decode(data)
    header.expect(scheme, kind, config.DIGEST_LENGTH)
    return header, offset


def _close(data: bytes, offset: int) -> None:
    """Reject trailing bytes after a fully decoded object."""
    if offset != len(data):
        raise MalformedInput(f"{len(data) - offset} trailing bytes after encoded object")


def _read_digests(
    data: bytes, offset: int, count: int, n: int
) -> Tuple[Tuple[Digest, ...], int]:
    chunk, offset = read_exact(data, offset, count * n)
    return tuple(Digest(chunk[i : i + n]) for i in range(0, len(chunk), n)), offset


def _read_secrets(
    data: bytes, offset: int, count: int, n: int
) -> Tuple[Tuple[Secret, ...], int]:
    chunk, offset = read_exact(data, offset, count * n)
    return tuple(Secret(chunk[i : i + n]) for i in range(0, len(chunk), n)), offset


# One-time bodies
#
# Each reader takes (data, offset, config) and returns (object, new_offset).


def _read_lamport_public_key(
    data: bytes, offset: int, config: HashSigConfig
) -> Tuple[lamport.PublicKey, int]:
    n, bits = config.DIGEST_LENGTH, config.DIGEST_BITS
    zeros, offset = _read_digests(data, offset, bits, n)
    ones, offset = _read_digests(data, offset, bits, n)
    return lamport.PublicKey(zeros=zeros, ones=ones), offset


def _read_lamport_secret_key(
    data: bytes, offset: int, config: HashSigConfig
) -> Tuple[lamport.SecretKey, int]:
    n, bits = config.DIGEST_LENGTH, config.DIGEST_BITS
    zeros, offset = _read_secrets(data, offset, bits, n)
    ones, offset = _read_secrets(data, offset, bits, n)
    flag, offset = read_exact(data, offset, 1)
    if flag not in (b"\x00", b"\x01"):
        raise MalformedInput(f"Invalid consumed flag {flag[0]}")

    sk = lamport.SecretKey(zeros=zeros, ones=ones)
    if flag == b"\x01":
        sk.mark_consumed()
    return sk, offset


def _read_lamport_signature(
    data: bytes, offset: int, config: HashSigConfig
) -> Tuple[lamport.Signature, int]:
    revealed, offset = _read_secrets(data, offset, config.DIGEST_BITS, config.DIGEST_LENGTH)
    return lamport.Signature(revealed=revealed), offset


def _read_path(
    data: bytes, offset: int, height: int, config: HashSigConfig
) -> Tuple[merkle.AuthPath, int]:
    nodes: List[merkle.PathNode] = []
    for _ in range(height):
        side_byte, offset = read_exact(data, offset, 1)
        if side_byte[0] not in (merkle.Side.LEFT, merkle.Side.RIGHT):
            raise MalformedInput(f"Invalid path side {side_byte[0]}")
        (sibling,), offset = _read_digests(data, offset, 1, config.DIGEST_LENGTH)
        nodes.append(merkle.PathNode(sibling=sibling, side=merkle.Side(side_byte[0])))
    return merkle.AuthPath(nodes=tuple(nodes)), offset


# Encoders


def encode_lamport_public_key(pk: lamport.PublicKey) -> bytes:
    """Serialize a one-time public key."""
    header = _header(SchemeId.ONE_TIME, Kind.PUBLIC_KEY, pk.digest_length)
    return header.encode() + pk.to_bytes()


def encode_lamport_secret_key(sk: lamport.SecretKey) -> bytes:
    """Serialize a one-time secret key, including its consumed flag."""
    header = _header(SchemeId.ONE_TIME, Kind.SECRET_KEY, sk.digest_length)
    return header.encode() + sk.to_bytes()


def encode_lamport_signature(sig: lamport.Signature) -> bytes:
    """Serialize a one-time signature."""
    header = _header(SchemeId.ONE_TIME, Kind.SIGNATURE, sig.digest_length)
    return header.encode() + sig.to_bytes()


def encode_merkle_public_key(pk: merkle.PublicKey) -> bytes:
    """Serialize a multi-use public key."""
    header = _header(SchemeId.MULTI_USE, Kind.PUBLIC_KEY, len(pk.root), pk.num_leaves)
    return header.encode() + pk.root


def encode_merkle_secret_key(sk: merkle.SecretKey) -> bytes:
    """
    Serialize a multi-use secret key.

    The leaf counter and every consumed flag are written, so a decoded key
    never hands out a leaf that was claimed before encoding.
    """
    header = _header(SchemeId.MULTI_USE, Kind.SECRET_KEY, sk.digest_length, sk.num_leaves)
    body = encode_uint(sk.next_index) + b"".join(leaf.to_bytes() for leaf in sk.leaves)
    return header.encode() + body


def encode_merkle_signature(sig: merkle.Signature) -> bytes:
    """Serialize a multi-use signature."""
    header = _header(
        SchemeId.MULTI_USE, Kind.SIGNATURE, sig.leaf_public_key.digest_length, len(sig.path)
    )
    path = b"".join(bytes([node.side]) + node.sibling for node in sig.path.nodes)
    body = (
        encode_uint(sig.index)
        + sig.leaf_public_key.to_bytes()
        + sig.signature.to_bytes()
        + path
    )
    return header.encode() + body


# Decoders


def decode_lamport_public_key(
    data: bytes, config: HashSigConfig = TARGET_CONFIG
) -> lamport.PublicKey:
    """Parse a one-time public key."""
    _, offset = _open(data, SchemeId.ONE_TIME, Kind.PUBLIC_KEY, config)
    pk, offset = _read_lamport_public_key(data, offset, config)
    _close(data, offset)
    return pk


def decode_lamport_secret_key(
    data: bytes, config: HashSigConfig = TARGET_CONFIG
) -> lamport.SecretKey:
    """Parse a one-time secret key, restoring its consumed flag."""
    _, offset = _open(data, SchemeId.ONE_TIME, Kind.SECRET_KEY, config)
    sk, offset = _read_lamport_secret_key(data, offset, config)
    _close(data, offset)
    return sk


def decode_lamport_signature(
    data: bytes, config: HashSigConfig = TARGET_CONFIG
) -> lamport.Signature:
    """Parse a one-time signature."""
    _, offset = _open(data, SchemeId.ONE_TIME, Kind.SIGNATURE, config)
    sig, offset = _read_lamport_signature(data, offset, config)
    _close(data, offset)
    return sig


def _check_leaf_count(num_leaves: int, config: HashSigConfig) -> None:
    if not 1 <= num_leaves <= config.MAX_LEAVES:
        raise MalformedInput(f"Leaf count {num_leaves} outside [1, {config.MAX_LEAVES}]")


def decode_merkle_public_key(
    data: bytes, config: HashSigConfig = TARGET_CONFIG
) -> merkle.PublicKey:
    """Parse a multi-use public key."""
    header, offset = _open(data, SchemeId.MULTI_USE, Kind.PUBLIC_KEY, config)
    num_leaves = header.require_size()
    _check_leaf_count(num_leaves, config)

    (root,), offset = _read_digests(data, offset, 1, config.DIGEST_LENGTH)
    _close(data, offset)
    return merkle.PublicKey(root=root, num_leaves=num_leaves)


def decode_merkle_secret_key(
    data: bytes, scheme: MerkleScheme = TARGET_MERKLE_SCHEME
) -> merkle.SecretKey:
    """
    Parse a multi-use secret key.

    The tree is rebuilt from the one-time secrets with `scheme.restore`, so
    decoding costs as much hashing as key generation.

    Args:
        data: The encoded key.
        scheme: The scheme instance used to rebuild the tree. Its config
            fixes the expected digest length.

    Returns:
        The secret key, with its leaf counter and consumed flags restored.
    """
    config = scheme.config
    header, offset = _open(data, SchemeId.MULTI_USE, Kind.SECRET_KEY, config)
    num_leaves = header.require_size()
    _check_leaf_count(num_leaves, config)

    next_index, offset = read_uint(data, offset)
    if next_index > num_leaves:
        raise MalformedInput(f"Leaf counter {next_index} exceeds leaf count {num_leaves}")

    # Size check up front, before any leaf is materialized.
    leaf_length = 2 * config.DIGEST_BITS * config.DIGEST_LENGTH + 1
    if len(data) - offset != num_leaves * leaf_length:
        raise MalformedInput(
            f"Expected {num_leaves * leaf_length} body bytes, got {len(data) - offset}"
        )

    leaves: List[lamport.SecretKey] = []
    for _ in range(num_leaves):
        leaf, offset = _read_lamport_secret_key(data, offset, config)
        leaves.append(leaf)
    _close(data, offset)

    return scheme.restore(leaves, next_index)


def decode_merkle_signature(
    data: bytes, config: HashSigConfig = TARGET_CONFIG
) -> merkle.Signature:
    """Parse a multi-use signature."""
    header, offset = _open(data, SchemeId.MULTI_USE, Kind.SIGNATURE, config)
    height = header.require_size()
    max_height = merkle.tree_height(config.MAX_LEAVES)
    if height > max_height:
        raise MalformedInput(f"Path height {height} exceeds maximum {max_height}")

    index, offset = read_uint(data, offset)
    leaf_public_key, offset = _read_lamport_public_key(data, offset, config)
    signature, offset = _read_lamport_signature(data, offset, config)
    path, offset = _read_path(data, offset, height, config)
    _close(data, offset)

    return merkle.Signature(
        index=index,
        leaf_public_key=leaf_public_key,
        signature=signature,
        path=path,
    )


# Dispatch on the object type (encode) or the header (decode).


def encode(obj: Encodable) -> bytes:
    """Serialize any key or signature."""
    if isinstance(obj, lamport.PublicKey):
        return encode_lamport_public_key(obj)
    if isinstance(obj, lamport.SecretKey):
        return encode_lamport_secret_key(obj)
    if isinstance(obj, lamport.Signature):
        return encode_lamport_signature(obj)
    if isinstance(obj, merkle.PublicKey):
        return encode_merkle_public_key(obj)
    if isinstance(obj, merkle.SecretKey):
        return encode_merkle_secret_key(obj)
    if isinstance(obj, merkle.Signature):
        return encode_merkle_signature(obj)
    raise TypeError(f"Cannot encode object of type {type(obj).__name__}")


def decode(data: bytes, scheme: MerkleScheme = TARGET_MERKLE_SCHEME) -> Encodable:
    """
    Parse any key or signature, selecting the decoder from its header.

    The digest length is checked against `scheme.config`.

    Raises:
        MalformedInput: If the input is not exactly one well-formed object.
    """
    config = scheme.config
    header, _ = Header.decode(data)
    if header.scheme == SchemeId.ONE_TIME:
        if header.kind == Kind.PUBLIC_KEY:
            return decode_lamport_public_key(data, config)
        if header.kind == Kind.SECRET_KEY:
            return decode_lamport_secret_key(data, config)
        return decode_lamport_signature(data, config)

    if header.kind == Kind.PUBLIC_KEY:
        return decode_merkle_public_key(data, config)
    if header.kind == Kind.SECRET_KEY:
        return decode_merkle_secret_key(data, scheme)
    return decode_merkle_signature(data, config)
