"""
Versioned header shared by every encoded key and signature.

Layout (integers big-endian):

    magic (4) || version (1) || scheme (1) || kind (1) || digest length (1)
    [|| size (8)]

The trailing `size` field is present for multi-use objects only. It holds
the leaf count for keys and the tree height for signatures.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional, Tuple

from pydantic import Field, model_validator

from hashsig.types import MalformedInput, StrictBaseModel

MAGIC = b"HSIG"
"""Marks a byte string as an encoded key or signature."""

VERSION = 1
"""The only layout version understood by this codec."""

SIZE_LENGTH = 8
"""Width of the big-endian integers of the layout (size, leaf indices)."""


class SchemeId(IntEnum):
    """Which signature scheme an encoded object belongs to."""

    ONE_TIME = 1
    MULTI_USE = 2


class Kind(IntEnum):
    """What an encoded object is."""

    PUBLIC_KEY = 1
    SECRET_KEY = 2
    SIGNATURE = 3


def read_exact(data: bytes, offset: int, size: int) -> Tuple[bytes, int]:
    """
    Read exactly `size` bytes starting at `offset`.

    Returns:
        A tuple of (chunk, new_offset).

    Raises:
        MalformedInput: If fewer than `size` bytes remain.
    """
    end = offset + size
    if end > len(data):
        raise MalformedInput(
            f"Unexpected end of input: need {size} bytes at offset {offset}, "
            f"have {len(data) - offset}"
        )
    return data[offset:end], end


def read_uint(data: bytes, offset: int) -> Tuple[int, int]:
    """Read a big-endian unsigned integer of `SIZE_LENGTH` bytes."""
    chunk, offset = read_exact(data, offset, SIZE_LENGTH)
    return int.from_bytes(chunk, "big"), offset


def encode_uint(value: int) -> bytes:
    """Encode a non-negative integer as `SIZE_LENGTH` big-endian bytes."""
    return value.to_bytes(SIZE_LENGTH, "big")


class Header(StrictBaseModel):
    """The decoded header of a key or signature."""

    scheme: SchemeId
    kind: Kind
    digest_length: int = Field(ge=1, le=255)
    size: Optional[int] = Field(default=None, ge=0, lt=1 << (8 * SIZE_LENGTH))
    """Leaf count (keys) or tree height (signatures) of a multi-use object."""

    @model_validator(mode="after")
    def validate_size(self) -> "Header":
        if (self.scheme == SchemeId.MULTI_USE) != (self.size is not None):
            raise ValueError("The size field is present exactly for multi-use objects.")
        return self

    def require_size(self) -> int:
        """
        Return the size field of a multi-use header.

        Raises:
            MalformedInput: If the header carries no size field.
        """
        if self.size is None:
            raise MalformedInput(f"{self.scheme.name} {self.kind.name} header has no size field")
        return self.size

    def encode(self) -> bytes:
        """Serialize the header."""
        out = MAGIC + bytes([VERSION, self.scheme, self.kind, self.digest_length])
        if self.size is not None:
            out += encode_uint(self.size)
        return out

    @classmethod
    def decode(cls, data: bytes, offset: int = 0) -> Tuple["Header", int]:
        """
        Parse a header.

        Returns:
            A tuple of (header, offset_after_header).

        Raises:
            MalformedInput: On wrong magic, unknown version, scheme or kind.
        """
        magic, offset = read_exact(data, offset, len(MAGIC))
        if magic != MAGIC:
            raise MalformedInput(f"Bad magic {magic!r}, expected {MAGIC!r}")

        fixed, offset = read_exact(data, offset, 4)
        version, scheme_byte, kind_byte, digest_length = fixed
        if version != VERSION:
            raise MalformedInput(f"Unsupported version {version}, expected {VERSION}")

        try:
            scheme = SchemeId(scheme_byte)
        except ValueError:
            raise MalformedInput(f"Unknown scheme identifier {scheme_byte}") from None
        try:
            kind = Kind(kind_byte)
        except ValueError:
            raise MalformedInput(f"Unknown object kind {kind_byte}") from None
        if digest_length == 0:
            raise MalformedInput("Digest length must be non-zero")

        size: Optional[int] = None
        if scheme == SchemeId.MULTI_USE:
            size, offset = read_uint(data, offset)

        header = cls(scheme=scheme, kind=kind, digest_length=digest_length, size=size)
        return header, offset

    def expect(self, scheme: SchemeId, kind: Kind, digest_length: int) -> None:
        """
        Check that the header describes the expected object.

        Raises:
            MalformedInput: If the scheme, kind or digest length differ.
        """
        if self.scheme != scheme:
            raise MalformedInput(f"Expected a {scheme.name} object, got {self.scheme.name}")
        if self.kind != kind:
            raise MalformedInput(f"Expected a {kind.name}, got {self.kind.name}")
        if self.digest_length != digest_length:
            raise MalformedInput(
                f"Digest length mismatch: expected {digest_length}, got {self.digest_length}"
            )
