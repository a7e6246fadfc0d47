"""Base byte types shared by the signature schemes."""

from ...types.byte_arrays import BaseBytes
from .constants import DIGEST_LENGTHS


class Digest(BaseBytes):
    """
    A hash output of `DIGEST_LENGTH` bytes.

    Public key components, tree nodes and message digests are all digests.
    Both presets share this type; each scheme checks that the values it is
    given match its own config.
    """

    LENGTHS = DIGEST_LENGTHS


class Secret(BaseBytes):
    """
    A uniformly random preimage of `DIGEST_LENGTH` bytes.

    Secrets are drawn once from the operating system's CSPRNG and revealed at
    most once, inside a one-time signature. The representation never shows
    the content.
    """

    LENGTHS = DIGEST_LENGTHS
    REDACTED = True
