"""
Defines the configuration presets and domain tags shared by the schemes.

Two presets are provided:

- `PROD_CONFIG`: 32-byte (256-bit) digests, the intended security level.
- `TEST_CONFIG`: 16-byte digests, which keeps key material small and the
  test suite fast. It must never be used to protect anything.

`TARGET_CONFIG` is the preset selected by the `HASHSIG_ENV` environment
variable. The `Digest` and `Secret` types accept the digest length of
either preset, so both sets of instances work side by side.
"""

from pydantic import BaseModel, ConfigDict
from typing_extensions import Final

from hashsig.config import HASHSIG_ENV


class HashSigConfig(BaseModel):
    """A model holding the configuration constants for a preset."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    DIGEST_LENGTH: int
    """The output length of the hash function in bytes. Secrets share this length."""

    @property
    def DIGEST_BITS(self) -> int:  # noqa: N802
        """
        The number of digest bits, `L`.

        A one-time key holds one pair of secrets per bit.
        """
        return 8 * self.DIGEST_LENGTH

    MAX_LEAVES: int
    """The largest number of one-time leaves a multi-use key may hold."""


PROD_CONFIG: Final = HashSigConfig(
    DIGEST_LENGTH=32,
    MAX_LEAVES=1 << 20,
)


TEST_CONFIG: Final = HashSigConfig(
    DIGEST_LENGTH=16,
    MAX_LEAVES=1 << 10,
)


TARGET_CONFIG: Final = PROD_CONFIG if HASHSIG_ENV == "prod" else TEST_CONFIG
"""The preset used by the active environment."""

DIGEST_LENGTHS: Final = frozenset([PROD_CONFIG.DIGEST_LENGTH, TEST_CONFIG.DIGEST_LENGTH])
"""Every digest length used by a preset."""


DOMAIN_MESSAGE: Final = b"\x00"
"""The prefix for digesting the message that is about to be signed."""

DOMAIN_SECRET: Final = b"\x01"
"""The prefix for committing to a one-time secret in the public key."""

DOMAIN_LEAF: Final = b"\x02"
"""The prefix for hashing an encoded one-time public key into a tree leaf."""

DOMAIN_NODE: Final = b"\x03"
"""The prefix for hashing two child nodes into their parent."""

DOMAIN_PADDING: Final = b"\x04"
"""The prefix for the sentinel that fills unused leaf slots."""
