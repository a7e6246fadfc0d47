"""Secure random secret generator for the signature schemes."""

import secrets

from pydantic import model_validator

from hashsig.types import RandomnessFailure, StrictBaseModel

from .constants import PROD_CONFIG, TARGET_CONFIG, TEST_CONFIG, HashSigConfig
from .types import Secret


class Rand(StrictBaseModel):
    """An instance of the random secret generator for a given config."""

    config: HashSigConfig
    """Configuration parameters for the random generator."""

    @model_validator(mode="after")
    def enforce_strict_types(self) -> "Rand":
        """Reject subclasses to prevent type confusion attacks."""
        if type(self.config) is not HashSigConfig:
            raise TypeError("config must be exactly HashSigConfig, not a subclass")
        return self

    def secret(self) -> Secret:
        """
        Draws a fresh secret from the operating system's entropy pool.

        Raises:
            RandomnessFailure: If the entropy source is unavailable or
                returns fewer bytes than requested.
        """
        length = self.config.DIGEST_LENGTH
        try:
            data = secrets.token_bytes(length)
        except (OSError, NotImplementedError) as e:
            raise RandomnessFailure(f"Secure random source unavailable: {e}") from e

        if len(data) != length:
            raise RandomnessFailure(
                f"Secure random source returned {len(data)} bytes, expected {length}"
            )
        return Secret(data)


PROD_RAND = Rand(config=PROD_CONFIG)
"""An instance configured for production-level parameters."""

TEST_RAND = Rand(config=TEST_CONFIG)
"""A lightweight instance for test environments."""

TARGET_RAND = PROD_RAND if TARGET_CONFIG is PROD_CONFIG else TEST_RAND
"""The instance matching the active environment."""
