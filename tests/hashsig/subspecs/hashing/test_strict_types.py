"""
Tests for strict type checking in the hashing components.

These tests verify that the pydantic-based components reject config
subclasses, ensuring only approved parameter sets are used.
"""

import pytest
from pydantic import ValidationError

from hashsig.subspecs.hashing import (
    PROD_CONFIG,
    PROD_HASHER,
    PROD_RAND,
    TEST_CONFIG,
    HashSigConfig,
    Hasher,
    Rand,
)


def _custom_config() -> HashSigConfig:
    class CustomConfig(HashSigConfig):
        pass

    custom_config = HashSigConfig.__new__(CustomConfig)
    custom_config.__dict__.update(PROD_CONFIG.__dict__)
    return custom_config


class TestHasherStrictTypes:
    """Tests for Hasher strict type checking."""

    def test_accepts_exact_type(self) -> None:
        assert Hasher(config=PROD_CONFIG).config == PROD_CONFIG

    def test_rejects_subclass_config(self) -> None:
        with pytest.raises((TypeError, ValidationError)):
            Hasher(config=_custom_config())

    def test_rejects_wrong_type_config(self) -> None:
        class RandomClass:
            pass

        with pytest.raises((TypeError, ValidationError)):
            Hasher(config=RandomClass())  # type: ignore[arg-type]

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            PROD_HASHER.config = TEST_CONFIG


class TestRandStrictTypes:
    """Tests for Rand strict type checking."""

    def test_accepts_exact_type(self) -> None:
        assert Rand(config=TEST_CONFIG).config == TEST_CONFIG

    def test_rejects_subclass_config(self) -> None:
        with pytest.raises((TypeError, ValidationError)):
            Rand(config=_custom_config())

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            PROD_RAND.config = TEST_CONFIG


def test_config_is_frozen() -> None:
    with pytest.raises(ValidationError):
        PROD_CONFIG.DIGEST_LENGTH = 8


def test_presets() -> None:
    assert PROD_CONFIG.DIGEST_LENGTH == 32
    assert PROD_CONFIG.DIGEST_BITS == 256
    assert TEST_CONFIG.DIGEST_BITS == 8 * TEST_CONFIG.DIGEST_LENGTH
    assert TEST_CONFIG.MAX_LEAVES <= PROD_CONFIG.MAX_LEAVES
