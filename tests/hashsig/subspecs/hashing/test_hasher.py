"""Tests for the domain-separated hash function."""

from itertools import combinations

import blake3
import pytest
from hypothesis import given
from hypothesis import strategies as st

from hashsig.subspecs.hashing import (
    DIGEST_LENGTHS,
    PROD_HASHER,
    TARGET_CONFIG,
    TARGET_HASHER,
    TEST_HASHER,
    Digest,
    Hasher,
    Secret,
)
from hashsig.subspecs.hashing.constants import (
    DOMAIN_LEAF,
    DOMAIN_MESSAGE,
    DOMAIN_NODE,
    DOMAIN_PADDING,
    DOMAIN_SECRET,
)
from hashsig.subspecs.hashing.hasher import DOMAINS

ALL_DOMAINS = [DOMAIN_MESSAGE, DOMAIN_SECRET, DOMAIN_LEAF, DOMAIN_NODE, DOMAIN_PADDING]


def test_domain_tags_are_distinct_single_bytes() -> None:
    """Every tag is one byte long and no two tags coincide."""
    assert all(len(tag) == 1 for tag in ALL_DOMAINS)
    assert len(set(ALL_DOMAINS)) == len(ALL_DOMAINS)
    assert DOMAINS == frozenset(ALL_DOMAINS)


@given(data=st.binary(max_size=256))
def test_same_payload_differs_across_domains(data: bytes) -> None:
    """The same input hashed under two different tags never yields the same digest."""
    digests = [TARGET_HASHER.apply(domain, data) for domain in ALL_DOMAINS]
    for a, b in combinations(digests, 2):
        assert a != b


@pytest.mark.parametrize("hasher", [PROD_HASHER, TEST_HASHER], ids=["prod", "test"])
def test_apply_matches_blake3(hasher: Hasher) -> None:
    """The hash is BLAKE3 over `domain || data`, read out to the digest length."""
    n = hasher.config.DIGEST_LENGTH
    expected = blake3.blake3(DOMAIN_MESSAGE + b"abc").digest(length=n)
    assert hasher.apply(DOMAIN_MESSAGE, b"abc") == expected
    assert hasher.message(b"abc") == expected
    assert len(hasher.padding()) == n


def test_apply_rejects_unknown_domain() -> None:
    with pytest.raises(ValueError, match="Unknown hash domain"):
        TARGET_HASHER.apply(b"\x7f", b"data")


@given(message=st.binary(max_size=512))
def test_message_is_deterministic_digest(message: bytes) -> None:
    digest = TARGET_HASHER.message(message)
    assert isinstance(digest, Digest)
    assert len(digest) == TARGET_CONFIG.DIGEST_LENGTH
    assert digest == TARGET_HASHER.message(message)


def test_commit_uses_secret_domain() -> None:
    secret = Secret(b"\x11" * TARGET_CONFIG.DIGEST_LENGTH)
    assert TARGET_HASHER.commit(secret) == TARGET_HASHER.apply(DOMAIN_SECRET, secret)
    assert TARGET_HASHER.commit(secret) != TARGET_HASHER.message(secret)


def test_node_is_order_sensitive() -> None:
    left = Digest(b"\x01" * TARGET_CONFIG.DIGEST_LENGTH)
    right = Digest(b"\x02" * TARGET_CONFIG.DIGEST_LENGTH)
    assert TARGET_HASHER.node(left, right) != TARGET_HASHER.node(right, left)
    assert TARGET_HASHER.node(left, right) == TARGET_HASHER.apply(DOMAIN_NODE, left + right)


def test_padding_sentinel_is_fixed() -> None:
    """The sentinel is `hash(PADDING, b"")` and never collides with a leaf of empty input."""
    padding = TARGET_HASHER.padding()
    assert padding == TARGET_HASHER.apply(DOMAIN_PADDING, b"")
    assert padding == TARGET_HASHER.padding()
    assert padding != TARGET_HASHER.leaf(b"")


def test_byte_types_accept_every_preset_length() -> None:
    """Digests and secrets of both presets coexist in one process."""
    assert DIGEST_LENGTHS == {PROD_HASHER.config.DIGEST_LENGTH, TEST_HASHER.config.DIGEST_LENGTH}
    for length in DIGEST_LENGTHS:
        assert len(Digest(b"\x00" * length)) == length
        assert len(Secret(b"\x00" * length)) == length

    with pytest.raises(ValueError, match="expects one of"):
        Digest(b"\x00" * 20)
