"""Tests for the exception hierarchy."""

import pytest

from hashsig.types import (
    AlreadyUsedKey,
    HashSigError,
    IndexOutOfRange,
    KeyExhausted,
    MalformedInput,
    RandomnessFailure,
)


@pytest.mark.parametrize(
    "exc_type",
    [RandomnessFailure, AlreadyUsedKey, MalformedInput],
)
def test_message_errors_share_base(exc_type: type[HashSigError]) -> None:
    exc = exc_type("boom")
    assert isinstance(exc, HashSigError)
    assert exc.message == "boom"
    assert str(exc) == "boom"
    assert repr(exc) == f"{exc_type.__name__}('boom')"


def test_key_exhausted_carries_leaf_count() -> None:
    exc = KeyExhausted(4)
    assert isinstance(exc, HashSigError)
    assert exc.num_leaves == 4
    assert "All 4 one-time leaves" in exc.message


def test_index_out_of_range_carries_bounds() -> None:
    exc = IndexOutOfRange(9, 8)
    assert exc.index == 9
    assert exc.limit == 8
    assert exc.message == "Index 9 is out of range (valid range: [0, 8))"
