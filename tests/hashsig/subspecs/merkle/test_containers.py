"""Tests for the multi-use key containers."""

import copy
from typing import Callable

import pytest

from hashsig.subspecs.merkle import TARGET_MERKLE_SCHEME, SecretKey
from hashsig.types import AlreadyUsedKey, IndexOutOfRange, KeyExhausted


def test_claim_next_index_is_sequential() -> None:
    _, sk = TARGET_MERKLE_SCHEME.key_gen(3)
    assert [sk.claim_next_index() for _ in range(3)] == [0, 1, 2]
    assert sk.remaining == 0
    with pytest.raises(KeyExhausted) as exc_info:
        sk.claim_next_index()
    assert exc_info.value.num_leaves == 3


def test_set_next_index_marks_skipped_leaves() -> None:
    _, sk = TARGET_MERKLE_SCHEME.key_gen(4)
    sk.set_next_index(2)

    assert sk.next_index == 2
    assert sk.remaining == 2
    assert [leaf.is_consumed for leaf in sk.leaves] == [True, True, False, False]


def test_set_next_index_same_value_is_noop() -> None:
    _, sk = TARGET_MERKLE_SCHEME.key_gen(2)
    sk.set_next_index(1)
    sk.set_next_index(1)
    assert sk.next_index == 1


def test_set_next_index_cannot_rewind() -> None:
    _, sk = TARGET_MERKLE_SCHEME.key_gen(4)
    sk.set_next_index(3)
    with pytest.raises(AlreadyUsedKey):
        sk.set_next_index(1)
    assert sk.next_index == 3


def test_set_next_index_upper_bound() -> None:
    _, sk = TARGET_MERKLE_SCHEME.key_gen(4)
    sk.set_next_index(4)
    assert sk.remaining == 0

    _, other = TARGET_MERKLE_SCHEME.key_gen(4)
    with pytest.raises(IndexOutOfRange):
        other.set_next_index(5)


def test_repr_hides_secrets() -> None:
    _, sk = TARGET_MERKLE_SCHEME.key_gen(2)
    assert repr(sk) == "SecretKey(num_leaves=2, next_index=0)"


def test_public_key_matches_tree() -> None:
    pk, sk = TARGET_MERKLE_SCHEME.key_gen(5)
    assert pk.root == sk.tree.root()
    assert pk.num_leaves == 5
    assert sk.public_key() == pk


@pytest.mark.parametrize(
    "make_copy",
    [
        pytest.param(lambda sk: sk.model_copy(), id="model_copy"),
        pytest.param(copy.copy, id="copy"),
        pytest.param(copy.deepcopy, id="deepcopy"),
    ],
)
def test_copies_share_the_leaf_counter(make_copy: Callable[[SecretKey], SecretKey]) -> None:
    """A copy never hands out a leaf the original already claimed, and vice versa."""
    _, sk = TARGET_MERKLE_SCHEME.key_gen(3)
    twin = make_copy(sk)

    twin.set_next_index(1)
    assert sk.next_index == 1
    assert sk.leaves[0].is_consumed

    assert sk.claim_next_index() == 1
    assert twin.claim_next_index() == 2
    with pytest.raises(KeyExhausted):
        sk.claim_next_index()
