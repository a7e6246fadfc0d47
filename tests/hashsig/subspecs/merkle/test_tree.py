"""Tests for the binary Merkle tree."""

import pytest

from hashsig.subspecs.hashing import DIGEST_LENGTHS, TARGET_CONFIG, TARGET_HASHER, Digest
from hashsig.subspecs.merkle import AuthPath, HashTree, PathNode, Side, tree_height, verify_path
from hashsig.types import IndexOutOfRange


def _leaves(num_leaves: int) -> list[Digest]:
    return [TARGET_HASHER.leaf(i.to_bytes(4, "big")) for i in range(num_leaves)]


@pytest.mark.parametrize(
    "num_leaves, expected",
    [(1, 0), (2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4), (1024, 10)],
)
def test_tree_height(num_leaves: int, expected: int) -> None:
    assert tree_height(num_leaves) == expected


@pytest.mark.parametrize("num_leaves", range(1, 10))
def test_commit_open_verify_roundtrip(num_leaves: int) -> None:
    """Every leaf of every tree size opens to a path that verifies against the root."""
    leaves = _leaves(num_leaves)
    tree = HashTree.build(TARGET_HASHER, leaves)
    root = tree.root()

    assert tree.height == tree_height(num_leaves)
    for index, leaf in enumerate(leaves):
        path = tree.path(index)
        assert len(path) == tree.height
        assert verify_path(TARGET_HASHER, leaf, index, path, root), f"leaf {index} failed"


def test_single_leaf_tree_root_is_leaf() -> None:
    (leaf,) = _leaves(1)
    tree = HashTree.build(TARGET_HASHER, [leaf])
    assert tree.root() == leaf
    assert len(tree.path(0)) == 0


def test_padding_uses_sentinel() -> None:
    """Three leaves pad to four with the sentinel in the last slot."""
    a, b, c = _leaves(3)
    pad = TARGET_HASHER.padding()
    tree = HashTree.build(TARGET_HASHER, [a, b, c])

    expected = TARGET_HASHER.node(TARGET_HASHER.node(a, b), TARGET_HASHER.node(c, pad))
    assert tree.root() == expected
    assert tree.layers[0][3] == pad


def test_path_sides_follow_index_bits() -> None:
    tree = HashTree.build(TARGET_HASHER, _leaves(8))
    path = tree.path(5)  # 0b101
    assert [node.side for node in path.nodes] == [Side.LEFT, Side.RIGHT, Side.LEFT]


def test_build_rejects_empty() -> None:
    with pytest.raises(ValueError):
        HashTree.build(TARGET_HASHER, [])


@pytest.mark.parametrize("index", [-1, 5, 8])
def test_path_index_out_of_range(index: int) -> None:
    tree = HashTree.build(TARGET_HASHER, _leaves(5))
    with pytest.raises(IndexOutOfRange) as exc_info:
        tree.path(index)
    assert exc_info.value.limit == 5


def test_verify_path_index_beyond_path() -> None:
    leaves = _leaves(4)
    tree = HashTree.build(TARGET_HASHER, leaves)
    with pytest.raises(IndexOutOfRange):
        verify_path(TARGET_HASHER, leaves[0], 4, tree.path(0), tree.root())


def test_wrong_leaf_or_index_fails() -> None:
    leaves = _leaves(4)
    tree = HashTree.build(TARGET_HASHER, leaves)
    root = tree.root()

    assert not verify_path(TARGET_HASHER, leaves[1], 0, tree.path(0), root)
    # The path of leaf 0 claims position 0; presenting it for position 2 is rejected.
    assert not verify_path(TARGET_HASHER, leaves[0], 2, tree.path(0), root)


def test_tampered_sibling_fails() -> None:
    leaves = _leaves(4)
    tree = HashTree.build(TARGET_HASHER, leaves)
    path = tree.path(1)

    bad = Digest(b"\xff" * TARGET_CONFIG.DIGEST_LENGTH)
    nodes = (PathNode(sibling=bad, side=path.nodes[0].side),) + path.nodes[1:]
    assert not verify_path(TARGET_HASHER, leaves[1], 1, AuthPath(nodes=nodes), tree.root())


def test_swapped_side_fails() -> None:
    leaves = _leaves(2)
    tree = HashTree.build(TARGET_HASHER, leaves)
    (node,) = tree.path(0).nodes
    flipped = AuthPath(nodes=(PathNode(sibling=node.sibling, side=Side.LEFT),))
    assert not verify_path(TARGET_HASHER, leaves[0], 0, flipped, tree.root())


def test_tree_rejects_bad_shape() -> None:
    (leaf,) = _leaves(1)
    with pytest.raises(ValueError):
        HashTree(num_leaves=2, layers=((leaf,),))
    with pytest.raises(ValueError):
        HashTree(num_leaves=1, layers=((leaf, leaf, leaf), (leaf,)))


@pytest.mark.parametrize(
    "num_leaves, widths",
    [
        pytest.param(4, (4, 1), id="Missing middle layer"),
        pytest.param(4, (4, 3, 1), id="Middle layer too narrow"),
        pytest.param(3, (4, 4, 2, 1), id="Repeated layer"),
        pytest.param(1, (2, 1), id="Over-padded leaf layer"),
    ],
)
def test_tree_rejects_layers_that_do_not_halve(num_leaves: int, widths: tuple[int, ...]) -> None:
    """Every layer holds twice as many nodes as the next one up."""
    (leaf,) = _leaves(1)
    with pytest.raises(ValueError):
        HashTree(num_leaves=num_leaves, layers=tuple((leaf,) * width for width in widths))


def test_tree_rejects_mixed_digest_lengths() -> None:
    (other_length,) = DIGEST_LENGTHS - {TARGET_CONFIG.DIGEST_LENGTH}
    leaf, sibling = _leaves(2)
    foreign = Digest(b"\x00" * other_length)
    with pytest.raises(ValueError):
        HashTree(num_leaves=2, layers=((leaf, foreign), (TARGET_HASHER.node(leaf, sibling),)))
