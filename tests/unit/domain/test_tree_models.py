from __future__ import annotations

"""
Unit tests for the Source Tree model.

Verifies:
1. Insertion order, idempotency and on-demand directory creation.
2. File/directory name conflicts and atomic failure.
3. Name validation and sealing.
4. Dictionary conversion used by artifacts.
"""

import pytest

from navindex.domain.errors import FrozenError, InvalidName, MalformedArtifact, NameConflict
from navindex.domain.tree_models import TreeNode, split_path


# -----------------------------------------------------------------------------
# INSERTION
# -----------------------------------------------------------------------------

def test_insert_file_creates_intermediate_directories() -> None:
    """TC-01: A nested insert creates each missing level once."""
    tree = TreeNode()
    tree.insert_file(["std", "io", "mod.rs"])
    tree.insert_file("std/io/buffered.rs")

    assert [d.name for d in tree.directories] == ["std"]
    io = tree.find("std/io")
    assert io is not None
    assert io.files == ["mod.rs", "buffered.rs"]


def test_insertion_order_is_preserved() -> None:
    """TC-02: Children keep first-insertion order, not alphabetical order."""
    tree = TreeNode()
    for name in ("zeta.rs", "alpha.rs", "mid.rs"):
        tree.insert_file(name)
    tree.insert_directory("zz")
    tree.insert_directory("aa")

    assert tree.files == ["zeta.rs", "alpha.rs", "mid.rs"]
    assert [d.name for d in tree.directories] == ["zz", "aa"]


def test_reinserting_a_file_is_a_no_op() -> None:
    """TC-03: Duplicate file insertion leaves a single entry."""
    tree = TreeNode()
    tree.insert_file("a/b.rs")
    tree.insert_file("a/b.rs")

    assert tree.file_count() == 1
    assert tree.find("a").files == ["b.rs"]


def test_insert_directory_returns_deepest_node() -> None:
    tree = TreeNode()
    node = tree.insert_directory("a/b/c")
    node.insert_file("x.rs")

    assert tree.has_file("a/b/c/x.rs")
    assert list(tree.iter_directory_paths()) == ["a", "a/b", "a/b/c"]


def test_file_over_existing_directory_conflicts() -> None:
    """TC-04: A file may not take the name of an existing directory."""
    tree = TreeNode()
    tree.insert_file("net/tcp.rs")

    with pytest.raises(NameConflict) as exc_info:
        tree.insert_file("net")

    assert exc_info.value.path == ("net",)
    assert exc_info.value.existing_kind == "directory"


def test_directory_through_existing_file_conflicts_without_side_effects() -> None:
    """TC-05: A failing insert leaves the tree untouched."""
    tree = TreeNode()
    tree.insert_file("a/b")
    before = tree.to_dict()

    with pytest.raises(NameConflict) as exc_info:
        tree.insert_file("a/b/c/d.rs")

    assert exc_info.value.path == ("a", "b")
    assert exc_info.value.existing_kind == "file"
    assert tree.to_dict() == before


@pytest.mark.parametrize("bad_path", ["", "a//b.rs", "./x.rs", "a/../b.rs", ["a\\b"], []])
def test_invalid_segments_are_rejected(bad_path) -> None:
    """TC-06: Empty, relative or separator-carrying segments raise InvalidName."""
    tree = TreeNode()
    with pytest.raises(InvalidName):
        tree.insert_file(bad_path)
    assert tree.file_count() == 0


def test_split_path_accepts_strings_and_sequences() -> None:
    assert split_path("a/b/c.rs") == ("a", "b", "c.rs")
    assert split_path(["a", "b"]) == ("a", "b")


def test_invalid_name_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        split_path("..")


# -----------------------------------------------------------------------------
# SEALING
# -----------------------------------------------------------------------------

def test_frozen_tree_rejects_insertion_recursively() -> None:
    """TC-07: freeze() seals every descendant."""
    tree = TreeNode()
    tree.insert_file("a/b/c.rs")
    tree.freeze()
    sub = tree.find("a/b")

    assert tree.is_frozen and sub.is_frozen
    with pytest.raises(FrozenError):
        tree.insert_file("d.rs")
    with pytest.raises(FrozenError):
        sub.insert_file("e.rs")


def test_copy_is_deep_and_unsealed() -> None:
    tree = TreeNode()
    tree.insert_file("a/b.rs")
    tree.freeze()

    clone = tree.copy()
    clone.insert_file("a/c.rs")

    assert not clone.is_frozen
    assert tree.find("a").files == ["b.rs"]
    assert clone.find("a").files == ["b.rs", "c.rs"]


# -----------------------------------------------------------------------------
# QUERIES
# -----------------------------------------------------------------------------

def test_iter_paths_lists_files_before_subdirectories() -> None:
    tree = TreeNode()
    tree.insert_file("sys/unix.rs")
    tree.insert_file("lib.rs")

    assert list(tree.iter_paths()) == ["lib.rs", "sys/unix.rs"]


def test_find_and_has_file_misses() -> None:
    tree = TreeNode()
    tree.insert_file("a/b.rs")

    assert tree.find("missing") is None
    assert tree.find("a/b.rs") is None
    assert not tree.has_file("a/c.rs")
    assert not tree.has_file("x/b.rs")
    assert tree.has_file(["a", "b.rs"])


# -----------------------------------------------------------------------------
# CONVERSION
# -----------------------------------------------------------------------------

def test_to_dict_shape() -> None:
    tree = TreeNode()
    tree.insert_file("sys/mod.rs")
    tree.insert_file("lib.rs")

    assert tree.to_dict() == {
        "name": "",
        "dirs": [{"name": "sys", "dirs": [], "files": ["mod.rs"]}],
        "files": ["lib.rs"],
    }


def test_from_dict_restores_equal_tree() -> None:
    tree = TreeNode()
    for path in ("z.rs", "b/y.rs", "a/x.rs", "b/c/w.rs"):
        tree.insert_file(path)

    restored = TreeNode.from_dict(tree.to_dict())

    assert restored == tree
    assert list(restored.iter_paths()) == list(tree.iter_paths())
    assert not restored.is_frozen


def test_from_dict_ignores_unknown_keys() -> None:
    data = {"name": "", "dirs": [], "files": ["a.rs"], "extra": 1}
    assert TreeNode.from_dict(data).files == ["a.rs"]


@pytest.mark.parametrize("data", [
    [],
    {"name": "", "dirs": {}, "files": []},
    {"name": "", "dirs": [], "files": ["a.rs", "a.rs"]},
    {"name": "", "dirs": [{"name": "a", "dirs": [], "files": []}], "files": ["a"]},
    {"name": "", "dirs": [{"name": "", "dirs": [], "files": []}], "files": []},
    {"name": "", "dirs": [], "files": ["a/b"]},
])
def test_from_dict_rejects_malformed_shapes(data) -> None:
    with pytest.raises(MalformedArtifact):
        TreeNode.from_dict(data)
