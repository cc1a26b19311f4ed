from __future__ import annotations

"""
Unit tests for the Unit Registry Service.

Verifies:
1. Write-once registration and lookups.
2. Sealing of registered data and freezing of the registry.
3. Atomic check-and-insert under concurrent producers.
4. Restartable, side-effect free iteration.
"""

import threading
from typing import List

import pytest

from navindex.core.services.registry import UnitRegistry
from navindex.domain.catalog_models import Catalog
from navindex.domain.errors import DuplicateUnit, FrozenError, InvalidName, NotFound
from navindex.domain.tree_models import TreeNode


def _tree(*paths: str) -> TreeNode:
    tree = TreeNode()
    for path in paths:
        tree.insert_file(path)
    return tree


def test_register_and_get() -> None:
    """TC-01: A registered unit can be fetched by name."""
    registry = UnitRegistry()
    unit = registry.register("foo", _tree("lib.rs"), Catalog())

    assert registry.get("foo") is unit
    assert "foo" in registry
    assert len(registry) == 1


def test_duplicate_registration_keeps_first_unit() -> None:
    """TC-02: A second registration under the same name is rejected."""
    registry = UnitRegistry()
    first = registry.register("foo", _tree("a.rs"), Catalog())

    with pytest.raises(DuplicateUnit) as exc_info:
        registry.register("foo", _tree("b.rs"), Catalog())

    assert exc_info.value.unit_name == "foo"
    assert registry.get("foo") is first
    assert list(registry.get("foo").tree.iter_paths()) == ["a.rs"]


def test_registration_seals_tree_and_catalog() -> None:
    tree = _tree("a.rs")
    catalog = Catalog()
    UnitRegistry().register("foo", tree, catalog)

    with pytest.raises(FrozenError):
        tree.insert_file("b.rs")
    with pytest.raises(FrozenError):
        catalog.add_entry("module", "m")


def test_get_unknown_unit_raises_not_found() -> None:
    registry = UnitRegistry()
    with pytest.raises(NotFound):
        registry.get("missing")
    with pytest.raises(KeyError):
        registry.get("missing")


def test_empty_unit_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        UnitRegistry().register("", TreeNode(), Catalog())


@pytest.mark.parametrize("name", ["../x", "a/b", "a\\b", ".", ".."])
def test_unit_name_must_be_a_single_path_segment(name: str) -> None:
    registry = UnitRegistry()
    with pytest.raises(InvalidName):
        registry.register(name, TreeNode(), Catalog())
    assert len(registry) == 0


def test_frozen_registry_rejects_registration() -> None:
    registry = UnitRegistry()
    registry.register("foo", TreeNode(), Catalog())

    assert registry.freeze() is registry
    assert registry.is_frozen
    with pytest.raises(FrozenError):
        registry.register("bar", TreeNode(), Catalog())
    assert registry.names() == ["foo"]


def test_all_units_is_restartable_and_ordered() -> None:
    """TC-03: Iteration follows registration order and can be repeated."""
    registry = UnitRegistry()
    for name in ("zeta", "alpha", "mid"):
        registry.register(name, TreeNode(), Catalog())

    view = registry.all_units()
    first_pass = [u.name for u in view]
    second_pass = [u.name for u in view]

    assert first_pass == ["zeta", "alpha", "mid"]
    assert second_pass == first_pass
    assert len(view) == 3
    assert len(registry) == 3


def test_concurrent_registration_of_same_name_has_one_winner() -> None:
    """TC-04: Exactly one of many racing producers registers a name."""
    registry = UnitRegistry()
    workers = 16
    barrier = threading.Barrier(workers)
    successes: List[int] = []
    duplicates: List[int] = []
    lock = threading.Lock()

    def produce(index: int) -> None:
        tree = _tree(f"file_{index}.rs")
        barrier.wait()
        try:
            registry.register("shared", tree, Catalog())
        except DuplicateUnit:
            with lock:
                duplicates.append(index)
            return
        with lock:
            successes.append(index)

    threads = [threading.Thread(target=produce, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(successes) == 1
    assert len(duplicates) == workers - 1
    winner = successes[0]
    assert list(registry.get("shared").tree.iter_paths()) == [f"file_{winner}.rs"]


def test_concurrent_registration_of_distinct_names() -> None:
    registry = UnitRegistry()
    barrier = threading.Barrier(8)

    def produce(index: int) -> None:
        barrier.wait()
        registry.register(f"unit-{index}", TreeNode(), Catalog())

    threads = [threading.Thread(target=produce, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(registry.names()) == sorted(f"unit-{i}" for i in range(8))


def test_constructor_accepts_prebuilt_units() -> None:
    source = UnitRegistry()
    source.register("a", TreeNode(), Catalog())
    source.register("b", TreeNode(), Catalog())

    copy = UnitRegistry(list(source.all_units()))
    assert copy.names() == ["a", "b"]
    assert not copy.is_frozen
