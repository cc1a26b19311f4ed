from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared builders for trees, catalogs and registries used across tests.
"""

import os
import sys
from typing import Any, Dict, List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from navindex.core.services.registry import UnitRegistry  # noqa: E402
from navindex.domain.catalog_models import Catalog  # noqa: E402
from navindex.domain.tree_models import TreeNode  # noqa: E402


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------
def make_tree(*paths: str) -> TreeNode:
    """Build an unsealed tree from '/' separated file paths."""
    tree = TreeNode()
    for path in paths:
        tree.insert_file(path)
    return tree


def make_catalog(entries: Dict[str, List[Any]]) -> Catalog:
    """Build a catalog from {category: [(name, summary), ...]}."""
    catalog = Catalog()
    for category, rows in entries.items():
        for name, summary in rows:
            catalog.add_entry(category, name, summary)
    return catalog


def make_registry(*units: Any, freeze: bool = True) -> UnitRegistry:
    """Build a registry from (name, [paths], {catalog}) triples."""
    registry = UnitRegistry()
    for name, paths, entries in units:
        registry.register(name, make_tree(*paths), make_catalog(entries))
    return registry.freeze() if freeze else registry


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def sample_registry() -> UnitRegistry:
    """
    Return a frozen registry with two small units.

    'foo' carries a nested tree and a catalog spanning two categories;
    'bar' has a single file and no catalog entries.
    """
    return make_registry(
        (
            "foo",
            ["lib.rs", "sys/mod.rs", "sys/unix/fs.rs"],
            {"module": [("sys", "Platform layer")], "function": [("open", "Opens a file")]},
        ),
        ("bar", ["main.rs"], {}),
    )


@pytest.fixture
def mock_config_dict(tmp_path: Any) -> Dict[str, Any]:
    """
    Return a complete build configuration rooted in a temporary directory.

    Reflects the structure defined in 'navindex.domain.config'.
    """
    return {
        "source_roots": {},
        "output_path": str(tmp_path / "out" / "navigation.jsonl"),
        "legacy_export_dir": "",
        "merge_with": [],
        "merge_priority": "last_wins",
        "extensions": [".rs"],
        "include_patterns": [".*"],
        "exclude_patterns": [r"^(target|\.git)$", r"^\."],
        "respect_gitignore": True,
        "max_workers": 2,
        "log_level": "INFO",
        "log_file": "",
    }
