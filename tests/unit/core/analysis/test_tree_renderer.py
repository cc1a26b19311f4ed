from __future__ import annotations

"""
Unit tests for the Navigation Text Renderer.
"""

from conftest import make_catalog, make_tree
from navindex.core.analysis.tree_renderer import render_catalog, render_tree, render_unit
from navindex.domain.unit_models import Unit


def test_render_tree_uses_connectors_and_keeps_order() -> None:
    tree = make_tree("zeta.rs", "sys/unix.rs", "sys/mod.rs", "alpha.rs")

    assert render_tree(tree, root_label="std") == [
        "std",
        "├── sys/",
        "│   ├── unix.rs",
        "│   └── mod.rs",
        "├── zeta.rs",
        "└── alpha.rs",
    ]


def test_render_empty_tree() -> None:
    assert render_tree(make_tree()) == []


def test_render_catalog_groups_and_truncates() -> None:
    catalog = make_catalog({
        "trait": [("Read", "x" * 20), ("Write", "")],
        "module": [("io", "I/O")],
    })

    assert render_catalog(catalog, width=10) == [
        "[trait] (2)",
        "  Read - xxxxxxx...",
        "  Write",
        "[module] (1)",
        "  io - I/O",
    ]


def test_render_unit_optionally_includes_catalog() -> None:
    unit = Unit(name="core", tree=make_tree("lib.rs"), catalog=make_catalog({"macro": [("vec", "")]}))

    assert render_unit(unit, show_catalog=False) == ["core", "└── lib.rs"]
    assert render_unit(unit) == ["core", "└── lib.rs", "", "[macro] (1)", "  vec"]
