from __future__ import annotations

"""
Navigation Text Renderer.

Converts source trees and item catalogs into plain-text listings for
terminal inspection. Trees are drawn with ASCII connectors in their stored
(insertion) order; nothing is re-sorted.
"""

from typing import List, Optional

from navindex.domain.catalog_models import Catalog
from navindex.domain.tree_models import TreeNode
from navindex.domain.unit_models import Unit

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_tree(node: TreeNode, root_label: Optional[str] = None) -> List[str]:
    """
    Render a source tree as connector lines.

    Directories are listed before files, matching the serialized layout.

    Args:
        node: Tree root to render.
        root_label: Optional first line (e.g. the unit name).

    Returns:
        List[str]: Visual lines of the tree.
    """
    lines: List[str] = []
    if root_label is not None:
        lines.append(root_label)
    _render_level(node, lines, prefix="")
    return lines


def render_catalog(catalog: Catalog, width: int = 100) -> List[str]:
    """
    Render a catalog grouped by category.

    Summaries longer than 'width' characters are truncated with an ellipsis.
    """
    lines: List[str] = []
    for category in catalog.categories():
        entries = catalog.entries_of(category)
        lines.append(f"[{category}] ({len(entries)})")
        for entry in entries:
            summary = entry.summary
            if len(summary) > width:
                summary = summary[: width - 3] + "..."
            lines.append(f"  {entry.name}" + (f" - {summary}" if summary else ""))
    return lines


def render_unit(unit: Unit, show_catalog: bool = True) -> List[str]:
    lines = render_tree(unit.tree, root_label=unit.name)
    if show_catalog and len(unit.catalog):
        lines.append("")
        lines.extend(render_catalog(unit.catalog))
    return lines

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _render_level(node: TreeNode, lines: List[str], prefix: str) -> None:
    """Recursively append the children of 'node' using └── / ├── connectors."""
    entries = [(child.name, child) for child in node.directories]
    entries += [(file_name, None) for file_name in node.files]
    total = len(entries)

    for i, (label, child) in enumerate(entries):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "

        if child is not None:
            lines.append(f"{prefix}{connector}{label}/")
            _render_level(child, lines, prefix + ("    " if is_last else "│   "))
            continue

        lines.append(f"{prefix}{connector}{label}")
