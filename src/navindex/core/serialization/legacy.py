from __future__ import annotations

"""
Legacy JavaScript Index Interop.

Reads and writes the script files older documentation front-ends load
directly in the browser:

    source-files.js       var N = null;var sourcesIndex = {};
                          sourcesIndex["<unit>"] = {"name":"","dirs":[...],"files":[...]};
                          createSourceSidebar();

    <unit>/sidebar-items.js
                          initSidebarItems({"mod":[["name","summary"], ...], ...});

Sidebar files use short category keys ('mod', 'fn', 'attr'); they are
translated to and from the long names used by the catalog model.
"""

import json
import logging
import os
import re
from typing import Dict, List, Optional

from navindex.core.services.registry import UnitRegistry
from navindex.domain import catalog_models
from navindex.domain.catalog_models import Catalog
from navindex.domain.errors import DuplicateUnit, InvalidName, MalformedArtifact
from navindex.domain.tree_models import TreeNode, validate_name
from navindex.infra.fs import atomic_write_text

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# FORMAT CONSTANTS
# -----------------------------------------------------------------------------

SOURCE_INDEX_FILENAME = "source-files.js"
SIDEBAR_ITEMS_FILENAME = "sidebar-items.js"

_SOURCE_INDEX_PREAMBLE = "var N = null;var sourcesIndex = {};"
_SOURCE_INDEX_TRAILER = "createSourceSidebar();"

_SOURCE_LINE_RX = re.compile(r'^sourcesIndex\[(?P<key>"(?:[^"\\]|\\.)*")\]\s*=\s*(?P<tree>\{.*\});\s*$')
_SIDEBAR_RX = re.compile(r"^\s*initSidebarItems\((?P<items>\{.*\})\);?\s*$", re.DOTALL)

# Long catalog names -> short sidebar keys (others are identical)
_SHORT_KEYS: Dict[str, str] = {
    catalog_models.MODULE: "mod",
    catalog_models.FUNCTION: "fn",
    catalog_models.ATTRIBUTE: "attr",
}
_LONG_KEYS: Dict[str, str] = {short: long for long, short in _SHORT_KEYS.items()}

_SEPARATORS = (",", ":")


def to_sidebar_key(category: str) -> str:
    return _SHORT_KEYS.get(category, category)


def from_sidebar_key(key: str) -> str:
    return _LONG_KEYS.get(key, key)


# -----------------------------------------------------------------------------
# RENDERING
# -----------------------------------------------------------------------------

def render_source_index(registry: UnitRegistry) -> str:
    """
    Render the source browser script for every unit of a registry.

    Returns:
        str: Content of source-files.js.
    """
    lines = [_SOURCE_INDEX_PREAMBLE]
    for unit in registry.all_units():
        key = json.dumps(unit.name, ensure_ascii=False)
        tree = json.dumps(unit.tree.to_dict(), ensure_ascii=False, separators=_SEPARATORS)
        lines.append(f"sourcesIndex[{key}] = {tree};")
    lines.append(_SOURCE_INDEX_TRAILER)
    return "\n".join(lines) + "\n"


def render_sidebar_items(catalog: Catalog) -> str:
    """Render the sidebar script of a single catalog."""
    items = {to_sidebar_key(category): rows for category, rows in catalog.to_dict().items()}
    payload = json.dumps(items, ensure_ascii=False, separators=_SEPARATORS)
    return f"initSidebarItems({payload});"


def export_legacy(registry: UnitRegistry, out_dir: str) -> List[str]:
    """
    Write source-files.js and one sidebar-items.js per unit.

    Args:
        registry: Registry to export.
        out_dir: Destination directory.

    Returns:
        List[str]: Paths of the written files.
    """
    written = [atomic_write_text(os.path.join(out_dir, SOURCE_INDEX_FILENAME), render_source_index(registry))]
    for unit in registry.all_units():
        sidebar_path = os.path.join(out_dir, unit.name, SIDEBAR_ITEMS_FILENAME)
        written.append(atomic_write_text(sidebar_path, render_sidebar_items(unit.catalog)))

    logger.info(f"Legacy: Exported {len(registry)} units to {out_dir}")
    return written


# -----------------------------------------------------------------------------
# PARSING
# -----------------------------------------------------------------------------

def parse_source_index(text: str, source: Optional[str] = None) -> Dict[str, TreeNode]:
    """
    Parse a source-files.js script.

    Preamble and trailer statements are tolerated; any other line must be
    a sourcesIndex assignment.

    Returns:
        Dict[str, TreeNode]: Unit name to tree, in script order.

    Raises:
        MalformedArtifact: On unrecognized lines, bad JSON or duplicate units.
    """
    trees: Dict[str, TreeNode] = {}

    for line_no, raw in enumerate(text.split("\n"), start=1):
        line = raw.strip()
        if not line or line in (_SOURCE_INDEX_PREAMBLE, _SOURCE_INDEX_TRAILER):
            continue

        match = _SOURCE_LINE_RX.match(line)
        if not match:
            raise MalformedArtifact("Unrecognized statement in source index.", source=source, line=line_no)

        try:
            name = json.loads(match.group("key"))
            tree_data = json.loads(match.group("tree"))
        except ValueError as e:
            raise MalformedArtifact(f"Invalid JSON: {e}", source=source, line=line_no) from e

        try:
            validate_name(name, kind="unit")
        except InvalidName as e:
            raise MalformedArtifact(str(e), source=source, line=line_no) from e

        if name in trees:
            raise MalformedArtifact(f"Unit '{name}' defined twice.", source=source, line=line_no)
        try:
            trees[name] = TreeNode.from_dict(tree_data)
        except MalformedArtifact as e:
            raise MalformedArtifact(str(e), source=source, line=line_no) from e

    return trees


def parse_sidebar_items(text: str, source: Optional[str] = None) -> Catalog:
    """
    Parse a sidebar-items.js script into a catalog.

    Raises:
        MalformedArtifact: If the script is not a single initSidebarItems call.
    """
    match = _SIDEBAR_RX.match(text)
    if not match:
        raise MalformedArtifact("Expected an initSidebarItems(...) call.", source=source)

    try:
        items = json.loads(match.group("items"))
    except ValueError as e:
        raise MalformedArtifact(f"Invalid JSON: {e}", source=source) from e
    if not isinstance(items, dict):
        raise MalformedArtifact("Sidebar items must be an object.", source=source)

    try:
        return Catalog.from_dict({from_sidebar_key(k): v for k, v in items.items()})
    except MalformedArtifact as e:
        raise MalformedArtifact(str(e), source=source) from e


def import_legacy(source_files_path: str, sidebar_dir: Optional[str] = None) -> UnitRegistry:
    """
    Build a frozen registry from legacy scripts.

    Args:
        source_files_path: Path to source-files.js.
        sidebar_dir: Optional directory holding '<unit>/sidebar-items.js';
            units without one get an empty catalog.

    Returns:
        UnitRegistry: Frozen registry in script order.
    """
    with open(source_files_path, "r", encoding="utf-8") as f:
        trees = parse_source_index(f.read(), source=source_files_path)

    registry = UnitRegistry()
    for name, tree in trees.items():
        catalog = Catalog()
        if sidebar_dir:
            sidebar_path = os.path.join(sidebar_dir, name, SIDEBAR_ITEMS_FILENAME)
            if os.path.isfile(sidebar_path):
                with open(sidebar_path, "r", encoding="utf-8") as f:
                    catalog = parse_sidebar_items(f.read(), source=sidebar_path)
            else:
                logger.debug(f"Legacy: No sidebar items for unit '{name}'.")
        try:
            registry.register(name, tree, catalog)
        except (DuplicateUnit, ValueError) as e:
            raise MalformedArtifact(str(e), source=source_files_path) from e

    logger.info(f"Legacy: Imported {len(registry)} units from {source_files_path}")
    return registry.freeze()
