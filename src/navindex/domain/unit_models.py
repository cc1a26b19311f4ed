from __future__ import annotations

"""
Compilation Unit Data Model.

A unit pairs the source tree and the item catalog produced for one named
component (typically a package). Units are treated atomically by the
registry and the merger: they are replaced whole, never field-merged.
"""

from dataclasses import dataclass
from typing import Any, Dict

from navindex.domain.catalog_models import Catalog
from navindex.domain.errors import InvalidName, MalformedArtifact
from navindex.domain.tree_models import TreeNode, validate_name


@dataclass(frozen=True)
class Unit:
    """
    Navigation data of one compilation unit.

    Attributes:
        name: Globally unique unit identifier.
        tree: Root of the unit source tree.
        catalog: Categorized API items of the unit.
    """
    name: str
    tree: TreeNode
    catalog: Catalog

    def seal(self) -> "Unit":
        """Freeze the tree and catalog in place and return self."""
        self.tree.freeze()
        self.catalog.freeze()
        return self

    @property
    def is_sealed(self) -> bool:
        return self.tree.is_frozen and self.catalog.is_frozen

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "tree": self.tree.to_dict(),
            "catalog": self.catalog.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Unit":
        """Decode a unit record; raises MalformedArtifact on bad structure."""
        if not isinstance(data, dict):
            raise MalformedArtifact(f"Unit record must be an object, got {type(data).__name__}.")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise MalformedArtifact("Unit record is missing a valid 'name'.")
        try:
            validate_name(name, kind="unit")
        except InvalidName as e:
            raise MalformedArtifact(str(e)) from e
        if "tree" not in data or "catalog" not in data:
            raise MalformedArtifact(f"Unit '{name}' is missing 'tree' or 'catalog'.")
        return cls(
            name=name,
            tree=TreeNode.from_dict(data["tree"]),
            catalog=Catalog.from_dict(data["catalog"]),
        )
