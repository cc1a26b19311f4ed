from __future__ import annotations

"""
API Item Catalog Data Models.

Defines the categorized listing shown in a documentation sidebar: each
category (module, macro, trait, ...) maps to an ordered list of named
entries with a one-line summary. Categories form an open set of plain
strings so new item kinds need no change here.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Tuple

from navindex.domain.errors import DuplicateName, FrozenError, MalformedArtifact, NotFound

# -----------------------------------------------------------------------------
# WELL-KNOWN CATEGORIES
# -----------------------------------------------------------------------------

MODULE = "module"
MACRO = "macro"
TRAIT = "trait"
STRUCT = "struct"
ENUM = "enum"
FUNCTION = "function"
CONSTANT = "constant"
STATIC = "static"
TYPE = "type"
UNION = "union"
ATTRIBUTE = "attribute"
DERIVE = "derive"
PRIMITIVE = "primitive"
KEYWORD = "keyword"

KNOWN_CATEGORIES: Tuple[str, ...] = (
    MODULE, MACRO, TRAIT, STRUCT, ENUM, FUNCTION, CONSTANT,
    STATIC, TYPE, UNION, ATTRIBUTE, DERIVE, PRIMITIVE, KEYWORD,
)


# -----------------------------------------------------------------------------
# DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CatalogEntry:
    """
    A single described API item.

    Attributes:
        category: Item kind, e.g. 'module' or 'trait'.
        name: Item name, unique within its category.
        summary: Free-form one-line description (may be empty).
    """
    category: str
    name: str
    summary: str = ""


class Catalog:
    """
    Ordered mapping from category to described entries.

    Category order is first-seen order; entries keep insertion order.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, List[CatalogEntry]] = {}
        self._names: Dict[str, Dict[str, CatalogEntry]] = {}
        self._frozen = False

    # -------------------------------------------------------------------------
    # MUTATION
    # -------------------------------------------------------------------------

    def add_entry(self, category: str, name: str, summary: str = "") -> CatalogEntry:
        """
        Append an entry to a category.

        Args:
            category: Target category (any non-empty string).
            name: Entry name, unique within the category.
            summary: Opaque description text.

        Returns:
            CatalogEntry: The stored entry.

        Raises:
            DuplicateName: If 'name' already exists in 'category'.
            FrozenError: If the catalog has been sealed.
            ValueError: If category or name is empty or not a string.
        """
        if self._frozen:
            raise FrozenError("Catalog is sealed and can no longer be modified.")
        if not isinstance(category, str) or not category:
            raise ValueError(f"Invalid catalog category: {category!r}.")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Invalid catalog entry name: {name!r}.")
        if not isinstance(summary, str):
            raise ValueError(f"Summary for '{name}' must be a string.")

        names = self._names.get(category)
        if names is not None and name in names:
            raise DuplicateName(category, name)

        entry = CatalogEntry(category=category, name=name, summary=summary)
        self._entries.setdefault(category, []).append(entry)
        self._names.setdefault(category, {})[name] = entry
        return entry

    def freeze(self) -> None:
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # -------------------------------------------------------------------------
    # QUERIES
    # -------------------------------------------------------------------------

    def entries_of(self, category: str) -> List[CatalogEntry]:
        """Return a copy of the ordered entries of 'category' (possibly empty)."""
        return list(self._entries.get(category, ()))

    def categories(self) -> List[str]:
        """Return the non-empty categories in first-seen order."""
        return [c for c, entries in self._entries.items() if entries]

    def get(self, category: str, name: str) -> CatalogEntry:
        entry = self._names.get(category, {}).get(name)
        if entry is None:
            raise NotFound("Catalog entry", f"{category}:{name}")
        return entry

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        category, name = key
        return name in self._names.get(category, {})

    def __iter__(self) -> Iterator[CatalogEntry]:
        for entries in self._entries.values():
            yield from entries

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Catalog):
            return NotImplemented
        return self.to_dict() == other.to_dict() and self.categories() == other.categories()

    def __repr__(self) -> str:
        counts = ", ".join(f"{c}={len(self._entries[c])}" for c in self.categories())
        return f"Catalog({counts})"

    def copy(self) -> "Catalog":
        """Return an unsealed copy with the same entries and ordering."""
        clone = Catalog()
        for entry in self:
            clone.add_entry(entry.category, entry.name, entry.summary)
        return clone

    # -------------------------------------------------------------------------
    # CONVERSION
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, List[List[str]]]:
        """Convert to {category: [[name, summary], ...]} keeping all orderings."""
        return {
            category: [[e.name, e.summary] for e in self._entries[category]]
            for category in self.categories()
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Catalog":
        """
        Rebuild a catalog from its dictionary form.

        Raises:
            MalformedArtifact: On unexpected shapes or duplicate names.
        """
        if not isinstance(data, dict):
            raise MalformedArtifact(f"Catalog must be an object, got {type(data).__name__}.")

        catalog = cls()
        for category, rows in data.items():
            if not isinstance(rows, list):
                raise MalformedArtifact(f"Entries of category '{category}' must be a list.")
            for row in rows:
                if (
                        not isinstance(row, (list, tuple))
                        or len(row) < 2
                        or not isinstance(row[0], str)
                        or not isinstance(row[1], str)
                ):
                    raise MalformedArtifact(f"Malformed entry in category '{category}': {row!r}.")
                try:
                    catalog.add_entry(category, row[0], row[1])
                except (DuplicateName, ValueError) as e:
                    raise MalformedArtifact(str(e)) from e
        return catalog
