from __future__ import annotations

"""
Navigation Index Error Taxonomy.

Every failure raised by the index model derives from NavIndexError so that
interface layers can trap the whole family with a single clause. Lookup and
decoding errors also inherit from the matching builtin (KeyError, ValueError)
to stay friendly with generic callers.
"""

from typing import Optional, Sequence


# -----------------------------------------------------------------------------
# BASE CLASS
# -----------------------------------------------------------------------------

class NavIndexError(Exception):
    """Root of all navigation index errors."""


# -----------------------------------------------------------------------------
# MODEL ERRORS
# -----------------------------------------------------------------------------

class NameConflict(NavIndexError):
    """
    A file and a directory collide on the same name inside one tree node.

    Attributes:
        path: Segments leading to the conflicting entry (inclusive).
        existing_kind: Kind already stored at that position ('file' or 'directory').
    """

    def __init__(self, path: Sequence[str], existing_kind: str) -> None:
        self.path = tuple(path)
        self.existing_kind = existing_kind
        joined = "/".join(self.path)
        super().__init__(f"Name conflict at '{joined}': a {existing_kind} with that name already exists.")


class InvalidName(NavIndexError, ValueError):
    """A tree segment is empty, a relative marker, or holds a path separator."""


class DuplicateName(NavIndexError):
    """
    A catalog entry name is already used inside the same category.

    Attributes:
        category: Category where the collision happened.
        name: Offending entry name.
    """

    def __init__(self, category: str, name: str) -> None:
        self.category = category
        self.name = name
        super().__init__(f"Duplicate entry '{name}' in category '{category}'.")


class DuplicateUnit(NavIndexError):
    """A unit with the same name is already registered."""

    def __init__(self, unit_name: str) -> None:
        self.unit_name = unit_name
        super().__init__(f"Unit '{unit_name}' is already registered.")


class NotFound(NavIndexError, KeyError):
    """Lookup miss for a unit, a catalog entry or a tree path."""

    def __init__(self, what: str, key: str) -> None:
        self.what = what
        self.key = key
        super().__init__(f"{what} '{key}' not found.")

    def __str__(self) -> str:
        # KeyError would otherwise wrap the message in quotes
        return str(self.args[0])


class FrozenError(NavIndexError):
    """Mutation attempted on a sealed tree, catalog or registry."""


# -----------------------------------------------------------------------------
# ARTIFACT ERRORS
# -----------------------------------------------------------------------------

class MalformedArtifact(NavIndexError, ValueError):
    """
    A navigation artifact failed structural validation while being decoded.

    Attributes:
        source: Optional identifier of the artifact (path or URL).
        line: Optional 1-based line number where decoding failed.
    """

    def __init__(self, message: str, source: Optional[str] = None, line: Optional[int] = None) -> None:
        self.source = source
        self.line = line
        location = ""
        if source:
            location = f" [{source}" + (f":{line}" if line else "") + "]"
        elif line:
            location = f" [line {line}]"
        super().__init__(f"{message}{location}")
