from __future__ import annotations

"""
Source Tree Structure Data Models.

Provides the recursive node type used to describe the source browser of a
single compilation unit. Nodes keep their children in first-insertion order,
which is the order shown to readers, and own their subtrees exclusively.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from navindex.domain.errors import FrozenError, InvalidName, MalformedArtifact, NameConflict

PathLike = Union[str, Sequence[str]]

# Separators refused inside a single segment
_FORBIDDEN_CHARS = ("/", "\\")
_RELATIVE_MARKERS = (".", "..")


# -----------------------------------------------------------------------------
# PATH HELPERS
# -----------------------------------------------------------------------------

def split_path(path: PathLike) -> Tuple[str, ...]:
    """
    Normalize a tree path into a tuple of validated segments.

    Args:
        path: Either a '/' separated string or a sequence of segments.

    Returns:
        Tuple[str, ...]: The validated segments.

    Raises:
        InvalidName: If the path is empty or a segment is not a plain name.
    """
    if isinstance(path, str):
        segments: Tuple[str, ...] = tuple(path.split("/"))
    else:
        segments = tuple(path)

    if not segments:
        raise InvalidName("Tree path must contain at least one segment.")

    for segment in segments:
        validate_name(segment)
    return segments


def validate_name(name: Any, kind: str = "tree") -> str:
    """Ensure a single name is usable as one path segment (tree entries, unit directories)."""
    if not isinstance(name, str) or not name:
        raise InvalidName(f"Invalid {kind} name: {name!r}.")
    if name in _RELATIVE_MARKERS or any(ch in name for ch in _FORBIDDEN_CHARS):
        raise InvalidName(f"Invalid {kind} name: {name!r}.")
    return name


# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass
class TreeNode:
    """
    A directory holding ordered subdirectories and files.

    The root node of a unit carries an empty name. Names are unique per
    node across both files and directories.

    Attributes:
        name: Directory name ('' for the unit root).
        directories: Child directory nodes in first-insertion order.
        files: File names in first-insertion order.
    """
    name: str = ""
    directories: List["TreeNode"] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    _frozen: bool = field(default=False, repr=False, compare=False)

    # -------------------------------------------------------------------------
    # MUTATION
    # -------------------------------------------------------------------------

    def insert_file(self, path: PathLike) -> None:
        """
        Insert a file, creating intermediate directories on demand.

        Re-inserting an existing file is a no-op. The whole path is checked
        before any node is created, so a failing call leaves the tree as it
        was.

        Args:
            path: Segments leading to the file; the last one is the file name.

        Raises:
            NameConflict: If a segment collides with an entry of the other kind.
            FrozenError: If the tree has been sealed.
        """
        segments = split_path(path)
        self._ensure_mutable()
        parent = self._prepare(segments[:-1], segments)

        leaf = segments[-1]
        if parent._directory(leaf) is not None:
            raise NameConflict(segments, "directory")
        if leaf not in parent.files:
            parent.files.append(leaf)

    def insert_directory(self, path: PathLike) -> "TreeNode":
        """
        Insert a directory path, creating every missing level.

        Args:
            path: Segments of the directory to create.

        Returns:
            TreeNode: The node at the end of the path.

        Raises:
            NameConflict: If a segment is already used by a file.
            FrozenError: If the tree has been sealed.
        """
        segments = split_path(path)
        self._ensure_mutable()
        return self._prepare(segments, segments)

    def freeze(self) -> None:
        """Seal this node and every descendant against further insertion."""
        self._frozen = True
        for child in self.directories:
            child.freeze()

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # -------------------------------------------------------------------------
    # QUERIES
    # -------------------------------------------------------------------------

    def find(self, path: PathLike) -> Optional["TreeNode"]:
        """Return the directory node at 'path', or None when absent."""
        node: Optional[TreeNode] = self
        for segment in split_path(path):
            assert node is not None
            node = node._directory(segment)
            if node is None:
                return None
        return node

    def has_file(self, path: PathLike) -> bool:
        segments = split_path(path)
        parent = self.find(segments[:-1]) if len(segments) > 1 else self
        return parent is not None and segments[-1] in parent.files

    def iter_paths(self) -> Iterator[str]:
        """
        Flatten the tree into '/' joined file paths.

        Files of a node come before the contents of its subdirectories,
        unlike the serialized form and render_tree, which list
        subdirectories first.

        Yields:
            str: Relative path of each file.
        """
        yield from self._walk_files(())

    def iter_directory_paths(self) -> Iterator[str]:
        """Yield the relative path of every directory below this node."""
        yield from self._walk_dirs(())

    def file_count(self) -> int:
        return len(self.files) + sum(child.file_count() for child in self.directories)

    def copy(self) -> "TreeNode":
        """Deep copy into a new, unsealed tree."""
        return TreeNode(
            name=self.name,
            directories=[child.copy() for child in self.directories],
            files=list(self.files),
        )

    # -------------------------------------------------------------------------
    # CONVERSION
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the {'name', 'dirs', 'files'} shape used by artifacts."""
        return {
            "name": self.name,
            "dirs": [child.to_dict() for child in self.directories],
            "files": list(self.files),
        }

    @classmethod
    def from_dict(cls, data: Any, *, _root: bool = True) -> "TreeNode":
        """
        Rebuild a tree from its dictionary form.

        Args:
            data: Mapping with 'name', 'dirs' and 'files' keys. Extra keys are ignored.

        Returns:
            TreeNode: A new unsealed tree.

        Raises:
            MalformedArtifact: If the structure, a name, or a uniqueness rule is violated.
        """
        if not isinstance(data, dict):
            raise MalformedArtifact(f"Tree node must be an object, got {type(data).__name__}.")

        name = data.get("name", "")
        dirs = data.get("dirs", [])
        files = data.get("files", [])
        if not isinstance(name, str) or not isinstance(dirs, list) or not isinstance(files, list):
            raise MalformedArtifact("Tree node fields have unexpected types.")

        if not _root:
            try:
                validate_name(name)
            except InvalidName as e:
                raise MalformedArtifact(str(e)) from e

        node = cls(name=name)
        seen = set()
        for child_data in dirs:
            child = cls.from_dict(child_data, _root=False)
            if child.name in seen:
                raise MalformedArtifact(f"Duplicate name '{child.name}' in tree node '{name}'.")
            seen.add(child.name)
            node.directories.append(child)

        for file_name in files:
            try:
                validate_name(file_name)
            except InvalidName as e:
                raise MalformedArtifact(str(e)) from e
            if file_name in seen:
                raise MalformedArtifact(f"Duplicate name '{file_name}' in tree node '{name}'.")
            seen.add(file_name)
            node.files.append(file_name)

        return node

    # -------------------------------------------------------------------------
    # INTERNAL HELPERS
    # -------------------------------------------------------------------------

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise FrozenError("Tree is sealed and can no longer be modified.")

    def _directory(self, name: str) -> Optional["TreeNode"]:
        for child in self.directories:
            if child.name == name:
                return child
        return None

    def _prepare(self, dir_segments: Sequence[str], full_path: Sequence[str]) -> "TreeNode":
        """Validate a directory chain, then materialize the missing levels."""
        # 1. Dry run: detect file/directory collisions before touching anything
        node: Optional[TreeNode] = self
        for depth, segment in enumerate(dir_segments):
            assert node is not None
            if segment in node.files:
                raise NameConflict(full_path[: depth + 1], "file")
            node = node._directory(segment)
            if node is None:
                break

        # 2. Materialization
        current = self
        for segment in dir_segments:
            child = current._directory(segment)
            if child is None:
                child = TreeNode(name=segment)
                current.directories.append(child)
            current = child
        return current

    def _walk_files(self, prefix: Tuple[str, ...]) -> Iterator[str]:
        for file_name in self.files:
            yield "/".join(prefix + (file_name,))
        for child in self.directories:
            yield from child._walk_files(prefix + (child.name,))

    def _walk_dirs(self, prefix: Tuple[str, ...]) -> Iterator[str]:
        for child in self.directories:
            child_path = prefix + (child.name,)
            yield "/".join(child_path)
            yield from child._walk_dirs(child_path)
