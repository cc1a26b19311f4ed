from __future__ import annotations

"""
Source Tree Builder.

Walks a unit's source directory and produces the TreeNode shown by the
source browser. Applies the same regex and .gitignore filtering as the
rest of the scanning layer and prunes directories left empty by filtering.
"""

import logging
import os
import re
from typing import List, Optional, Tuple

from navindex.core.analysis.filters import (
    compile_patterns,
    default_exclude_patterns,
    default_extensions,
    default_include_patterns,
    has_extension,
    load_gitignore_patterns,
    matches_any,
    matches_include,
)
from navindex.domain.tree_models import TreeNode

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def build_tree_from_directory(
        input_path: str,
        extensions: Optional[List[str]] = None,
        include_patterns: Optional[List[str]] = None,
        exclude_patterns: Optional[List[str]] = None,
        respect_gitignore: bool = True,
) -> TreeNode:
    """
    Build the source tree of one unit from the filesystem.

    Directories and files are visited in sorted order, which becomes the
    insertion (display) order of the resulting tree.

    Args:
        input_path: Root directory of the unit sources.
        extensions: Allowed file extensions.
        include_patterns: Inclusion regexes for file names.
        exclude_patterns: Exclusion regexes for file and directory names.
        respect_gitignore: Also exclude names matched by the root .gitignore.

    Returns:
        TreeNode: Unsealed root node (empty name).

    Raises:
        NotADirectoryError: If input_path is not a directory.
    """
    root_path = os.path.abspath(input_path)
    if not os.path.isdir(root_path):
        raise NotADirectoryError(f"Source root is not a directory: {input_path}")

    logger.debug(f"Scanning source tree: {root_path}")

    include_rx, exclude_rx = _setup_tree_filters(
        root_path, include_patterns, exclude_patterns, respect_gitignore
    )
    allowed = extensions if extensions is not None else default_extensions()

    tree = TreeNode()
    for root, dirs, files in os.walk(root_path):
        # In-place modification of dirs prunes the walk
        dirs[:] = sorted(d for d in dirs if not matches_any(d, exclude_rx))

        rel_root = os.path.relpath(root, root_path)
        prefix: Tuple[str, ...] = () if rel_root == "." else tuple(rel_root.split(os.sep))

        for file_name in sorted(files):
            if matches_any(file_name, exclude_rx):
                continue
            if not matches_include(file_name, include_rx):
                continue
            if not has_extension(file_name, allowed):
                continue
            tree.insert_file(prefix + (file_name,))

    logger.debug(f"Source tree for {root_path}: {tree.file_count()} files.")
    return tree

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _setup_tree_filters(
        path: str,
        inc: Optional[List[str]],
        exc: Optional[List[str]],
        gitignore: bool,
) -> Tuple[List[re.Pattern], List[re.Pattern]]:
    """Aggregate and compile all filtering patterns into regex objects."""
    final_exclusions = list(exc) if exc is not None else default_exclude_patterns()
    if gitignore:
        final_exclusions.extend(load_gitignore_patterns(path))

    return compile_patterns(inc or default_include_patterns()), compile_patterns(final_exclusions)
