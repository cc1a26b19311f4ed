from __future__ import annotations

"""
Source File Filtering Engine.

Implements the regex-based inclusion/exclusion rules applied while scanning
a unit's source directory, plus .gitignore glob translation.
"""

import fnmatch
import os
import re
from typing import List

# -----------------------------------------------------------------------------
# CONFIGURATION DEFAULTS
# -----------------------------------------------------------------------------

def default_extensions() -> List[str]:
    """
    Get the default list of source extensions listed in a source browser.

    Returns:
        List[str]: Extensions including the leading dot.
    """
    return [".rs"]


def default_include_patterns() -> List[str]:
    """Inclusion regexes matching every name."""
    return [".*"]


def default_exclude_patterns() -> List[str]:
    """
    Get the system-level exclusion patterns.

    Skips build output, VCS metadata and hidden entries that never belong
    in a published source tree.

    Returns:
        List[str]: List of regex patterns for common exclusions.
    """
    return [
        r"^(target|__pycache__|\.git|\.idea|\.vscode|node_modules)$",
        r"^\.",
    ]

# -----------------------------------------------------------------------------
# PATTERN COMPILATION AND MATCHING
# -----------------------------------------------------------------------------

def compile_patterns(patterns: List[str]) -> List[re.Pattern]:
    """
    Transform raw regex strings into compiled Pattern objects.

    Malformed regex strings are discarded so a single bad rule from user
    configuration does not abort a build.

    Args:
        patterns: List of raw regex strings.

    Returns:
        List[re.Pattern]: Compiled regex objects.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error:
            continue
    return compiled


def matches_any(name: str, compiled_patterns: List[re.Pattern]) -> bool:
    """Verify if a name matches at least one compiled pattern."""
    return any(rx.search(name) for rx in compiled_patterns)


def matches_include(name: str, include_patterns: List[re.Pattern]) -> bool:
    """
    Verify if a name satisfies the inclusion whitelist.

    Args:
        name: Filename to evaluate.
        include_patterns: Compiled inclusion regex objects.

    Returns:
        bool: True if matched, False if the list is empty or no match occurs.
    """
    if not include_patterns:
        return False
    return any(rx.search(name) for rx in include_patterns)


def has_extension(name: str, extensions: List[str]) -> bool:
    """Check a file name against an extension whitelist (empty list accepts all)."""
    if not extensions:
        return True
    _, ext = os.path.splitext(name)
    return ext in extensions or name in extensions

# -----------------------------------------------------------------------------
# GITIGNORE INTEGRATION
# -----------------------------------------------------------------------------

def load_gitignore_patterns(root_path: str) -> List[str]:
    """
    Parse a .gitignore file and translate its glob rules into Python regexes.

    Args:
        root_path: Parent directory containing the .gitignore file.

    Returns:
        List[str]: List of equivalent regex strings.
    """
    gitignore_path = os.path.join(root_path, ".gitignore")
    if not os.path.exists(gitignore_path):
        return []

    regex_patterns: List[str] = []
    with open(gitignore_path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or line.startswith("!"):
                continue
            regex_patterns.append(fnmatch.translate(line.rstrip("/")))

    return regex_patterns
