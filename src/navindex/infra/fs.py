from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation, user data directory resolution
and atomic file persistence for navigation artifacts. Acts as an
abstraction over the 'os' module to ensure uniform behavior across Windows
and Unix-like systems.
"""

import os
import tempfile
from typing import Optional

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "NavIndex"
UNIX_APP_DIR_NAME = ".navindex"
DEFAULT_ARTIFACT_NAME = "navigation.jsonl"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/NavIndex
    - Linux/Mac: ~/.navindex

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        # Read-only homes still get a usable path; writers report their own errors
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def is_remote_source(source: str) -> bool:
    """Tell whether an artifact source is an HTTP(S) URL rather than a path."""
    lowered = source.strip().lower()
    return lowered.startswith("http://") or lowered.startswith("https://")

# -----------------------------------------------------------------------------
# PERSISTENCE API
# -----------------------------------------------------------------------------

def atomic_write_text(path: str, content: str, encoding: str = "utf-8") -> str:
    """
    Write text so readers never observe a partially written file.

    Content goes to a temporary sibling which then replaces the target.

    Args:
        path: Destination file.
        content: Text to persist.
        encoding: Text encoding.

    Returns:
        str: Absolute path of the destination.

    Raises:
        OSError: If the directory cannot be created or the write fails.
    """
    target = os.path.abspath(path)
    parent = os.path.dirname(target)
    os.makedirs(parent, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(prefix=".navindex-", suffix=".tmp", dir=parent)
    try:
        # newline="" keeps '\n' on every platform for byte-stable artifacts
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(content)
        os.replace(tmp_path, target)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise

    return target
