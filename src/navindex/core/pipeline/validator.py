from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper for the build pipeline, ensuring that the
configuration dictionary conforms to the expected schema. Handles type
coercion, path normalization, and default value injection.
"""

import logging
import os
from typing import Any, Dict, List, Tuple

from navindex.core.services.merger import LAST_WINS, PRIORITY_RULES
from navindex.domain.config import get_default_config
from navindex.infra.fs import is_remote_source, normalize_path

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts untrusted inputs (config files, CLI) into strictly typed
    parameters and fills missing keys with domain defaults.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raise on invalid values instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
        a list of warnings.

    Raises:
        TypeError: In strict mode, on a type mismatch.
        ValueError: In strict mode, on an invalid value.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    # 2. Scalar fields
    for field in ("output_path", "legacy_export_dir", "log_level", "log_file", "merge_priority"):
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    merged["respect_gitignore"] = _as_bool(
        merged.get("respect_gitignore"), defaults["respect_gitignore"], "respect_gitignore", warnings, strict
    )
    merged["max_workers"] = _as_int(merged.get("max_workers"), defaults["max_workers"], "max_workers", warnings, strict)

    # 3. List fields
    for field in ("extensions", "include_patterns", "exclude_patterns", "merge_with"):
        merged[field] = _as_list_str(merged.get(field), defaults[field], field, warnings, strict)

    # 4. Domain-specific normalization
    merged["source_roots"] = _as_source_roots(merged.get("source_roots"), warnings, strict)
    merged["extensions"] = _normalize_extensions(merged["extensions"])
    merged["output_path"] = normalize_path(merged["output_path"], defaults["output_path"])
    if merged["legacy_export_dir"]:
        merged["legacy_export_dir"] = normalize_path(merged["legacy_export_dir"], "")
    merged["merge_with"] = [
        s if is_remote_source(s) else normalize_path(s, s) for s in merged["merge_with"]
    ]

    if merged["merge_priority"] not in PRIORITY_RULES:
        msg = f"Invalid field 'merge_priority': '{merged['merge_priority']}' is not one of {PRIORITY_RULES}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using '{LAST_WINS}'.")
        merged["merge_priority"] = LAST_WINS

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        return value.strip()

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce non-negative integers; strings of digits are accepted leniently."""
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    if value is None:
        return fallback

    if not strict and isinstance(value, str) and value.strip().isdigit():
        warnings.append(f"Field '{field}' converted from '{value}' to int.")
        return int(value.strip())

    msg = f"Invalid field '{field}': expected non-negative int, received {value!r}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Accept lists of strings or a comma separated string."""
    if value is None:
        return list(fallback)
    if isinstance(value, str):
        return [x.strip() for x in value.split(",") if x.strip()]
    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for item in value:
            if isinstance(item, str):
                if item.strip():
                    out.append(item.strip())
                continue
            msg = f"Invalid item in '{field}': expected str, received {type(item).__name__}."
            if strict:
                raise TypeError(msg)
            warnings.append(f"{msg} Item dropped.")
        return out

    msg = f"Invalid field '{field}': expected list of str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _as_source_roots(value: Any, warnings: List[str], strict: bool) -> Dict[str, str]:
    """Validate the unit-name -> directory mapping, normalizing directories."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"Invalid field 'source_roots': expected mapping, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Ignored.")
        return {}

    roots: Dict[str, str] = {}
    for name, path in value.items():
        if not isinstance(name, str) or not name.strip() or not isinstance(path, str) or not path.strip():
            msg = f"Invalid source root entry {name!r}: {path!r}."
            if strict:
                raise ValueError(msg)
            warnings.append(f"{msg} Entry dropped.")
            continue
        roots[name.strip()] = normalize_path(path, os.getcwd())
    return roots


def _normalize_extensions(extensions: List[str]) -> List[str]:
    """Ensure every extension carries its leading dot."""
    normalized: List[str] = []
    for ext in extensions:
        e = ext if ext.startswith(".") else f".{ext}"
        if e not in normalized:
            normalized.append(e)
    return normalized
