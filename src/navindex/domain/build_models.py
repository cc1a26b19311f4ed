from __future__ import annotations

"""
Build Result Data Models.

Defines the immutable result returned by the build pipeline to interface
layers, together with its factory functions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class BuildResult:
    """
    Outcome of one build invocation.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        artifact_path: Absolute path of the written navigation artifact.
        legacy_files: Paths of the legacy scripts written (if requested).
        units: Unit names in the final artifact, in artifact order.
        failures: Isolated unit or artifact failures as 'label: message' strings.
        replaced: Units resolved by merge priority.
        summary: Execution statistics.
    """
    ok: bool
    error: str

    artifact_path: str = ""
    legacy_files: List[str] = field(default_factory=list)
    units: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    replaced: List[str] = field(default_factory=list)

    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        failures: Optional[List[str]] = None,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> BuildResult:
    """
    Create a failed build result instance.

    Args:
        error: Detailed error description.
        failures: Isolated failures collected before the abort.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        BuildResult: An immutable error result object.
    """
    return BuildResult(
        ok=False,
        error=error,
        failures=failures or [],
        summary=summary_extra or {},
    )


def create_success_result(
        artifact_path: str,
        units: List[str],
        legacy_files: Optional[List[str]] = None,
        failures: Optional[List[str]] = None,
        replaced: Optional[List[str]] = None,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> BuildResult:
    """
    Create a successful build result instance.

    Isolated failures do not flip 'ok'; they are reported alongside.

    Returns:
        BuildResult: An immutable success result object.
    """
    return BuildResult(
        ok=True,
        error="",
        artifact_path=artifact_path,
        legacy_files=legacy_files or [],
        units=units,
        failures=failures or [],
        replaced=replaced or [],
        summary=summary_extra or {},
    )
