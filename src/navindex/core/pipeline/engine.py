from __future__ import annotations

"""
Build Pipeline Engine.

Orchestrates one build invocation: scans every configured source root in
parallel, collects the units into a registry, merges the result with prior
artifacts (local files or published URLs), and persists the navigation
artifact plus the optional legacy scripts.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from navindex.core.analysis.filters import default_exclude_patterns
from navindex.core.analysis.tree_builder import build_tree_from_directory
from navindex.core.serialization.artifact import (
    ArtifactFailure,
    deserialize_registry,
    read_artifact,
    write_artifact,
)
from navindex.core.serialization.legacy import SIDEBAR_ITEMS_FILENAME, export_legacy, parse_sidebar_items
from navindex.core.services.collector import collect_units
from navindex.core.services.merger import LAST_WINS, merge_with_report
from navindex.core.services.registry import UnitRegistry
from navindex.domain.build_models import BuildResult, create_error_result, create_success_result
from navindex.domain.catalog_models import Catalog
from navindex.domain.errors import MalformedArtifact, NavIndexError
from navindex.domain.unit_models import Unit
from navindex.infra.fs import is_remote_source
from navindex.infra.network import fetch_remote_artifact

logger = logging.getLogger(__name__)

# Catalog sidecar written next to the sources by the extraction step
CATALOG_SIDECAR_FILENAME = "navindex-catalog.json"


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_build(config: Dict[str, Any], dry_run: bool = False) -> BuildResult:
    """
    Execute a full build from a validated configuration.

    Args:
        config: Output of validate_config.
        dry_run: Compute everything but write nothing.

    Returns:
        BuildResult: Outcome with isolated failures listed.
    """
    source_roots: Dict[str, str] = config.get("source_roots", {})
    merge_sources: List[str] = config.get("merge_with", [])

    if not source_roots and not merge_sources:
        return create_error_result("Nothing to build: no source roots and no artifacts to merge.")

    logger.info(f"Build: Scanning {len(source_roots)} source roots...")

    # 1. Parallel extraction into a fresh registry
    tasks = [
        ScanTask(
            unit_name=name,
            root=path,
            extensions=config.get("extensions"),
            include_patterns=config.get("include_patterns"),
            exclude_patterns=config.get("exclude_patterns"),
            respect_gitignore=bool(config.get("respect_gitignore", True)),
        )
        for name, path in source_roots.items()
    ]
    collection = collect_units(tasks, max_workers=config.get("max_workers") or None)
    failures = [f"{f.task}: {f.error}" for f in collection.failures]

    # Completion order varies between runs; the artifact follows configuration order
    fresh = UnitRegistry(
        [collection.registry.get(name) for name in source_roots if name in collection.registry]
    ).freeze()

    # 2. Prior artifacts (oldest first), then the fresh registry as newest shard
    priors, artifact_failures = load_sources(merge_sources)
    failures.extend(f"{f.source}: {f.error}" for f in artifact_failures)

    merged, report = merge_with_report(
        priors + [fresh],
        priority=config.get("merge_priority", LAST_WINS),
    )

    if not len(merged):
        return create_error_result("Build produced no units.", failures=failures)

    summary: Dict[str, Any] = {
        "dry_run": dry_run,
        "scanned": len(source_roots),
        "collected": len(collection.registered),
        "merged_sources": report.sources,
        "units": report.units,
        "files": sum(u.tree.file_count() for u in merged.all_units()),
        "entries": sum(len(u.catalog) for u in merged.all_units()),
    }

    if dry_run:
        return create_success_result(
            artifact_path=config.get("output_path", ""),
            units=merged.names(),
            failures=failures,
            replaced=report.replaced,
            summary_extra=summary,
        )

    # 3. Persistence
    try:
        artifact_path = write_artifact(merged, config["output_path"])
        legacy_files: List[str] = []
        if config.get("legacy_export_dir"):
            legacy_files = export_legacy(merged, config["legacy_export_dir"])
    except OSError as e:
        logger.error(f"Build: Failed to persist outputs: {e}")
        return create_error_result(f"Failed to write outputs: {e}", failures=failures, summary_extra=summary)

    return create_success_result(
        artifact_path=artifact_path,
        units=merged.names(),
        legacy_files=legacy_files,
        failures=failures,
        replaced=report.replaced,
        summary_extra=summary,
    )


def run_merge(
        sources: List[str],
        output_path: str,
        priority: str = LAST_WINS,
        dry_run: bool = False,
) -> BuildResult:
    """
    Merge existing artifacts into a new one.

    Sources that fail to load are skipped and reported; the merge aborts
    only when none can be loaded.
    """
    registries, artifact_failures = load_sources(sources)
    failures = [f"{f.source}: {f.error}" for f in artifact_failures]

    if not registries:
        return create_error_result("No artifact could be loaded.", failures=failures)

    merged, report = merge_with_report(registries, priority=priority)
    summary = {"dry_run": dry_run, "merged_sources": report.sources, "units": report.units}

    artifact_path = output_path
    if not dry_run:
        try:
            artifact_path = write_artifact(merged, output_path)
        except OSError as e:
            return create_error_result(f"Failed to write artifact: {e}", failures=failures, summary_extra=summary)

    return create_success_result(
        artifact_path=artifact_path,
        units=merged.names(),
        failures=failures,
        replaced=report.replaced,
        summary_extra=summary,
    )


def load_sources(sources: List[str]) -> Tuple[List[UnitRegistry], List[ArtifactFailure]]:
    """
    Load artifacts from paths or HTTP(S) URLs, isolating each failure.

    Returns:
        Tuple[List[UnitRegistry], List[ArtifactFailure]]: Registries in input
        order and the sources that could not be loaded.
    """
    registries: List[UnitRegistry] = []
    failures: List[ArtifactFailure] = []

    for source in sources:
        try:
            if is_remote_source(source):
                text = fetch_remote_artifact(source)
                if text is None:
                    raise OSError("download failed")
                registries.append(deserialize_registry(text, source=source))
            else:
                registries.append(read_artifact(source))
        except (MalformedArtifact, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Build: Skipping artifact '{source}': {e}")
            failures.append(ArtifactFailure(source=source, error=str(e)))

    return registries, failures


def load_catalog_sidecar(root: str) -> Catalog:
    """
    Read the catalog produced for a source root by the extraction step.

    Looks for navindex-catalog.json ({category: [[name, summary], ...]})
    first, then a legacy sidebar-items.js. Missing sidecars give an empty
    catalog.

    Raises:
        MalformedArtifact: If a sidecar exists but cannot be decoded.
    """
    json_path = os.path.join(root, CATALOG_SIDECAR_FILENAME)
    if os.path.isfile(json_path):
        with open(json_path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except ValueError as e:
                raise MalformedArtifact(f"Invalid JSON: {e}", source=json_path) from e
        return Catalog.from_dict(data)

    legacy_path = os.path.join(root, SIDEBAR_ITEMS_FILENAME)
    if os.path.isfile(legacy_path):
        with open(legacy_path, "r", encoding="utf-8") as f:
            return parse_sidebar_items(f.read(), source=legacy_path)

    return Catalog()


# -----------------------------------------------------------------------------
# EXTRACTION TASK
# -----------------------------------------------------------------------------

class ScanTask:
    """Callable building the Unit of one source root (runs on a worker thread)."""

    def __init__(
            self,
            unit_name: str,
            root: str,
            extensions: Optional[List[str]] = None,
            include_patterns: Optional[List[str]] = None,
            exclude_patterns: Optional[List[str]] = None,
            respect_gitignore: bool = True,
    ) -> None:
        self.unit_name = unit_name
        self.root = root
        self.extensions = extensions
        self.include_patterns = include_patterns
        self.exclude_patterns = exclude_patterns
        self.respect_gitignore = respect_gitignore

    def __call__(self) -> Unit:
        tree = build_tree_from_directory(
            self.root,
            extensions=self.extensions,
            include_patterns=self.include_patterns,
            exclude_patterns=self._exclusions(),
            respect_gitignore=self.respect_gitignore,
        )
        try:
            catalog = load_catalog_sidecar(self.root)
        except NavIndexError as e:
            raise MalformedArtifact(f"Catalog sidecar of '{self.unit_name}' is invalid: {e}") from e
        return Unit(name=self.unit_name, tree=tree, catalog=catalog)

    def _exclusions(self) -> List[str]:
        # Sidecars describe the unit; they are not part of its sources
        base = self.exclude_patterns if self.exclude_patterns is not None else default_exclude_patterns()
        return list(base) + [r"^navindex-catalog\.json$", r"^sidebar-items\.js$"]
