from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: argument parsing, logging bootstrap,
configuration resolution (defaults, config file and CLI overrides), command
dispatch and result rendering.

Exit codes: 0 success, 1 operation failure, 2 invalid input, 130 interrupted.
"""

import argparse
import json
import os
import sys
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional

from navindex.core.analysis.tree_renderer import render_unit
from navindex.core.pipeline.engine import run_build, run_merge
from navindex.core.pipeline.validator import validate_config
from navindex.core.serialization.artifact import ArtifactReader, read_artifact, write_artifact
from navindex.core.serialization.legacy import export_legacy, import_legacy
from navindex.domain.build_models import BuildResult
from navindex.domain.config import load_config
from navindex.domain.errors import NotFound
from navindex.infra.logging import LoggingConfig, configure_logging, get_logger
from navindex.interface.cli import args as cli_args
from navindex.utils.i18n import i18n

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Configuration file (defaults when missing)
    base_conf = load_config(args.config_path)

    # 3. Logging bootstrap (console on stderr, optional rotating file)
    log_level = "DEBUG" if args.debug else str(base_conf.get("log_level") or "INFO")
    log_file = args.log_file or base_conf.get("log_file") or None
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=log_file), force=True)

    logger.debug(f"CLI execution initiated: command '{args.command}'.")

    handler = _COMMANDS[args.command]
    try:
        return handler(args, base_conf)
    except KeyboardInterrupt:
        msg = i18n.t("cli.status.interrupted")
        logger.warning(msg)
        print(msg, file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        msg = i18n.t("cli.errors.operation_failed", error=str(e))
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_FAILURE

# -----------------------------------------------------------------------------
# COMMAND HANDLERS
# -----------------------------------------------------------------------------

def _cmd_build(args: argparse.Namespace, base_conf: Dict[str, Any]) -> int:
    try:
        overrides = cli_args.args_to_overrides(args)
    except ValueError as e:
        return _usage_error(str(e))

    raw_conf = _merge_config(base_conf, overrides)
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    # Pre-flight input verification
    for path in clean_conf["source_roots"].values():
        if not os.path.isdir(path):
            return _usage_error(i18n.t("cli.errors.path_not_exist", path=path))

    result = run_build(clean_conf, dry_run=bool(args.dry_run))
    return _emit_result(result, args.json_output)


def _cmd_merge(args: argparse.Namespace, base_conf: Dict[str, Any]) -> int:
    result = run_merge(
        args.sources,
        os.path.abspath(args.output_path),
        priority=args.priority,
        dry_run=bool(args.dry_run),
    )
    return _emit_result(result, args.json_output)


def _cmd_show(args: argparse.Namespace, base_conf: Dict[str, Any]) -> int:
    if not os.path.isfile(args.artifact):
        return _usage_error(i18n.t("cli.errors.path_not_exist", path=args.artifact))

    reader = ArtifactReader(args.artifact)

    if args.unit is None:
        if args.json_output:
            print(json.dumps(reader.unit_names(), ensure_ascii=False, indent=2))
        else:
            for name in reader.unit_names():
                print(name)
        return EXIT_OK

    try:
        unit = reader.get(args.unit)
    except NotFound as e:
        return _usage_error(str(e))

    if args.json_output:
        print(json.dumps(unit.to_dict(), ensure_ascii=False, indent=2))
    else:
        print("\n".join(render_unit(unit, show_catalog=bool(args.catalog))))
    return EXIT_OK


def _cmd_export_legacy(args: argparse.Namespace, base_conf: Dict[str, Any]) -> int:
    if not os.path.isfile(args.artifact):
        return _usage_error(i18n.t("cli.errors.path_not_exist", path=args.artifact))

    registry = read_artifact(args.artifact)
    written = export_legacy(registry, args.output_dir)

    print(i18n.t("cli.status.success"))
    print(i18n.t("cli.status.legacy", count=len(written)))
    for path in written:
        print(f"  - {path}")
    return EXIT_OK


def _cmd_import_legacy(args: argparse.Namespace, base_conf: Dict[str, Any]) -> int:
    if not os.path.isfile(args.source_files):
        return _usage_error(i18n.t("cli.errors.path_not_exist", path=args.source_files))
    if args.sidebar_dir and not os.path.isdir(args.sidebar_dir):
        return _usage_error(i18n.t("cli.errors.path_not_exist", path=args.sidebar_dir))

    registry = import_legacy(args.source_files, sidebar_dir=args.sidebar_dir)
    artifact_path = write_artifact(registry, args.output_path)

    print(i18n.t("cli.status.success"))
    print(i18n.t("cli.status.artifact", path=artifact_path))
    print(i18n.t("cli.status.units", count=len(registry)))
    return EXIT_OK


_COMMANDS: Dict[str, Callable[[argparse.Namespace, Dict[str, Any]], int]] = {
    "build": _cmd_build,
    "merge": _cmd_merge,
    "show": _cmd_show,
    "export-legacy": _cmd_export_legacy,
    "import-legacy": _cmd_import_legacy,
}

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys are merged; None means 'keep the base value'.
    """
    out = dict(base)
    keys_to_merge = [
        "source_roots", "output_path", "legacy_export_dir",
        "merge_with", "merge_priority",
        "extensions", "exclude_patterns", "respect_gitignore", "max_workers",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _emit_result(result: BuildResult, as_json: bool) -> int:
    if as_json:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)
    return EXIT_OK if result.ok else EXIT_FAILURE


def _print_human_summary(result: BuildResult) -> None:
    """
    Format and print a build or merge result to the standard output.

    Args:
        result: The result to render.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        _print_failures(result.failures)
        return

    print(i18n.t("cli.status.success"))
    if result.summary.get("dry_run"):
        print(i18n.t("cli.status.dry_run"))

    print(i18n.t("cli.status.artifact", path=result.artifact_path))
    print(i18n.t("cli.status.units", count=len(result.units)))
    for name in result.units:
        print(f"  - {name}")

    if result.replaced:
        print(i18n.t("cli.status.replaced", names=", ".join(result.replaced)))
    if result.legacy_files:
        print(i18n.t("cli.status.legacy", count=len(result.legacy_files)))

    _print_failures(result.failures)


def _print_failures(failures: List[str]) -> None:
    if not failures:
        return
    print(i18n.t("cli.status.failures", count=len(failures)))
    for failure in failures:
        print(i18n.t("cli.status.failure", failure=failure))


def _usage_error(msg: str) -> int:
    logger.error(msg)
    print(f"ERROR: {msg}", file=sys.stderr)
    return EXIT_USAGE

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
