from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema (global flags and subcommands) and the
translation of parsed namespaces into configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional, Tuple

from navindex.core.services.merger import LAST_WINS, PRIORITY_RULES
from navindex.utils.i18n import i18n

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the navindex CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="navindex",
        description=i18n.t("app.description"),
    )

    # --- Global flags ---
    p.add_argument("--config", dest="config_path", default=None, help=i18n.t("cli.args.config"))
    p.add_argument("--debug", action="store_true", help=i18n.t("cli.args.debug"))
    p.add_argument("--log-file", dest="log_file", default=None, help=i18n.t("cli.args.log_file"))

    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    # --- build ---
    b = sub.add_parser("build", help=i18n.t("cli.args.build"))
    b.add_argument(
        "-u", "--unit",
        dest="units",
        action="append",
        default=[],
        metavar="NAME=DIR",
        help=i18n.t("cli.args.unit"),
    )
    b.add_argument("-o", "--output", dest="output_path", default=None, help=i18n.t("cli.args.output"))
    b.add_argument(
        "--merge-with",
        dest="merge_with",
        action="append",
        default=None,
        metavar="ARTIFACT",
        help=i18n.t("cli.args.merge_with"),
    )
    b.add_argument("--priority", choices=PRIORITY_RULES, default=None, help=i18n.t("cli.args.priority"))
    b.add_argument("--legacy-dir", dest="legacy_export_dir", default=None, help=i18n.t("cli.args.legacy_dir"))
    b.add_argument("--ext", dest="extensions", default=None, help=i18n.t("cli.args.ext"))
    b.add_argument("--exclude", dest="exclude_patterns", default=None, help=i18n.t("cli.args.exclude"))
    b.add_argument("--no-gitignore", action="store_true", help=i18n.t("cli.args.no_gitignore"))
    b.add_argument("--workers", dest="max_workers", type=int, default=None, help=i18n.t("cli.args.workers"))
    b.add_argument("--dry-run", action="store_true", help=i18n.t("cli.args.dry_run"))
    b.add_argument("--json", dest="json_output", action="store_true", help=i18n.t("cli.args.json"))

    # --- merge ---
    m = sub.add_parser("merge", help=i18n.t("cli.args.merge"))
    m.add_argument("sources", nargs="+", help=i18n.t("cli.args.sources"))
    m.add_argument("-o", "--output", dest="output_path", required=True, help=i18n.t("cli.args.output"))
    m.add_argument("--priority", choices=PRIORITY_RULES, default=LAST_WINS, help=i18n.t("cli.args.priority"))
    m.add_argument("--dry-run", action="store_true", help=i18n.t("cli.args.dry_run"))
    m.add_argument("--json", dest="json_output", action="store_true", help=i18n.t("cli.args.json"))

    # --- show ---
    s = sub.add_parser("show", help=i18n.t("cli.args.show"))
    s.add_argument("artifact", help=i18n.t("cli.args.artifact"))
    s.add_argument("unit", nargs="?", default=None, help=i18n.t("cli.args.unit_name"))
    s.add_argument("--catalog", action="store_true", help=i18n.t("cli.args.catalog"))
    s.add_argument("--json", dest="json_output", action="store_true", help=i18n.t("cli.args.json"))

    # --- export-legacy ---
    e = sub.add_parser("export-legacy", help=i18n.t("cli.args.export_legacy"))
    e.add_argument("artifact", help=i18n.t("cli.args.artifact"))
    e.add_argument("-o", "--output", dest="output_dir", required=True, help=i18n.t("cli.args.legacy_dir"))

    # --- import-legacy ---
    i = sub.add_parser("import-legacy", help=i18n.t("cli.args.import_legacy"))
    i.add_argument("source_files", help=i18n.t("cli.args.source_files"))
    i.add_argument("--sidebar-dir", dest="sidebar_dir", default=None, help=i18n.t("cli.args.sidebar_dir"))
    i.add_argument("-o", "--output", dest="output_path", required=True, help=i18n.t("cli.args.output"))

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate 'build' arguments into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset (None means 'keep').

    Raises:
        ValueError: If a --unit value is not NAME=DIR or repeats a NAME.
    """
    overrides: Dict[str, Any] = {}

    if args.units:
        roots: Dict[str, str] = {}
        for value in args.units:
            name, path = parse_unit_spec(value)
            if name in roots:
                raise ValueError(i18n.t("cli.errors.duplicate_unit", name=name))
            roots[name] = path
        overrides["source_roots"] = roots

    overrides["output_path"] = args.output_path
    overrides["merge_with"] = args.merge_with
    overrides["merge_priority"] = args.priority
    overrides["legacy_export_dir"] = args.legacy_export_dir
    overrides["max_workers"] = args.max_workers

    if args.extensions:
        overrides["extensions"] = _split_csv(args.extensions)
    if args.exclude_patterns:
        overrides["exclude_patterns"] = _split_csv(args.exclude_patterns)
    if args.no_gitignore:
        overrides["respect_gitignore"] = False

    return overrides


def parse_unit_spec(value: str) -> Tuple[str, str]:
    """Split a NAME=DIR unit specification."""
    name, sep, path = value.partition("=")
    if not sep or not name.strip() or not path.strip():
        raise ValueError(i18n.t("cli.errors.bad_unit", value=value))
    return name.strip(), path.strip()

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Convert a comma-separated string into a list of sanitized strings."""
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
