from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies:
1. Subcommand schemas and defaults.
2. Mapping of 'build' flags to configuration overrides.
3. CSV and NAME=DIR parsing.
"""

import pytest

from navindex.interface.cli.args import _split_csv, args_to_overrides, build_parser, parse_unit_spec


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    parser = build_parser()
    return parser.parse_args(arg_list)


def test_build_flags_mapping():
    args = parse_args([
        "build",
        "-u", "std=/src/std",
        "--unit", "core=/src/core",
        "-o", "out.jsonl",
        "--merge-with", "old.jsonl",
        "--merge-with", "https://host/nav.jsonl",
        "--priority", "first_wins",
        "--ext", "rs,toml",
        "--exclude", "^target$, ^bench$",
        "--no-gitignore",
        "--workers", "3",
    ])

    overrides = args_to_overrides(args)

    assert overrides["source_roots"] == {"std": "/src/std", "core": "/src/core"}
    assert overrides["output_path"] == "out.jsonl"
    assert overrides["merge_with"] == ["old.jsonl", "https://host/nav.jsonl"]
    assert overrides["merge_priority"] == "first_wins"
    assert overrides["extensions"] == ["rs", "toml"]
    assert overrides["exclude_patterns"] == ["^target$", "^bench$"]
    assert overrides["respect_gitignore"] is False
    assert overrides["max_workers"] == 3


def test_build_defaults_keep_configuration():
    """Unset flags map to None (keep) or are left out entirely."""
    overrides = args_to_overrides(parse_args(["build"]))

    assert "source_roots" not in overrides
    assert "respect_gitignore" not in overrides
    assert overrides["output_path"] is None
    assert overrides["merge_with"] is None
    assert overrides["merge_priority"] is None


def test_invalid_unit_spec_is_rejected():
    args = parse_args(["build", "-u", "no-separator"])
    with pytest.raises(ValueError):
        args_to_overrides(args)


def test_repeated_unit_name_is_rejected():
    args = parse_args(["build", "-u", "foo=a", "-u", "foo=b", "-o", "x"])
    with pytest.raises(ValueError, match="foo"):
        args_to_overrides(args)


@pytest.mark.parametrize("value, expected", [
    ("std=/src/std", ("std", "/src/std")),
    (" a = b=c ", ("a", "b=c")),
])
def test_parse_unit_spec(value, expected):
    assert parse_unit_spec(value) == expected


def test_merge_subcommand():
    args = parse_args(["merge", "a.jsonl", "b.jsonl", "-o", "out.jsonl", "--json"])

    assert args.command == "merge"
    assert args.sources == ["a.jsonl", "b.jsonl"]
    assert args.priority == "last_wins"
    assert args.json_output is True


def test_show_subcommand_optional_unit():
    args = parse_args(["show", "nav.jsonl"])
    assert args.unit is None
    assert args.catalog is False

    args = parse_args(["show", "nav.jsonl", "std", "--catalog"])
    assert args.unit == "std"
    assert args.catalog is True


def test_global_flags_precede_subcommand():
    args = parse_args(["--debug", "--config", "cfg.json", "export-legacy", "nav.jsonl", "-o", "js"])

    assert args.debug is True
    assert args.config_path == "cfg.json"
    assert args.output_dir == "js"


def test_missing_subcommand_exits():
    with pytest.raises(SystemExit):
        parse_args([])


def test_invalid_priority_choice_exits():
    with pytest.raises(SystemExit):
        parse_args(["merge", "a.jsonl", "-o", "x", "--priority", "random"])


def test_split_csv():
    assert _split_csv(None) is None
    assert _split_csv(" a, ,b ") == ["a", "b"]
