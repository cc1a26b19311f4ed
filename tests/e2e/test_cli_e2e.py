from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Verifies the application's external behavior by invoking the entry point
script via subprocess. These tests validate argument parsing, exit codes,
stream output (stdout/stderr), and file system side effects (artifacts and
legacy scripts).
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"
ENTRY_POINT = SRC_DIR / "navindex" / "main.py"


def run_cli(args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    """
    Helper to execute the CLI in a separate process.

    Injects the 'src' directory into PYTHONPATH to ensure the package
    is resolvable without being installed in site-packages.

    Args:
        args: List of command line arguments (excluding 'python' and script path).
        cwd: Optional working directory for the subprocess.

    Returns:
        subprocess.CompletedProcess: The result object containing returncode, stdout, and stderr.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")

    cmd = [sys.executable, str(ENTRY_POINT)] + args

    return subprocess.run(
        cmd,
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8"
    )


@pytest.fixture
def sample_units(tmp_path: Path) -> Path:
    """
    Create two dummy units for E2E testing.

    Structure:
    /input
      /alpha
        lib.rs
        /net
          tcp.rs
        navindex-catalog.json
      /beta
        main.rs
    """
    input_dir = tmp_path / "input"
    alpha = input_dir / "alpha"
    (alpha / "net").mkdir(parents=True)
    (alpha / "lib.rs").write_text("pub mod net;", encoding="utf-8")
    (alpha / "net" / "tcp.rs").write_text("pub fn connect() {}", encoding="utf-8")
    (alpha / "navindex-catalog.json").write_text(
        json.dumps({"module": [["net", "Networking primitives"]], "function": [["connect", "Opens a stream"]]}),
        encoding="utf-8",
    )

    beta = input_dir / "beta"
    beta.mkdir()
    (beta / "main.rs").write_text("fn main() {}", encoding="utf-8")
    return input_dir


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Isolated (absent) configuration so the user's stored config is ignored."""
    return tmp_path / "cfg" / "config.json"


def _build(sample_units: Path, config_file: Path, out: Path, *extra: str) -> subprocess.CompletedProcess:
    return run_cli([
        "--config", str(config_file),
        "build",
        "-u", f"alpha={sample_units / 'alpha'}",
        "-u", f"beta={sample_units / 'beta'}",
        "-o", str(out),
        *extra,
    ])


def test_cli_build_happy_path(tmp_path: Path, sample_units: Path, config_file: Path) -> None:
    """TC-01: A build writes the artifact and exits with 0."""
    out = tmp_path / "site" / "navigation.jsonl"

    result = _build(sample_units, config_file, out)

    assert result.returncode == 0, f"CLI failed with stderr: {result.stderr}"
    assert out.exists()
    header = json.loads(out.read_text(encoding="utf-8").splitlines()[0])
    assert header["units"] == ["alpha", "beta"]
    assert "Units: 2" in result.stdout


def test_cli_build_json_and_dry_run(tmp_path: Path, sample_units: Path, config_file: Path) -> None:
    """TC-02: --json prints the result object; --dry-run writes nothing."""
    out = tmp_path / "dry" / "navigation.jsonl"

    result = _build(sample_units, config_file, out, "--json", "--dry-run")

    assert result.returncode == 0, result.stderr
    data = json.loads(result.stdout)
    assert data["ok"] is True
    assert data["units"] == ["alpha", "beta"]
    assert data["summary"]["entries"] == 2
    assert not out.exists()


def test_cli_build_missing_root(tmp_path: Path, config_file: Path) -> None:
    """TC-03: A nonexistent source root is an input error (exit 2)."""
    result = run_cli([
        "--config", str(config_file),
        "build", "-u", f"ghost={tmp_path / 'missing'}", "-o", str(tmp_path / "x.jsonl"),
    ])

    assert result.returncode == 2
    assert "does not exist" in result.stderr


def test_cli_build_bad_unit_spec(tmp_path: Path, config_file: Path) -> None:
    result = run_cli(["--config", str(config_file), "build", "-u", "no-equals-sign"])

    assert result.returncode == 2
    assert "NAME=DIRECTORY" in result.stderr


def test_cli_merge_and_show(tmp_path: Path, sample_units: Path, config_file: Path) -> None:
    """TC-04: Merged artifacts can be listed and inspected."""
    first = tmp_path / "first.jsonl"
    assert _build(sample_units, config_file, first).returncode == 0

    # A second shard that redefines 'beta'
    (sample_units / "beta" / "extra.rs").write_text("", encoding="utf-8")
    second = tmp_path / "second.jsonl"
    assert run_cli([
        "--config", str(config_file), "build",
        "-u", f"beta={sample_units / 'beta'}", "-o", str(second),
    ]).returncode == 0

    merged = tmp_path / "merged.jsonl"
    result = run_cli(["--config", str(config_file), "merge", str(first), str(second), "-o", str(merged), "--json"])
    assert result.returncode == 0, result.stderr
    data = json.loads(result.stdout)
    assert data["units"] == ["alpha", "beta"]
    assert data["replaced"] == ["beta"]

    listing = run_cli(["--config", str(config_file), "show", str(merged)])
    assert listing.stdout.split() == ["alpha", "beta"]

    shown = run_cli(["--config", str(config_file), "show", str(merged), "beta", "--json"])
    assert json.loads(shown.stdout)["tree"]["files"] == ["extra.rs", "main.rs"]

    tree = run_cli(["--config", str(config_file), "show", str(merged), "alpha", "--catalog"])
    assert "├── net/" in tree.stdout
    assert "[module] (1)" in tree.stdout


def test_cli_show_unknown_unit(tmp_path: Path, sample_units: Path, config_file: Path) -> None:
    artifact = tmp_path / "nav.jsonl"
    assert _build(sample_units, config_file, artifact).returncode == 0

    result = run_cli(["--config", str(config_file), "show", str(artifact), "gamma"])

    assert result.returncode == 2
    assert "gamma" in result.stderr


def test_cli_legacy_export_and_import(tmp_path: Path, sample_units: Path, config_file: Path) -> None:
    """TC-05: Legacy scripts exported from an artifact convert back losslessly."""
    artifact = tmp_path / "nav.jsonl"
    assert _build(sample_units, config_file, artifact).returncode == 0

    js_dir = tmp_path / "js"
    exported = run_cli(["--config", str(config_file), "export-legacy", str(artifact), "-o", str(js_dir)])
    assert exported.returncode == 0, exported.stderr
    assert (js_dir / "source-files.js").exists()
    assert (js_dir / "alpha" / "sidebar-items.js").read_text(encoding="utf-8").startswith("initSidebarItems(")

    restored = tmp_path / "restored.jsonl"
    imported = run_cli([
        "--config", str(config_file), "import-legacy", str(js_dir / "source-files.js"),
        "--sidebar-dir", str(js_dir), "-o", str(restored),
    ])
    assert imported.returncode == 0, imported.stderr
    assert restored.read_bytes() == artifact.read_bytes()


def test_cli_corrupt_artifact_fails(tmp_path: Path, config_file: Path) -> None:
    artifact = tmp_path / "corrupt.jsonl"
    artifact.write_text("not an artifact\n", encoding="utf-8")

    result = run_cli(["--config", str(config_file), "export-legacy", str(artifact), "-o", str(tmp_path / "js")])

    assert result.returncode == 1
    assert "ERROR" in result.stderr
