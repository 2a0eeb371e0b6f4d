from __future__ import annotations

from pathlib import Path


_README_ANCHORS = (
    # One-line summary
    "Generate Rust XDR types and codecs",
    # Quick start flags
    "--schema",
    "--output-dir",
    "--root",
    # Schema module contract
    "def define(xdr)",
    # Feature gating
    "all-types",
    # Discovery examples
    "--list-types",
    "--filter",
    # Testing instructions
    "pytest",
)


def _tool_root() -> Path:
    return Path(__file__).resolve().parents[2]


def test_t_01_required_artifacts_exist() -> None:
    tool_root = _tool_root()
    required_paths = {
        "xdrgen.py",
        "pyproject.toml",
        "README.md",
        "tests/conftest.py",
        "tests/test_cli.py",
        "tests/test_naming.py",
        "tests/test_references.py",
        "tests/test_enum.py",
        "tests/test_struct.py",
        "tests/test_union.py",
        "tests/test_builder.py",
        "tests/test_reachability.py",
        "tests/test_writer.py",
        "tests/test_pipeline.py",
        "tests/test_summary.py",
        "tests/fixtures/minimal_schema.py",
        "tests/fixtures/broken_schema.py",
        "tests/external/test_external_cli.py",
        "tests/external/test_repo_shape.py",
    }

    missing = sorted(path for path in required_paths if not (tool_root / path).exists())
    assert missing == []


def test_t_02_no_generated_rust_files_at_repo_root() -> None:
    tool_root = _tool_root()

    assert [p for p in tool_root.glob("*.rs")] == []


def test_t_03_readme_includes_required_sections_and_quick_start() -> None:
    readme = _tool_root() / "README.md"
    assert readme.exists(), "README.md must exist"
    content = readme.read_text(encoding="utf-8")
    missing = [anchor for anchor in _README_ANCHORS if anchor not in content]
    assert missing == [], f"README.md missing required anchors: {missing}"
