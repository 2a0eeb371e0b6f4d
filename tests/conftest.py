import argparse
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

GENERATOR_DIR = Path(__file__).resolve().parent.parent
if str(GENERATOR_DIR) not in sys.path:
    sys.path.insert(0, str(GENERATOR_DIR))

import xdrgen  # noqa: E402

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixture_schema() -> Path:
    return FIXTURES_DIR / "minimal_schema.py"


@pytest.fixture
def broken_schema() -> Path:
    return FIXTURES_DIR / "broken_schema.py"


@pytest.fixture
def existing_paths(tmp_path: Path, fixture_schema: Path) -> dict[str, Path]:
    return {
        "schema": fixture_schema,
        "output_dir": tmp_path / "out",
    }


@pytest.fixture
def missing_path(tmp_path: Path) -> Path:
    return tmp_path / "missing"


@pytest.fixture
def make_args(existing_paths: dict[str, Path]) -> Callable[..., argparse.Namespace]:
    def _make_args(**overrides: object) -> argparse.Namespace:
        base_args: dict[str, object] = {
            "schema": existing_paths["schema"],
            "output_dir": existing_paths["output_dir"],
            "file_name": "xdr.rs",
            "root": None,
            "feature": "all-types",
            "box_prefix": None,
            "list_types": False,
            "filter": None,
        }
        base_args.update(overrides)
        return argparse.Namespace(**base_args)

    return _make_args


@pytest.fixture
def make_generate_config(
    existing_paths: dict[str, Path],
) -> Callable[..., xdrgen.GenerateConfig]:
    def _make_generate_config(**overrides: object) -> xdrgen.GenerateConfig:
        base: dict[str, object] = {
            "schema": existing_paths["schema"],
            "output_dir": existing_paths["output_dir"],
            "file_name": "xdr.rs",
            "roots": ("Account", "Memo"),
            "feature": "all-types",
            "boxed_prefixes": xdrgen.DEFAULT_BOXED_PREFIXES,
        }
        base.update(overrides)
        return xdrgen.GenerateConfig(**base)

    return _make_generate_config


@pytest.fixture
def build() -> Callable[..., xdrgen.Schema]:
    """Build a Schema from an inline define callback."""

    def _build(
        define: Callable[[xdrgen.SchemaBuilder], None],
        boxed_prefixes: tuple[str, ...] = xdrgen.DEFAULT_BOXED_PREFIXES,
    ) -> xdrgen.Schema:
        return xdrgen.build_schema(define, boxed_prefixes)

    return _build


@pytest.fixture
def make_union_definition() -> Callable[..., xdrgen.UnionDefinition]:
    def _make_union_definition(
        *,
        switch_on: xdrgen.ReferableType,
        switches: list[tuple[object, object]],
        arms: dict[str, xdrgen.ReferableType] | None = None,
        default_arm: xdrgen.VoidType | None = None,
        switch_name: str = "type",
    ) -> xdrgen.UnionDefinition:
        return xdrgen.UnionDefinition(
            switch_on=switch_on,
            switch_name=switch_name,
            switches=switches,
            arms=arms or {},
            default_arm=default_arm,
        )

    return _make_union_definition
