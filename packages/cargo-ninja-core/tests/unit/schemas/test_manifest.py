"""Unit tests for the Cargo.toml models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from cargo_ninja_core.errors import ConfigurationError
from cargo_ninja_core.schemas import DEFAULT_EDITION, CargoManifest, crate_name


class TestCargoManifest:
    """Tests for CargoManifest validation."""

    def test_minimal_manifest(self) -> None:
        manifest = CargoManifest.model_validate({"package": {"name": "app"}})
        assert manifest.package is not None
        assert manifest.package.name == "app"
        assert manifest.package.version == "0.0.0"
        assert manifest.package.edition == DEFAULT_EDITION
        assert manifest.dependencies == {}
        assert manifest.bin == []

    def test_short_dependency_form_is_expanded(self) -> None:
        manifest = CargoManifest.model_validate(
            {"package": {"name": "app"}, "dependencies": {"log": "0.4"}}
        )
        assert manifest.dependencies["log"].version == "0.4"
        assert manifest.dependencies["log"].path is None

    def test_dependency_order_is_preserved(self) -> None:
        manifest = CargoManifest.model_validate(
            {
                "package": {"name": "app"},
                "dependencies": {"zeta": "1", "alpha": "1", "mid": {"path": "../mid"}},
            }
        )
        assert [key for key, _ in manifest.normal_dependencies()] == ["zeta", "alpha", "mid"]

    def test_optional_dependencies_are_not_normal(self) -> None:
        manifest = CargoManifest.model_validate(
            {
                "package": {"name": "app"},
                "dependencies": {"log": "0.4", "serde": {"version": "1", "optional": True}},
            }
        )
        assert [key for key, _ in manifest.normal_dependencies()] == ["log"]

    def test_renamed_dependency(self) -> None:
        manifest = CargoManifest.model_validate(
            {
                "package": {"name": "app"},
                "dependencies": {"utils": {"package": "common-utils", "path": "../cu"}},
            }
        )
        spec = manifest.dependencies["utils"]
        assert spec.package == "common-utils"
        assert spec.features == []

    def test_target_aliases(self) -> None:
        manifest = CargoManifest.model_validate(
            {
                "package": {"name": "m"},
                "lib": {"proc-macro": True, "crate-type": ["cdylib"]},
            }
        )
        assert manifest.lib is not None
        assert manifest.lib.proc_macro is True
        assert manifest.lib.crate_type == ["cdylib"]

    def test_unknown_keys_are_accepted(self) -> None:
        manifest = CargoManifest.model_validate(
            {
                "package": {"name": "app", "authors": ["someone"], "license": "MIT"},
                "profile": {"release": {"lto": True}},
                "dev-dependencies": {"proptest": "1"},
            }
        )
        assert manifest.package is not None

    def test_wrong_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CargoManifest.model_validate({"package": {"name": "app"}, "bin": {"name": "x"}})


class TestFromToml:
    """Tests for CargoManifest.from_toml."""

    def test_loads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.write_text('[package]\nname = "app"\nversion = "1.2.3"\nedition = "2021"\n')

        manifest = CargoManifest.from_toml(path)

        assert manifest.package is not None
        assert manifest.package.version == "1.2.3"
        assert manifest.package.edition == "2021"

    def test_syntax_error_has_line_number(self, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.write_text('[package]\nname = "app"\nversion = \n')

        with pytest.raises(ConfigurationError) as exc_info:
            CargoManifest.from_toml(path)

        assert exc_info.value.line_number == 3
        assert exc_info.value.file_path == str(path)
        assert "Invalid TOML" in str(exc_info.value)

    def test_schema_error_has_field_path(self, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.write_text("[package]\nversion = \"1.0.0\"\n")

        with pytest.raises(ConfigurationError) as exc_info:
            CargoManifest.from_toml(path)

        assert exc_info.value.field_path == "package.name"
        assert "Field required" in str(exc_info.value)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="File not found"):
            CargoManifest.from_toml(tmp_path / "Cargo.toml")


@pytest.mark.parametrize(
    ("name", "expected"),
    [("app", "app"), ("my-lib", "my_lib"), ("already_snake", "already_snake")],
)
def test_crate_name(name: str, expected: str) -> None:
    assert crate_name(name) == expected
