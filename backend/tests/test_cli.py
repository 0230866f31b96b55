"""Tests for SlotForge CLI commands and configuration."""

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from slotforge.cli.main import cli
from slotforge.config import SlotForgeConfig
from slotforge.validation import StructTypeResolver, TypeRegistry

_METADATA_DIR = Path(__file__).resolve().parents[2] / "metadata"


@pytest.fixture(autouse=True)
def clear_registries(monkeypatch):
    for var in ("SLOTFORGE_STRUCTS_PATH", "SLOTFORGE_STRICT_TYPES", "SLOTFORGE_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    TypeRegistry.clear()
    StructTypeResolver.clear()
    yield
    TypeRegistry.clear()
    StructTypeResolver.clear()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def bad_attrs(tmp_path) -> Path:
    path = tmp_path / "attrs.yaml"
    path.write_text(yaml.dump({
        "attributes": [
            {"name": "title", "type": "string"},
            {"name": "bad name", "type": "string"},
            {"name": "count", "type": "integer", "opts": {"values": [1, 2], "default": 5}},
        ],
    }))
    return path


class TestAttrsValidate:
    def test_sample_metadata_is_valid(self, runner):
        result = runner.invoke(cli, [
            "attrs", "validate", str(_METADATA_DIR / "hero_slot.yaml"),
            "--structs", str(_METADATA_DIR / "structs.yaml"),
        ])
        assert result.exit_code == 0, result.output
        assert "✓ title (string)" in result.output
        assert "All 5 attribute(s) are valid." in result.output

    def test_structs_path_from_env(self, runner, monkeypatch):
        monkeypatch.setenv("SLOTFORGE_STRUCTS_PATH", str(_METADATA_DIR / "structs.yaml"))
        result = runner.invoke(cli, ["attrs", "validate", str(_METADATA_DIR / "hero_slot.yaml")])
        assert result.exit_code == 0, result.output

    def test_invalid_attributes_exit_1(self, runner, bad_attrs):
        result = runner.invoke(cli, ["attrs", "validate", str(bad_attrs)])
        assert result.exit_code == 1
        assert "✗ bad name" in result.output
        assert "name: can only contain letters, numbers, and underscores" in result.output
        assert "[VALUE_NOT_IN_ALLOWED_SET]" in result.output
        assert "2 of 3 attribute(s) invalid" in result.output

    def test_json_output(self, runner, bad_attrs):
        result = runner.invoke(cli, ["attrs", "validate", str(bad_attrs), "--json"])
        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["valid"] is False
        assert [r["valid"] for r in payload["results"]] == [True, False, False]
        assert payload["results"][1]["name"] == "bad name"
        assert payload["results"][2]["errors"][0]["code"] == "VALUE_NOT_IN_ALLOWED_SET"

    def test_json_output_with_set_default(self, runner, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_text(
            "attributes:\n"
            "  - name: tags\n"
            "    type: any\n"
            "    opts:\n"
            "      default: !!set {a: null}\n"
        )
        result = runner.invoke(cli, ["attrs", "validate", str(path), "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["results"][0]["attribute"]["opts"] == [["default", "{'a'}"]]

    def test_strict_types_flag(self, runner, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_text(yaml.dump({"attributes": [{"name": "x", "type": "strnig"}]}))

        lenient = runner.invoke(cli, ["attrs", "validate", str(path)])
        assert lenient.exit_code == 0

        strict = runner.invoke(cli, ["attrs", "validate", str(path), "--strict-types"])
        assert strict.exit_code == 1
        assert "[UNKNOWN_TYPE]" in strict.output

    def test_strict_types_from_env(self, runner, tmp_path, monkeypatch):
        path = tmp_path / "attrs.yaml"
        path.write_text(yaml.dump({"attributes": [{"name": "x", "type": "strnig"}]}))
        monkeypatch.setenv("SLOTFORGE_STRICT_TYPES", "true")
        result = runner.invoke(cli, ["attrs", "validate", str(path)])
        assert result.exit_code == 1

    def test_schema_errors_exit_1(self, runner, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_text(yaml.dump({"attributes": [{"label": "x"}]}))
        result = runner.invoke(cli, ["attrs", "validate", str(path)])
        assert result.exit_code == 1
        assert "schema error(s) found" in result.output

    def test_malformed_serialized_opts_reported(self, runner, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_text(yaml.dump({
            "attributes": [{"name": "x", "type": "string", "opts": "{broken"}],
        }))
        result = runner.invoke(cli, ["attrs", "validate", str(path)])
        assert result.exit_code == 1
        assert "[MALFORMED_OPTIONS]" in result.output

    def test_struct_attribute_without_declarations(self, runner):
        result = runner.invoke(cli, ["attrs", "validate", str(_METADATA_DIR / "hero_slot.yaml")])
        assert result.exit_code == 1
        assert "Shop.Address is undefined" in result.output


class TestAttrsEncode:
    def test_encode(self, runner, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_text(yaml.dump({
            "attributes": [{"name": "title", "type": "string", "opts": {"required": True}}],
        }))
        result = runner.invoke(cli, ["attrs", "encode", str(path)])
        assert result.exit_code == 0, result.output
        name, encoded = result.output.strip().split("\t")
        assert name == "title"
        assert json.loads(encoded) == {"v": 1, "opts": [["required", True]]}


class TestTypesList:
    def test_lists_tags_and_structs(self, runner):
        result = runner.invoke(cli, [
            "types", "list", "--structs", str(_METADATA_DIR / "structs.yaml"),
        ])
        assert result.exit_code == 0, result.output
        assert "  integer" in result.output
        assert "  struct" in result.output
        assert "Structs (2):" in result.output
        assert "Shop.Address (street, city, postcode)" in result.output

    def test_log_level_option(self, runner):
        result = runner.invoke(cli, ["--log-level", "debug", "types", "list"])
        assert result.exit_code == 0
        assert "Structs (0):" in result.output


class TestConfig:
    def test_defaults(self):
        config = SlotForgeConfig.from_env()
        assert config.structs_path is None
        assert config.strict_types is False
        assert config.log_level == "WARNING"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SLOTFORGE_STRUCTS_PATH", "/tmp/structs.yaml")
        monkeypatch.setenv("SLOTFORGE_STRICT_TYPES", "Yes")
        monkeypatch.setenv("SLOTFORGE_LOG_LEVEL", "debug")
        config = SlotForgeConfig.from_env()
        assert config.structs_path == Path("/tmp/structs.yaml")
        assert config.strict_types is True
        assert config.log_level == "DEBUG"
