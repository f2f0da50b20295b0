"""Tests for validgen.config."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from validgen.config import ConfigError, GeneratorConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, GeneratorConfig)
    assert config.src == tmp_path
    assert config.recursive is False
    assert config.destination is None
    assert config.module_prefix is None
    assert config.exclude_paths == []
    assert config.dry_run is False
    assert config.relocated is False


def test_load_config_reads_settings_file(tmp_path: Path) -> None:
    (tmp_path / ".validgen.yml").write_text(
        """
recursive: true
dst: generated
mod: "shop.models"
exclude_paths:
  - "legacy/"
  - "*_pb2.py"
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.recursive is True
    assert config.destination == (tmp_path / "generated").resolve()
    assert config.module_prefix == "shop.models"
    assert config.exclude_paths == ["legacy/", "*_pb2.py"]
    assert config.relocated is True


def test_settings_file_next_to_single_source_file(tmp_path: Path) -> None:
    source = tmp_path / "widgets.py"
    source.write_text("", encoding="utf-8")
    (tmp_path / ".validgen.yml").write_text("exclude_paths: build/\n", encoding="utf-8")

    config = load_config(source)

    assert config.exclude_paths == ["build/"]


def test_explicit_options_override_settings_file(tmp_path: Path) -> None:
    (tmp_path / ".validgen.yml").write_text("recursive: true\nmod: from.file\n", encoding="utf-8")

    config = load_config(
        tmp_path,
        recursive=False,
        destination=tmp_path / "out",
        module_prefix="from.cli",
        exclude_paths=["extra/"],
    )

    assert config.recursive is False
    assert config.destination == tmp_path / "out"
    assert config.module_prefix == "from.cli"
    assert config.exclude_paths == ["extra/"]


def test_explicit_config_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(tmp_path, config_path=tmp_path / "missing.yml")


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".validgen.yml").write_text("recursive: [true\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".validgen.yml").write_text("- recursive\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_validate_requires_module_prefix_with_destination(tmp_path: Path) -> None:
    config = GeneratorConfig(src=tmp_path, destination=tmp_path / "out")

    with pytest.raises(ConfigError, match="--dst requires --mod"):
        config.validate()


def test_validate_requires_source_path() -> None:
    with pytest.raises(ConfigError, match="source path"):
        GeneratorConfig(src=None).validate()


def test_validate_rejects_non_module_prefix(tmp_path: Path) -> None:
    config = GeneratorConfig(src=tmp_path, destination=tmp_path, module_prefix="not-a/module")

    with pytest.raises(ConfigError, match="dotted Python module path"):
        config.validate()


def test_validate_ignores_module_prefix_without_destination(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    config = GeneratorConfig(src=tmp_path, module_prefix="shop.models")

    with caplog.at_level(logging.WARNING, logger="validgen.config"):
        validated = config.validate()

    assert validated.module_prefix is None
    assert validated.relocated is False
