"""Tests for gocards.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from gocards.config import CardsConfig, ConfigError, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, CardsConfig)
    assert config.root == tmp_path.resolve()
    assert config.output_dir is None
    assert config.prefix is None
    assert config.template is None
    assert config.log_file is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".gocards.yml"
    config_file.write_text(
        """
output_dir: "cards"
prefix: "go-"
template: "templates/anki.tmpl"
log_file: "/var/tmp/gocards.log"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    root = tmp_path.resolve()
    assert config.output_dir == root / "cards"
    assert config.prefix == "go-"
    assert config.template == root / "templates" / "anki.tmpl"
    assert config.log_file == Path("/var/tmp/gocards.log")


def test_load_config_accepts_empty_file(tmp_path: Path) -> None:
    (tmp_path / ".gocards.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).prefix is None


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    (tmp_path / ".gocards.yml").write_text("- one\n- two\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".gocards.yml").write_text("prefix: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


def test_load_config_requires_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="does not exist"):
        load_config(tmp_path / "missing.yml", required=True)


def test_load_config_requires_file_in_directory(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match=r"\.gocards\.yml does not exist"):
        load_config(tmp_path, required=True)


def test_load_config_reads_log_level(tmp_path: Path) -> None:
    (tmp_path / ".gocards.yml").write_text("log_level: INFO\n", encoding="utf-8")

    assert load_config(tmp_path).log_level == "info"


def test_load_config_rejects_unknown_log_level(tmp_path: Path) -> None:
    (tmp_path / ".gocards.yml").write_text("log_level: chatty\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="log_level must be one of"):
        load_config(tmp_path)
