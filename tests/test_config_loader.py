from __future__ import annotations

from pathlib import Path

import pytest

from core.config.loader import load_config
from core.extract.calls import DEFAULT_INVOCATION_TOKEN
from core.utils.errors import ConfigError


def test_load_default_config() -> None:
    config = load_config()

    assert config.invocation_token == DEFAULT_INVOCATION_TOKEN
    assert config.preview_length == 120
    assert config.module_preview_length == 50
    assert config.max_workers == 1


def test_load_config_partial_override(tmp_path: Path) -> None:
    path = tmp_path / "engine.yaml"
    path.write_text("preview_length: 40\nmax_workers: 3\n", encoding="utf-8")

    config = load_config(path)

    assert config.preview_length == 40
    assert config.max_workers == 3
    assert config.invocation_token == DEFAULT_INVOCATION_TOKEN


def test_load_config_empty_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "engine.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(path).preview_length == 120


def test_load_config_raises_for_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Config file not found"):
        load_config(tmp_path / "missing.yaml")


def test_load_config_raises_for_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "engine.yaml"
    path.write_text("preview_length: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(path)


def test_load_config_raises_for_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "engine.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(path)


def test_load_config_raises_for_invalid_value(tmp_path: Path) -> None:
    path = tmp_path / "engine.yaml"
    path.write_text("max_workers: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid config schema"):
        load_config(path)


def test_load_config_raises_for_unknown_key(tmp_path: Path) -> None:
    path = tmp_path / "engine.yaml"
    path.write_text("preview_lenght: 40\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid config schema"):
        load_config(path)


def test_config_error_is_value_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_config(tmp_path / "missing.yaml")
