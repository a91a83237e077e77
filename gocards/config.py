"""Configuration loading for gocards (.gocards.yml)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .logging import LOG_LEVELS

CONFIG_FILENAME = ".gocards.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CardsConfig:
    """Represents the settings defined in .gocards.yml."""

    root: Path
    output_dir: Optional[Path] = None
    prefix: Optional[str] = None
    template: Optional[Path] = None
    log_file: Optional[Path] = None
    log_level: Optional[str] = None


def load_config(config_path: Path, required: bool = False) -> CardsConfig:
    """Load configuration from disk.

    ``config_path`` may point at the config file itself or at the directory
    holding it. A missing file yields defaults unless ``required`` is set,
    in which case it raises :class:`ConfigError`.
    """
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.is_file():
        if required:
            raise ConfigError(f"config file {config_file} does not exist")
        return CardsConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    return CardsConfig(
        root=root,
        output_dir=_as_path(root, data.get("output_dir")),
        prefix=_as_str(data.get("prefix")),
        template=_as_path(root, data.get("template")),
        log_file=_as_path(root, data.get("log_file")),
        log_level=_as_level(data.get("log_level")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_level(value: Any) -> Optional[str]:
    text = _as_str(value)
    if text is None:
        return None
    level = text.strip().lower()
    if level not in LOG_LEVELS:
        raise ConfigError(
            f"log_level must be one of {', '.join(sorted(LOG_LEVELS))}, got {text!r}"
        )
    return level


def _as_path(root: Path, value: Any) -> Optional[Path]:
    text = _as_str(value)
    if not text:
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else root / path


__all__ = ["CONFIG_FILENAME", "CardsConfig", "ConfigError", "load_config"]
