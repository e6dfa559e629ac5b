"""Configuration loading for protowrap (.protowrap.yml)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigurationError

CONFIG_FILENAME = ".protowrap.yml"

DEFAULT_PROTOC_COMMAND = "protoc"
DEFAULT_PARALLELISM = 5


class ConfigError(ConfigurationError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ProtowrapConfig:
    """Represents the defaults defined in .protowrap.yml."""

    root: Path
    protoc_command: Optional[str] = None
    parallelism: Optional[int] = None
    only_specified_files: Optional[bool] = None
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> ProtowrapConfig:
    """Load configuration from disk; a missing file yields empty settings."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProtowrapConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    parallelism = _as_int(data.get("parallelism"))
    if "parallelism" in data and parallelism is None:
        raise ConfigError(f"parallelism must be an integer; got {data['parallelism']!r}")

    log_file_str = _as_str(data.get("log_file"))

    return ProtowrapConfig(
        root=root,
        protoc_command=_as_str(data.get("protoc_command")),
        parallelism=parallelism,
        only_specified_files=_as_bool(data.get("only_specified_files")),
        log_file=root / log_file_str if log_file_str else None,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_PARALLELISM",
    "DEFAULT_PROTOC_COMMAND",
    "ProtowrapConfig",
    "load_config",
]
