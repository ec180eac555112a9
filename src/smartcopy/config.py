from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import json
import yaml


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
SETTINGS_SUFFIXES = {".yml": "yaml", ".yaml": "yaml", ".json": "json"}


@dataclass(slots=True)
class AppConfig:
    detect_extra: bool = False
    delete_extra: bool = False
    dry_run: bool = False
    excludes: list[str] = field(default_factory=list)
    exclude_files: list[Path] = field(default_factory=list)
    log_file: Path | None = None
    log_level: str = "INFO"


def _read_settings(config_path: Path) -> dict[str, Any]:
    kind = SETTINGS_SUFFIXES.get(config_path.suffix.lower())
    if kind is None:
        raise ValueError("Config file must be .yaml/.yml or .json")
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ValueError(f"Config file does not exist: {config_path}")

    settings = yaml.safe_load(text) if kind == "yaml" else json.loads(text)
    if settings is None:
        return {}
    if not isinstance(settings, dict):
        raise ValueError("Config root must be an object")
    return settings


def _flag(settings: dict[str, Any], key: str) -> bool:
    value = settings.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean")
    return value


def _patterns(settings: dict[str, Any], key: str) -> list[str]:
    value = settings.get(key) or []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key} must be a list of strings")
    return [item for item in value if item.strip()]


def _file_path(raw: Any, key: str) -> Path:
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"{key} entries must be non-empty string paths")
    return Path(raw).expanduser()


def load_config(config_path: Path) -> AppConfig:
    settings = _read_settings(config_path)

    log_level = settings.get("logLevel", "INFO")
    if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
        raise ValueError(f"logLevel must be one of: {', '.join(LOG_LEVELS)}")

    log_file = settings.get("logFile")

    return AppConfig(
        detect_extra=_flag(settings, "detectExtra"),
        delete_extra=_flag(settings, "deleteExtra"),
        dry_run=_flag(settings, "dryRun"),
        excludes=_patterns(settings, "excludes"),
        exclude_files=[_file_path(item, "excludeFrom") for item in _patterns(settings, "excludeFrom")],
        log_file=_file_path(log_file, "logFile") if log_file is not None else None,
        log_level=log_level.upper(),
    )
