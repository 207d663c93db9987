from __future__ import annotations

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any
import json
import os
import re
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml


_env_re = re.compile(r"\$\{([^:}]+):-?([^}]*)\}")


@dataclass(frozen=True)
class ContentConfig:
    content_roots: list[str] = field(default_factory=lambda: ["_posts"])
    file_extensions: list[str] = field(default_factory=lambda: [".md", ".markdown"])
    encoding: str = "utf-8"


@dataclass(frozen=True)
class CatalogConfig:
    timezone: str = "UTC"


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class AppConfig:
    content: ContentConfig = field(default_factory=ContentConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _expand_env_var(value: str) -> str:
    """Expand environment variables in the form ${VAR:-default}."""

    def replace_env(match):
        return os.environ.get(match.group(1), match.group(2))

    return _env_re.sub(replace_env, value)


def _expand_env(value):
    """Recursively expand env vars in strings inside dicts/lists."""
    if isinstance(value, str):
        return _expand_env_var(value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _coalesce(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _coalesce(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {type(section).__name__}")
    return dict(section)


def _from_dict(data: dict[str, Any]) -> AppConfig:
    content_data = _section(data, "content")
    extensions = content_data.get("file_extensions")
    if extensions is not None:
        content_data["file_extensions"] = [
            ext if ext.startswith(".") else f".{ext}" for ext in extensions
        ]
    return AppConfig(
        content=ContentConfig(**content_data),
        catalog=CatalogConfig(**_section(data, "catalog")),
        logging=LoggingConfig(**_section(data, "logging")),
    )


def load_config(path: str | Path | None) -> AppConfig:
    """Load configuration from a YAML (or JSON) file merged over the defaults.

    Args:
        path: Config file path. ``None`` returns the defaults.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        TypeError: If a section contains unknown keys
    """
    if path is None:
        return apply_env_overrides(AppConfig())

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".json"}:
        data = json.loads(raw)
    else:
        data = yaml.safe_load(raw) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {path}")

    # Flat form: content_roots/file_extensions at the top level
    if "content_roots" in data or "file_extensions" in data:
        content_data = _section(data, "content")
        for key in ("content_roots", "file_extensions"):
            if key in data:
                content_data[key] = data.pop(key)
        data["content"] = content_data

    # Empty sections (`content:`) fall back to the defaults
    data = {key: value for key, value in data.items() if value is not None}
    merged = _coalesce(asdict(AppConfig()), _expand_env(data))
    return apply_env_overrides(_from_dict(merged))


def apply_env_overrides(config: AppConfig) -> AppConfig:
    level = os.getenv("POSTKB_LOG_LEVEL")
    if level:
        return AppConfig(
            content=config.content,
            catalog=config.catalog,
            logging=LoggingConfig(level=level.upper(), format=config.logging.format),
        )
    return config


def resolve_path(value: str, base: Path | None = None) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    base = base or Path.cwd()
    return (base / path).resolve()


def site_timezone(config: CatalogConfig) -> tzinfo:
    """Timezone assumed for naive publication dates."""
    if config.timezone.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(config.timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {config.timezone}") from exc
