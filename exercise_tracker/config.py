"""Configuration management for the exercise tracker service."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

from .database import resolve_database_path

DEFAULT_PORT = 3000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _env_flag(value: object, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean setting: {value!r}")


def _parse_origins(value: object) -> Tuple[str, ...]:
    if value is None:
        return ("*",)
    if isinstance(value, (list, tuple)):
        raw = [str(item).strip() for item in value]
    else:
        raw = [part.strip() for chunk in str(value).split(",") for part in chunk.split()]
    origins = []
    for origin in raw:
        origin = origin.rstrip("/")
        if origin and origin not in origins:
            origins.append(origin)
    return tuple(origins) or ("*",)


def _parse_port(value: object) -> int:
    try:
        port = int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid port: {value!r}") from exc
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range: {port}")
    return port


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read once at process start."""

    database_path: Path
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = field(default=("*",))
    legacy_error_status: bool = False

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from a raw mapping such as a YAML document."""

        unknown = set(data) - {
            "database_path",
            "host",
            "port",
            "log_level",
            "cors_origins",
            "legacy_error_status",
        }
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        raw_db_path = data.get("database_path")
        if raw_db_path and base_path is not None and not Path(str(raw_db_path)).expanduser().is_absolute():
            raw_db_path = str(base_path / Path(str(raw_db_path)).expanduser())

        return Settings(
            database_path=resolve_database_path(str(raw_db_path) if raw_db_path else None),
            host=str(data.get("host") or "0.0.0.0"),
            port=_parse_port(data.get("port", DEFAULT_PORT)),
            log_level=str(data.get("log_level") or "INFO").upper(),
            cors_origins=_parse_origins(data.get("cors_origins")),
            legacy_error_status=_env_flag(data.get("legacy_error_status"), False),
        )


def load_config_file(config_path: Path) -> Dict[str, object]:
    """Load settings from a YAML file containing a single mapping."""

    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping of settings")
    return raw


_ENV_OVERRIDES = {
    "EXERCISE_TRACKER_DB_PATH": "database_path",
    "HOST": "host",
    "PORT": "port",
    "LOG_LEVEL": "log_level",
    "EXERCISE_TRACKER_CORS_ORIGINS": "cors_origins",
    "EXERCISE_TRACKER_LEGACY_ERRORS": "legacy_error_status",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from the optional YAML file and the environment.

    The file named by ``EXERCISE_TRACKER_CONFIG`` is read first; environment
    variables then override individual keys.
    """

    env = os.environ if environ is None else environ
    data: Dict[str, object] = {}
    base_path: Path | None = None

    config_file = env.get("EXERCISE_TRACKER_CONFIG")
    if config_file:
        config_path = Path(config_file).expanduser().resolve(strict=False)
        data.update(load_config_file(config_path))
        base_path = config_path.parent

    for variable, key in _ENV_OVERRIDES.items():
        value = env.get(variable)
        if value is None:
            continue
        data[key] = value
        if key == "database_path":
            base_path = None

    return Settings.from_dict(data, base_path=base_path)


__all__ = ["DEFAULT_PORT", "Settings", "load_config_file", "load_settings"]
