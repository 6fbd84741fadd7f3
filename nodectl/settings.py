"""Configuration layering for the activation step."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple

from dotenv import dotenv_values

from .errors import ConfigurationError, InvalidDaemonTypeError

ROOT_VAR = "NODECTL_ROOT"
HOME_VAR = "NODECTL_HOME"
DAEMON_TYPE_VAR = "NODECTL_DAEMON_TYPE"
HOME_DEPTH_VAR = "NODECTL_HOME_DEPTH"
HOME_MARKER_VAR = "NODECTL_HOME_MARKER"
LOG_LEVEL_VAR = "NODECTL_LOG_LEVEL"

DEFAULT_DAEMON_TYPE = "supervisord"
DEFAULT_HOME_DEPTH = 2
KNOWN_DAEMON_TYPES = ("supervisord", "systemd")

ENV_FILE_NAME = ".env"

SOURCE_ENVIRONMENT = "environment"
SOURCE_ENV_FILE = "env-file"
SOURCE_DEFAULT = "default"


@dataclass(frozen=True)
class ActivationSettings:
    """Values the activation step reads before it exports anything."""

    daemon_type: str
    daemon_type_source: str
    home_depth: int = DEFAULT_HOME_DEPTH
    home_marker: Optional[str] = None
    env_file: Optional[Path] = None


def load_settings(tool_root: Path, environ: Mapping[str, str]) -> ActivationSettings:
    """Layer ``environ`` over ``<tool_root>/.env`` over the built-in defaults."""
    env_path = tool_root / ENV_FILE_NAME
    file_values: Dict[str, Optional[str]] = dict(dotenv_values(env_path)) if env_path.is_file() else {}
    values = {**file_values, **environ}

    daemon_type, source = _pick_daemon_type(environ, file_values)

    return ActivationSettings(
        daemon_type=daemon_type,
        daemon_type_source=source,
        home_depth=_parse_depth(values.get(HOME_DEPTH_VAR)),
        home_marker=values.get(HOME_MARKER_VAR) or None,
        env_file=env_path if file_values else None,
    )


def validate_daemon_type(value: Optional[str], allowed: Iterable[str] = KNOWN_DAEMON_TYPES) -> str:
    """Return ``value`` stripped if it names a supported daemon backend."""
    allowed = tuple(allowed)
    cleaned = (value or "").strip()
    if cleaned not in allowed:
        raise InvalidDaemonTypeError(cleaned, allowed)
    return cleaned


def _pick_daemon_type(
    environ: Mapping[str, str], file_values: Mapping[str, Optional[str]]
) -> Tuple[str, str]:
    # Empty counts as unset, like ${VAR:-default} in the shell.
    file_value = file_values.get(DAEMON_TYPE_VAR) or None
    fallback = (str(file_value), SOURCE_ENV_FILE) if file_value else (DEFAULT_DAEMON_TYPE, SOURCE_DEFAULT)

    preset = environ.get(DAEMON_TYPE_VAR)
    if not preset:
        return fallback
    # Equal to what activation itself exports: an earlier activation set it.
    if preset == fallback[0]:
        return fallback
    return preset, SOURCE_ENVIRONMENT


def _parse_depth(raw: Optional[str]) -> int:
    if raw is None or not str(raw).strip():
        return DEFAULT_HOME_DEPTH
    try:
        depth = int(str(raw).strip())
    except ValueError as exc:
        raise ConfigurationError(f"{HOME_DEPTH_VAR} must be an integer, got {raw!r}") from exc
    if depth < 1:
        raise ConfigurationError(f"{HOME_DEPTH_VAR} must be at least 1, got {depth}")
    return depth
