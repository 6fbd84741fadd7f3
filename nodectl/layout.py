"""Resolve the tool root and the home directory derived from it."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

from .errors import ConfigurationError, PathResolutionError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def resolve_tool_root(anchor: PathLike) -> Path:
    """Return the absolute, symlink-free directory containing ``anchor``.

    ``anchor`` is normally the activation script itself. A directory anchor is
    treated as the tool root.
    """
    try:
        resolved = Path(anchor).expanduser().resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise PathResolutionError(f"Cannot resolve tool root from {anchor!s}: {exc}") from exc

    tool_root = resolved if resolved.is_dir() else resolved.parent
    logger.debug("Resolved tool root %s from anchor %s", tool_root, anchor)
    return tool_root


def derive_home(tool_root: Path, depth: int = 2) -> Path:
    """Walk ``depth`` containing directories up from ``tool_root``."""
    if depth < 1:
        raise ConfigurationError(f"Home depth must be at least 1, got {depth}")

    home = tool_root
    for step in range(depth):
        parent = home.parent
        if parent == home:
            raise PathResolutionError(
                f"{tool_root} has only {step} parent directories, cannot go up {depth}"
            )
        home = parent
    return home


def find_home(tool_root: Path, marker: str) -> Path:
    """Return the nearest ancestor of ``tool_root`` that contains ``marker``."""
    for candidate in tool_root.parents:
        if (candidate / marker).exists():
            logger.debug("Found home marker %s in %s", marker, candidate)
            return candidate
    raise PathResolutionError(f"No ancestor of {tool_root} contains {marker!r}")
