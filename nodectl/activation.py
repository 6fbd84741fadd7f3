"""The activation step: resolve paths, export them and delegate to the shell collaborators."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, MutableMapping, Mapping, Optional, Sequence

from .errors import ConfigurationError, MissingCollaboratorError
from .layout import PathLike, derive_home, find_home, resolve_tool_root
from .settings import (
    DAEMON_TYPE_VAR,
    HOME_VAR,
    KNOWN_DAEMON_TYPES,
    ROOT_VAR,
    SOURCE_ENVIRONMENT,
    ActivationSettings,
    load_settings,
    validate_daemon_type,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Collaborator:
    name: str
    relative_path: str

    def locate(self, tool_root: Path) -> Path:
        return tool_root / self.relative_path

    def is_available(self, tool_root: Path) -> bool:
        """True when the script exists as a regular file and can be read."""
        path = self.locate(tool_root)
        return path.is_file() and os.access(path, os.R_OK)


# Sourced in this order; aliases rely on the utilities functions.
COLLABORATORS: Sequence[Collaborator] = (
    Collaborator(name="utilities", relative_path="sh/utils.sh"),
    Collaborator(name="aliases", relative_path="sh/aliases.sh"),
)


@dataclass
class ActivationEnvironment:
    tool_root: Path
    home: Path
    daemon_type: str
    daemon_type_source: str = SOURCE_ENVIRONMENT
    home_marker: Optional[str] = None
    collaborators: List[Path] = field(default_factory=list)

    def as_environ(self) -> Dict[str, str]:
        """Return the exported variables in export order."""
        return {
            ROOT_VAR: str(self.tool_root),
            HOME_VAR: str(self.home),
            DAEMON_TYPE_VAR: self.daemon_type,
        }


def activate(
    anchor: PathLike,
    environ: Optional[MutableMapping[str, str]] = None,
    collaborators: Iterable[Collaborator] = COLLABORATORS,
) -> ActivationEnvironment:
    """Run the activation sequence against ``environ`` (``os.environ`` by default).

    The variables are written before the collaborators are checked, so a
    missing collaborator leaves them in place. A daemon type already present
    in ``environ`` is never replaced.
    """
    if environ is None:
        environ = os.environ

    tool_root = resolve_tool_root(anchor)
    settings = load_settings(tool_root, environ)
    home = _resolve_home(tool_root, settings)

    environ[ROOT_VAR] = str(tool_root)
    environ[HOME_VAR] = str(home)
    if not environ.get(DAEMON_TYPE_VAR):
        environ[DAEMON_TYPE_VAR] = settings.daemon_type
    logger.info(
        "Activated %s (home %s, daemon type %s from %s)",
        tool_root,
        home,
        environ[DAEMON_TYPE_VAR],
        settings.daemon_type_source,
    )

    return ActivationEnvironment(
        tool_root=tool_root,
        home=home,
        daemon_type=environ[DAEMON_TYPE_VAR],
        daemon_type_source=settings.daemon_type_source,
        home_marker=settings.home_marker,
        collaborators=delegate(tool_root, collaborators),
    )


def delegate(tool_root: Path, collaborators: Iterable[Collaborator] = COLLABORATORS) -> List[Path]:
    """Return collaborator script paths in delegation order, failing on the first missing one."""
    paths: List[Path] = []
    for collaborator in collaborators:
        path = collaborator.locate(tool_root)
        if not collaborator.is_available(tool_root):
            raise MissingCollaboratorError(collaborator.name, path)
        logger.debug("Delegating to %s collaborator %s", collaborator.name, path)
        paths.append(path)
    return paths


def load_environment(
    environ: Optional[Mapping[str, str]] = None,
    allowed: Iterable[str] = KNOWN_DAEMON_TYPES,
) -> ActivationEnvironment:
    """Read back an activated environment, validating it for downstream tooling."""
    if environ is None:
        environ = os.environ

    missing = [name for name in (ROOT_VAR, HOME_VAR) if not environ.get(name)]
    if missing:
        raise ConfigurationError(f"Environment is not activated, missing: {', '.join(missing)}")

    tool_root = Path(environ[ROOT_VAR])
    home = Path(environ[HOME_VAR])
    for name, path in ((ROOT_VAR, tool_root), (HOME_VAR, home)):
        if not path.is_absolute():
            raise ConfigurationError(f"{name} must be an absolute path, got {path}")

    return ActivationEnvironment(
        tool_root=tool_root,
        home=home,
        daemon_type=validate_daemon_type(environ.get(DAEMON_TYPE_VAR), allowed),
    )


def _resolve_home(tool_root: Path, settings: ActivationSettings) -> Path:
    if settings.home_marker:
        return find_home(tool_root, settings.home_marker)
    return derive_home(tool_root, settings.home_depth)
