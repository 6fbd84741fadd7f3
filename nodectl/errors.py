"""Exceptions raised while activating the node control environment."""

from __future__ import annotations


class ActivationError(RuntimeError):
    """Base class for every fatal activation failure."""


class PathResolutionError(ActivationError):
    """The tool root or the home path could not be computed."""


class MissingCollaboratorError(ActivationError):
    """A delegated shell script is missing or unreadable."""

    def __init__(self, name: str, path: object) -> None:
        super().__init__(f"Missing {name} collaborator: {path}")
        self.name = name
        self.path = path


class ConfigurationError(ActivationError):
    """A configuration value is malformed or the environment is not activated."""


class InvalidDaemonTypeError(ConfigurationError):
    def __init__(self, value: str, allowed: tuple[str, ...]) -> None:
        super().__init__(f"Unsupported daemon type {value!r}; expected one of: {', '.join(allowed)}")
        self.value = value
        self.allowed = allowed
