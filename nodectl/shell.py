"""Render activation results as shell code for ``eval`` in the calling session."""

from __future__ import annotations

import shlex
from typing import List

from .activation import ActivationEnvironment
from .settings import DAEMON_TYPE_VAR, HOME_VAR, ROOT_VAR

ACTIVE_MARKER_VAR = "_NODECTL_ACTIVE"
SAVED_DAEMON_TYPE_VAR = "_NODECTL_OLD_DAEMON_TYPE"

# Only the first activation of a session records the caller's daemon type;
# later ones would otherwise save the value activation itself exported.
_SAVE_CALLER_DAEMON_TYPE = f"""\
if [ -z "${{{ACTIVE_MARKER_VAR}+x}}" ]; then
    {ACTIVE_MARKER_VAR}=1
    if [ -n "${{{DAEMON_TYPE_VAR}:-}}" ]; then
        {SAVED_DAEMON_TYPE_VAR}="${DAEMON_TYPE_VAR}"
    fi
fi"""

_RESTORE_CALLER_DAEMON_TYPE = f"""\
if [ -n "${{{ACTIVE_MARKER_VAR}+x}}" ]; then
    if [ -n "${{{SAVED_DAEMON_TYPE_VAR}+x}}" ]; then
        export {DAEMON_TYPE_VAR}="${SAVED_DAEMON_TYPE_VAR}"
    else
        unset {DAEMON_TYPE_VAR}
    fi
fi
unset {SAVED_DAEMON_TYPE_VAR} {ACTIVE_MARKER_VAR}"""


def render_activation_script(env: ActivationEnvironment) -> str:
    """Exports first, then the collaborator ``source`` lines in delegation order."""
    lines: List[str] = [_SAVE_CALLER_DAEMON_TYPE]
    lines.extend(f"export {name}={shlex.quote(value)}" for name, value in env.as_environ().items())
    lines.extend(f". {shlex.quote(str(path))}" for path in env.collaborators)
    return "\n".join(lines) + "\n"


def render_deactivation_script() -> str:
    """Unset the paths and put back the daemon type the caller had before activating."""
    lines = [f"unset {ROOT_VAR}", f"unset {HOME_VAR}", _RESTORE_CALLER_DAEMON_TYPE]
    return "\n".join(lines) + "\n"
