import os
import shlex
import shutil
import subprocess
from pathlib import Path

import pytest

from nodectl.activation import ActivationEnvironment, activate
from nodectl.shell import render_activation_script, render_deactivation_script

requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not installed")


def run_bash(script: str) -> str:
    result = subprocess.run(
        ["bash", "-c", script],
        capture_output=True,
        text=True,
        env={"PATH": os.environ.get("PATH", "/usr/bin:/bin")},
        check=True,
    )
    return result.stdout.strip()


def test_exports_precede_collaborator_sourcing(tool_root):
    script = render_activation_script(activate(tool_root / "activate", {}))
    lines = [line for line in script.splitlines() if line.startswith(("export NODECTL", ". "))]

    assert lines == [
        f"export NODECTL_ROOT={shlex.quote(str(tool_root))}",
        f"export NODECTL_HOME={shlex.quote(str(tool_root.parent.parent))}",
        "export NODECTL_DAEMON_TYPE=supervisord",
        f". {shlex.quote(str(tool_root / 'sh' / 'utils.sh'))}",
        f". {shlex.quote(str(tool_root / 'sh' / 'aliases.sh'))}",
    ]
    assert script.index("_NODECTL_OLD_DAEMON_TYPE=") < script.index("export NODECTL_DAEMON_TYPE")


def test_values_are_shell_quoted():
    env = ActivationEnvironment(
        tool_root=Path("/opt/my tools/nctl"),
        home=Path("/opt"),
        daemon_type="x; rm -rf ~",
    )
    script = render_activation_script(env)
    assert "export NODECTL_ROOT='/opt/my tools/nctl'" in script
    assert "export NODECTL_DAEMON_TYPE='x; rm -rf ~'" in script


def test_deactivation_unsets_paths():
    script = render_deactivation_script()
    assert "unset NODECTL_ROOT\n" in script
    assert "unset NODECTL_HOME\n" in script


@requires_bash
def test_deactivate_restores_caller_daemon_type(tool_root):
    activation = render_activation_script(activate(tool_root / "activate", {"NODECTL_DAEMON_TYPE": "systemd"}))
    script = "\n".join(
        [
            "export NODECTL_DAEMON_TYPE=systemd",
            activation,
            'echo "during=$NODECTL_DAEMON_TYPE"',
            render_deactivation_script(),
            'echo "after=${NODECTL_DAEMON_TYPE-UNSET} root=${NODECTL_ROOT-UNSET}"',
        ]
    )
    assert run_bash(script).splitlines() == ["during=systemd", "after=systemd root=UNSET"]


@requires_bash
def test_deactivate_unsets_defaulted_daemon_type_after_reactivation(tool_root):
    activation = render_activation_script(activate(tool_root / "activate", {}))
    # Activating twice must not record the first run's default as the caller's value.
    script = "\n".join(
        [
            "unset NODECTL_DAEMON_TYPE",
            activation,
            activation,
            render_deactivation_script(),
            'echo "after=${NODECTL_DAEMON_TYPE-UNSET}"',
        ]
    )
    assert run_bash(script) == "after=UNSET"


@requires_bash
def test_deactivate_without_activation_keeps_caller_value():
    script = "\n".join(
        [
            "export NODECTL_DAEMON_TYPE=systemd",
            render_deactivation_script(),
            'echo "after=${NODECTL_DAEMON_TYPE-UNSET}"',
        ]
    )
    assert run_bash(script) == "after=systemd"
