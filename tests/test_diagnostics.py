import os
from datetime import datetime
from pathlib import Path

from nodectl.activation import ActivationEnvironment
from nodectl.daemon_state import DaemonProcess, DaemonStatus
from nodectl.diagnostics import diagnose


def make_env(tool_root: Path, *, daemon_type: str = "supervisord", home_marker="Cargo.toml", home=None) -> ActivationEnvironment:
    return ActivationEnvironment(
        tool_root=tool_root,
        home=home if home is not None else tool_root.parent.parent,
        daemon_type=daemon_type,
        daemon_type_source="default",
        home_marker=home_marker,
    )


def make_status(*, daemon_type: str = "supervisord", known: bool = True, processes=None) -> DaemonStatus:
    if processes is None:
        processes = [DaemonProcess(pid=42, name=daemon_type, username="node", cpu_percent=0.5, rss_bytes=1024)]
    return DaemonStatus(timestamp=datetime.now(), daemon_type=daemon_type, known=known, processes=processes)


def test_unknown_daemon_type_detected(tool_root):
    notes = diagnose(make_env(tool_root, daemon_type="upstart"), make_status(daemon_type="upstart", known=False))
    assert any("未知守护进程类型" == note.title for note in notes)
    assert not any("守护进程未运行" == note.title for note in notes)


def test_daemon_not_running_detected(tool_root):
    notes = diagnose(make_env(tool_root), make_status(processes=[]))
    assert any("守护进程未运行" == note.title for note in notes)


def test_missing_home_detected(tool_root):
    notes = diagnose(make_env(tool_root, home=tool_root / "nowhere"), make_status())
    assert any("HOME 目录不存在" == note.title for note in notes)


def test_missing_collaborator_detected(tool_root):
    (tool_root / "sh" / "aliases.sh").unlink()
    notes = diagnose(make_env(tool_root), make_status())
    missing = [note for note in notes if note.title == "协作脚本缺失"]
    assert len(missing) == 1
    assert "aliases.sh" in missing[0].evidence


def test_unreadable_collaborator_detected(tool_root, monkeypatch):
    unreadable = tool_root / "sh" / "utils.sh"
    real_access = os.access
    monkeypatch.setattr(os, "access", lambda path, mode: False if path == unreadable else real_access(path, mode))

    notes = diagnose(make_env(tool_root), make_status())
    missing = [note for note in notes if note.title == "协作脚本缺失"]
    assert len(missing) == 1
    assert "utils.sh" in missing[0].evidence


def test_fixed_depth_layout_noted(tool_root):
    notes = diagnose(make_env(tool_root, home_marker=None), make_status())
    assert any("HOME 由固定层级推导" == note.title for note in notes)


def test_no_findings_when_normal(tool_root):
    notes = diagnose(make_env(tool_root), make_status())
    assert notes == []
