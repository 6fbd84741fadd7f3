from contextlib import contextmanager
from types import SimpleNamespace

import psutil

from nodectl import daemon_state
from nodectl.daemon_state import probe_daemon


class FakeProcess:
    def __init__(self, pid, name, *, username="node", deny_name=False):
        self.pid = pid
        self._name = name
        self._username = username
        self._deny_name = deny_name

    @contextmanager
    def oneshot(self):
        yield

    def name(self):
        if self._deny_name:
            raise psutil.AccessDenied(self.pid)
        return self._name

    def username(self):
        if self._username is None:
            raise psutil.AccessDenied(self.pid)
        return self._username

    def cpu_percent(self, interval=None):
        return 1.5

    def memory_info(self):
        return SimpleNamespace(rss=4096)


def test_probe_collects_matching_processes(monkeypatch):
    processes = [
        FakeProcess(10, "supervisord"),
        FakeProcess(11, "bash"),
        FakeProcess(12, "supervisord", username=None),
        FakeProcess(13, "secret", deny_name=True),
    ]
    monkeypatch.setattr(daemon_state.psutil, "process_iter", lambda: iter(processes))

    status = probe_daemon("supervisord")

    assert status.known
    assert status.running
    assert [proc.pid for proc in status.processes] == [10, 12]
    assert status.processes[1].username is None
    assert status.processes[0].rss_bytes == 4096


def test_probe_reports_not_running(monkeypatch):
    monkeypatch.setattr(daemon_state.psutil, "process_iter", lambda: iter([FakeProcess(1, "init")]))
    status = probe_daemon("systemd")
    assert status.known
    assert not status.running


def test_probe_unknown_daemon_type_skips_process_scan(monkeypatch):
    def fail():
        raise AssertionError("process list should not be read")

    monkeypatch.setattr(daemon_state.psutil, "process_iter", fail)
    status = probe_daemon("not-a-backend")
    assert not status.known
    assert status.processes == []
