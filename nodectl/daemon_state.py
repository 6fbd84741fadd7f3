"""Inspect running processes of the selected daemon backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import psutil

# Process names each backend runs under.
DAEMON_PROCESS_NAMES: Dict[str, tuple] = {
    "supervisord": ("supervisord",),
    "systemd": ("systemd",),
}


@dataclass
class DaemonProcess:
    pid: int
    name: str
    username: Optional[str]
    cpu_percent: float
    rss_bytes: int


@dataclass
class DaemonStatus:
    timestamp: datetime
    daemon_type: str
    known: bool
    processes: List[DaemonProcess] = field(default_factory=list)

    @property
    def running(self) -> bool:
        return bool(self.processes)


def probe_daemon(daemon_type: str) -> DaemonStatus:
    """Collect the processes currently running for ``daemon_type``."""
    names = DAEMON_PROCESS_NAMES.get(daemon_type)
    if names is None:
        return DaemonStatus(timestamp=datetime.now(), daemon_type=daemon_type, known=False)

    return DaemonStatus(
        timestamp=datetime.now(),
        daemon_type=daemon_type,
        known=True,
        processes=_matching_processes(psutil.process_iter(), names),
    )


def _matching_processes(processes: Iterable[psutil.Process], names: Iterable[str]) -> List[DaemonProcess]:
    wanted = set(names)
    matches: List[DaemonProcess] = []
    for proc in processes:
        try:
            with proc.oneshot():
                name = proc.name()
                if name not in wanted:
                    continue
                try:
                    username = proc.username()
                except (KeyError, psutil.AccessDenied):
                    # uid without a passwd entry, or not ours to read
                    username = None
                matches.append(
                    DaemonProcess(
                        pid=proc.pid,
                        name=name,
                        username=username,
                        cpu_percent=proc.cpu_percent(None),
                        rss_bytes=proc.memory_info().rss,
                    )
                )
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return matches
