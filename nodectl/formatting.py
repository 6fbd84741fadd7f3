"""Console-friendly formatting utilities."""

from __future__ import annotations

from typing import Iterable, Sequence

from .activation import ActivationEnvironment
from .daemon_state import DaemonProcess, DaemonStatus


def format_bytes(num: float) -> str:
    suffixes = ["B", "KiB", "MiB", "GiB", "TiB"]
    value = float(num)
    for suffix in suffixes:
        if value < 1024 or suffix == suffixes[-1]:
            return f"{value:.1f} {suffix}"
        value /= 1024
    return f"{value:.1f} TiB"


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))
    lines = [_format_row(headers, widths), _format_row(["-" * w for w in widths], widths)]
    lines.extend(_format_row(row, widths) for row in rows)
    return "\n".join(lines)


def format_environment(env: ActivationEnvironment) -> str:
    rows = [[name, value] for name, value in env.as_environ().items()]
    lines = [render_table(["变量", "值"], rows), f"守护进程类型来源：{env.daemon_type_source}"]
    if env.collaborators:
        lines.append("协作脚本：")
        lines.extend(f"  {path}" for path in env.collaborators)
    return "\n".join(lines)


def format_process_table(processes: Iterable[DaemonProcess]) -> str:
    rows = [
        [str(proc.pid), proc.name, proc.username or "-", f"{proc.cpu_percent:.0f}%", format_bytes(proc.rss_bytes)]
        for proc in processes
    ]
    return render_table(["PID", "进程", "用户", "CPU", "常驻内存"], rows) if rows else "无进程数据"


def format_status(status: DaemonStatus) -> str:
    state = "运行中" if status.running else "未运行"
    if not status.known:
        state = "未知类型"
    lines = [f"时间：{status.timestamp:%Y-%m-%d %H:%M:%S}", f"守护进程：{status.daemon_type}（{state}）"]
    if status.known:
        lines.append(format_process_table(status.processes))
    return "\n".join(lines)


def _format_row(row: Sequence[str], widths: Sequence[int]) -> str:
    padded = [cell.ljust(width) for cell, width in zip(row, widths)]
    return " | ".join(padded)
