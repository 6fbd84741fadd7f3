"""Entry point for the nodectl command line tool."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .activation import ActivationEnvironment, activate
from .daemon_state import DaemonStatus, probe_daemon
from .diagnostics import Finding, diagnose
from .errors import ActivationError
from .formatting import format_bytes, format_environment, format_status, render_table
from .log import LOG_LEVELS, setup_logging
from .settings import LOG_LEVEL_VAR
from .shell import render_activation_script, render_deactivation_script

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nodectl",
        description="节点控制工具的环境激活：解析工具目录、HOME 路径和守护进程类型。",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help=f"日志级别，默认读取 {LOG_LEVEL_VAR}，否则为 WARNING",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    activate_parser = subparsers.add_parser("activate", help='输出激活用的 shell 代码，配合 eval "$(nodectl activate --anchor ...)" 使用')
    activate_parser.add_argument(
        "--anchor",
        required=True,
        help="激活脚本的路径，通常为 \"${BASH_SOURCE[0]}\"；工具目录取其所在目录",
    )

    subparsers.add_parser("deactivate", help="输出撤销激活变量的 shell 代码")

    for name, help_text in (("env", "查看解析出的环境变量，不修改当前环境"), ("doctor", "检查激活环境和守护进程状态")):
        sub = subparsers.add_parser(name, help=help_text)
        _add_anchor(sub)
        sub.add_argument("--json", action="store_true", help="以 JSON 输出")
        sub.add_argument("--ui", action="store_true", help="以 Rich 风格输出更美观的终端 UI")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level or os.environ.get(LOG_LEVEL_VAR, "WARNING"))

    if args.command == "deactivate":
        sys.stdout.write(render_deactivation_script())
        return 0

    try:
        if args.command == "activate":
            # Resolve against a copy: the caller's shell applies the exports via eval.
            env = activate(args.anchor, environ=dict(os.environ))
            sys.stdout.write(render_activation_script(env))
            return 0
        if args.command == "env":
            _show_environment(activate(args.anchor, environ=dict(os.environ)), args)
            return 0
        return _doctor(args)
    except ActivationError as exc:
        logger.error("Activation failed: %s", exc)
        return 1


def _add_anchor(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--anchor",
        default=".",
        help="激活脚本（或工具目录）的路径，工具目录取其所在目录；默认当前目录",
    )


def _show_environment(env: ActivationEnvironment, args: argparse.Namespace) -> None:
    if args.json:
        print(json.dumps(_environment_dict(env), ensure_ascii=False, indent=2))
        return
    if args.ui:
        console = Console()
        console.print(Panel("节点控制环境", style="bold cyan"))
        console.print(_rich_environment_table(env))
        return
    print(format_environment(env))


def _doctor(args: argparse.Namespace) -> int:
    env = activate(args.anchor, environ=dict(os.environ), collaborators=())
    status = probe_daemon(env.daemon_type)
    findings = diagnose(env, status)

    if args.json:
        print(_to_json(env, status, findings))
    elif args.ui:
        _render_rich(env, status, findings)
    else:
        print(format_environment(env))
        print()
        print(format_status(status))
        if findings:
            print("\n发现的问题：")
            print(_format_findings(findings))
        else:
            print("\n环境正常。")
    return 0


def _format_findings(findings: List[Finding]) -> str:
    rows = [[finding.title, finding.issue, finding.evidence, " / ".join(finding.solutions)] for finding in findings]
    return render_table(["问题", "原因", "证据", "解决方案"], rows)


def _environment_dict(env: ActivationEnvironment) -> Dict[str, Any]:
    payload: Dict[str, Any] = dict(env.as_environ())
    payload["daemon_type_source"] = env.daemon_type_source
    payload["home_marker"] = env.home_marker
    payload["collaborators"] = [str(path) for path in env.collaborators]
    return payload


def _to_json(env: ActivationEnvironment, status: DaemonStatus, findings: List[Finding]) -> str:
    status_dict: Dict[str, Any] = asdict(status)
    status_dict["timestamp"] = status.timestamp.isoformat()
    status_dict["running"] = status.running
    payload: Dict[str, Any] = {
        "environment": _environment_dict(env),
        "daemon": status_dict,
        "findings": [asdict(finding) for finding in findings],
    }
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _rich_environment_table(env: ActivationEnvironment) -> Table:
    table = Table(show_header=False, box=box.ROUNDED)
    for name, value in env.as_environ().items():
        table.add_row(name, value)
    table.add_row("来源", env.daemon_type_source)
    for path in env.collaborators:
        table.add_row("协作脚本", str(path))
    return table


def _render_rich(env: ActivationEnvironment, status: DaemonStatus, findings: List[Finding]) -> None:
    console = Console()

    console.print(Panel(f"节点控制环境 - {status.timestamp:%Y-%m-%d %H:%M:%S}", style="bold cyan"))
    console.print(_rich_environment_table(env))

    processes = Table(title=f"{status.daemon_type} 进程", box=box.SIMPLE_HEAD)
    processes.add_column("PID", justify="right")
    processes.add_column("进程")
    processes.add_column("用户")
    processes.add_column("CPU", justify="right")
    processes.add_column("常驻内存", justify="right")
    if not status.processes:
        processes.add_row("-", "无进程数据", "-", "-", "-")
    for proc in status.processes:
        processes.add_row(
            str(proc.pid), proc.name, proc.username or "-", f"{proc.cpu_percent:.0f}%", format_bytes(proc.rss_bytes)
        )
    console.print(processes)

    if findings:
        issues = Table(title="发现的问题", box=box.SIMPLE_HEAD)
        issues.add_column("问题", style="bold red")
        issues.add_column("原因")
        issues.add_column("证据")
        issues.add_column("解决方案")
        for finding in findings:
            issues.add_row(finding.title, finding.issue, finding.evidence, "\n".join(finding.solutions))
        console.print(issues)
    else:
        console.print(Panel("环境正常。", style="bold green"))


if __name__ == "__main__":
    raise SystemExit(main())
