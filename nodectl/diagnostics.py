"""Generate actionable diagnostics for an activated node control environment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .activation import COLLABORATORS, ActivationEnvironment, Collaborator
from .daemon_state import DaemonStatus
from .settings import HOME_DEPTH_VAR, HOME_MARKER_VAR, KNOWN_DAEMON_TYPES


@dataclass
class Finding:
    title: str
    issue: str
    evidence: str
    solutions: Sequence[str]


def diagnose(env: ActivationEnvironment, status: DaemonStatus) -> List[Finding]:
    """Check an activation result and the daemon probe, returning problems with fixes."""
    findings: List[Finding] = []

    findings.extend(_diagnose_daemon_type(env))
    findings.extend(_diagnose_daemon_running(status))
    findings.extend(_diagnose_home(env))
    findings.extend(_diagnose_collaborators(env, COLLABORATORS))
    layout_note = _diagnose_layout(env)
    if layout_note:
        findings.append(layout_note)

    return findings


def _diagnose_daemon_type(env: ActivationEnvironment) -> List[Finding]:
    if env.daemon_type in KNOWN_DAEMON_TYPES:
        return []
    return [
        Finding(
            title="未知守护进程类型",
            issue="后续工具无法识别所选的进程托管后端。",
            evidence=f"NODECTL_DAEMON_TYPE={env.daemon_type!r}（来源：{env.daemon_type_source}），支持：{', '.join(KNOWN_DAEMON_TYPES)}。",
            solutions=[
                "执行 `unset NODECTL_DAEMON_TYPE` 后重新激活以使用默认值。",
                "检查 .env 文件中的 NODECTL_DAEMON_TYPE 拼写。",
            ],
        )
    ]


def _diagnose_daemon_running(status: DaemonStatus) -> List[Finding]:
    if not status.known or status.running:
        return []
    return [
        Finding(
            title="守护进程未运行",
            issue=f"未发现 {status.daemon_type} 进程，节点无法被启动或托管。",
            evidence=f"{status.timestamp:%Y-%m-%d %H:%M:%S} 检查时进程列表中没有 {status.daemon_type}。",
            solutions=[
                f"先启动 {status.daemon_type}，再执行节点相关命令。",
                "确认当前用户有权限查看该进程。",
            ],
        )
    ]


def _diagnose_home(env: ActivationEnvironment) -> List[Finding]:
    if env.home.is_dir():
        return []
    return [
        Finding(
            title="HOME 目录不存在",
            issue="推导出的 HOME 路径在磁盘上不存在。",
            evidence=f"NODECTL_HOME={env.home}",
            solutions=[
                f"调整 {HOME_DEPTH_VAR} 使其与实际安装层级一致。",
                f"或设置 {HOME_MARKER_VAR} 按标记文件查找 HOME。",
            ],
        )
    ]


def _diagnose_collaborators(env: ActivationEnvironment, collaborators: Sequence[Collaborator]) -> List[Finding]:
    findings: List[Finding] = []
    for collaborator in collaborators:
        if collaborator.is_available(env.tool_root):
            continue
        path = collaborator.locate(env.tool_root)
        findings.append(
            Finding(
                title="协作脚本缺失",
                issue=f"缺少 {collaborator.name} 脚本，`nodectl activate` 会直接失败。",
                evidence=f"未找到 {path}，或当前用户无权读取。",
                solutions=[
                    f"确认工具目录完整，{collaborator.relative_path} 应位于 {env.tool_root} 下。",
                    "检查 --anchor 是否指向激活脚本本身。",
                ],
            )
        )
    return findings


def _diagnose_layout(env: ActivationEnvironment) -> Finding | None:
    if env.home_marker:
        return None
    return Finding(
        title="HOME 由固定层级推导",
        issue="工具目录被移动到不同层级时，HOME 会悄悄指向错误位置。",
        evidence=f"NODECTL_HOME 取自 {env.tool_root} 的上层目录：{env.home}。",
        solutions=[f"在 .env 中设置 {HOME_MARKER_VAR}（例如 Cargo.toml）以按标记文件定位 HOME。"],
    )
