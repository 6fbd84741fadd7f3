"""
Activation step for the node control tool: resolves its paths and daemon backend for downstream tooling.
"""

__all__ = ["activation", "cli", "daemon_state", "diagnostics", "errors", "formatting", "layout", "log", "settings", "shell"]
__version__ = "0.1.0"
