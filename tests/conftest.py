import logging
from pathlib import Path

import pytest


@pytest.fixture
def tool_root(tmp_path: Path) -> Path:
    """A tool installed two levels below its home, with both collaborators present."""
    root = tmp_path.resolve() / "workspace" / "utils" / "nctl"
    (root / "sh").mkdir(parents=True)
    (root / "sh" / "utils.sh").write_text("log() { echo \"$@\"; }\n", encoding="utf-8")
    (root / "sh" / "aliases.sh").write_text("alias nctl-status='echo ok'\n", encoding="utf-8")
    (root / "activate").write_text('eval "$(nodectl activate --anchor "${BASH_SOURCE[0]}")"\n', encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("nodectl")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
