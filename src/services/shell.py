from __future__ import annotations

import logging
import subprocess
from typing import Protocol

logger = logging.getLogger(__name__)


class ShellExecutor(Protocol):
    def execute(self, command: str) -> str: ...


class SubprocessShell(ShellExecutor):
    """Runs commands through ``bash -c`` and returns their stdout.

    A non-zero exit status is logged, not raised: callers get whatever the
    command printed and carry on.
    """

    def __init__(self, *, executable: str = "bash", timeout: float | None = 30.0) -> None:
        self.executable = executable
        self.timeout = timeout

    def execute(self, command: str) -> str:
        logger.debug("Executing shell command: %s", command)
        completed = subprocess.run(
            [self.executable, "-c", command],
            capture_output=True,
            text=True,
            timeout=self.timeout,
        )
        if completed.returncode != 0:
            logger.warning(
                "Shell command %r exited with status %s: %s",
                command,
                completed.returncode,
                (completed.stderr or "").strip(),
            )
        return completed.stdout


__all__ = ["ShellExecutor", "SubprocessShell"]
