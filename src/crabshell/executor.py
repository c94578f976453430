"""Hand-off of command lines to the operating system."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Protocol

from loguru import logger

from crabshell.errors import CommandError


class Executor(Protocol):
    def run(self, command_line: str, cwd: Path) -> int: ...


class SubprocessExecutor:
    """Run a reconstructed command line through the system shell.

    Output goes straight to the terminal; the exit status is returned.
    """

    def run(self, command_line: str, cwd: Path) -> int:
        logger.debug("executor.run cwd={} command={}", cwd, command_line)
        try:
            result = subprocess.run(command_line, shell=True, cwd=cwd, check=False)  # noqa: S602
        except (OSError, subprocess.SubprocessError) as exc:
            raise CommandError(f"cannot run {command_line!r}: {exc!s}") from exc
        if result.returncode != 0:
            logger.debug("executor.exit status={} command={}", result.returncode, command_line)
        return result.returncode
