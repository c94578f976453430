from __future__ import annotations

import sys
from pathlib import Path

import pytest
from loguru import logger

from crabshell.config import Settings


class RecordingExecutor:
    def __init__(self, status: int = 0) -> None:
        self.calls: list[tuple[str, Path]] = []
        self.status = status

    def run(self, command_line: str, cwd: Path) -> int:
        self.calls.append((command_line, cwd))
        return self.status

    @property
    def lines(self) -> list[str]:
        return [line for line, _ in self.calls]


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, home: Path) -> Path:
    workspace_dir = tmp_path / "workspace"
    workspace_dir.mkdir()
    monkeypatch.chdir(workspace_dir)
    return workspace_dir


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(config_folder=tmp_path / "config", plugins_enabled=False, lock_timeout=0.05, lock_poll=0.01)


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def reset_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)
