from __future__ import annotations

from pathlib import Path

import pytest
from loguru import logger

from crabshell.config import HISTORY_FILE_NAME, Settings, get_settings, setup_config_folder
from crabshell.errors import ConfigurationError
from crabshell.logging_utils import configure_logging


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRABSHELL_HINT_DELAY", "0.5")
    monkeypatch.setenv("CRABSHELL_MAX_PROMPT", "40")
    monkeypatch.setenv("CRABSHELL_ALIASES", '{"ll": "ls -la"}')

    settings = Settings()

    assert settings.hint_delay == 0.5
    assert settings.max_prompt == 40
    assert settings.aliases == {"ll": "ls -la"}


def test_default_config_folder_uses_home(home: Path) -> None:
    settings = Settings()

    assert settings.resolve_config_folder() == home / ".crabshell"
    assert settings.history_path == home / ".crabshell" / HISTORY_FILE_NAME


def test_get_settings_ignores_unset_overrides(tmp_path: Path) -> None:
    settings = get_settings(tmp_path, log_enabled=None, max_prompt=30)

    assert settings.config_folder == tmp_path
    assert settings.log_enabled is False
    assert settings.max_prompt == 30
    assert settings.log_path == tmp_path / "crabshell.log"
    assert settings.plugins_path == tmp_path / "plugins"


def test_setup_config_folder_creates_it(tmp_path: Path) -> None:
    folder = setup_config_folder(Settings(config_folder=tmp_path / "nested" / "config"))

    assert folder.is_dir()


def test_setup_config_folder_reports_unusable_folder(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        setup_config_folder(Settings(config_folder=blocker / "config"))


def test_configure_logging_writes_log_file(tmp_path: Path, reset_logger: None) -> None:
    settings = Settings(config_folder=tmp_path, log_enabled=True, log_level="DEBUG")

    configure_logging(settings)
    logger.debug("test.event value={}", 42)
    logger.remove()

    text = settings.log_path.read_text(encoding="utf-8")
    assert "logging.configured" in text
    assert "test.event value=42" in text


def test_configure_logging_without_file(tmp_path: Path, reset_logger: None) -> None:
    configure_logging(Settings(config_folder=tmp_path))

    assert not (tmp_path / "crabshell.log").exists()
