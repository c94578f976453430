"""Configuration management for crabshell."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from .errors import ConfigurationError
from .paths import default_config_folder

HISTORY_FILE_NAME = "history.dat"
LOG_FILE_NAME = "crabshell.log"
PLUGINS_DIR_NAME = "plugins"


class Settings(BaseSettings):
    """Application settings."""

    # Locations
    config_folder: Optional[Path] = Field(None, description="Folder holding history, lock files and plugins")
    history_file: str = Field(default=HISTORY_FILE_NAME, description="History file name inside the config folder")
    start_dir: Optional[Path] = Field(None, description="Directory to change to when the shell starts")

    # Interactive behaviour
    hint_delay: float = Field(default=0.3, description="Minimum seconds between two hint lookups")
    max_prompt: int = Field(default=25, description="Prompt length before folders are abbreviated")
    aliases: dict[str, str] = Field(default_factory=dict, description="Command aliases, name to replacement")
    plugins_enabled: bool = Field(default=True, description="Load plugins from entry points and the plugins folder")

    # History file locking
    lock_timeout: float = Field(default=1.0, description="Seconds to wait for the history lock")
    lock_poll: float = Field(default=0.02, description="Seconds between two lock polls")

    # Logging Configuration
    log_enabled: bool = Field(default=False, description="Write a log file into the config folder")
    log_level: str = Field(default="INFO", description="Log level")

    class Config:
        """Pydantic configuration."""

        env_prefix = "CRABSHELL_"
        case_sensitive = False
        env_file = ".env"
        env_file_encoding = "utf-8"

    def resolve_config_folder(self) -> Path:
        """Return the configured folder, falling back to ``~/.crabshell``."""
        if self.config_folder is not None:
            return self.config_folder.expanduser()
        return default_config_folder()

    @property
    def history_path(self) -> Path:
        return self.resolve_config_folder() / self.history_file

    @property
    def log_path(self) -> Path:
        return self.resolve_config_folder() / LOG_FILE_NAME

    @property
    def plugins_path(self) -> Path:
        return self.resolve_config_folder() / PLUGINS_DIR_NAME


def get_settings(config_folder: Optional[Path] = None, **overrides: object) -> Settings:
    """Get application settings.

    Args:
        config_folder: Optional config folder override
        overrides: Extra field overrides, typically from CLI flags

    Returns:
        Settings instance
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    if config_folder is not None:
        values["config_folder"] = config_folder
    return Settings(**values)


def setup_config_folder(settings: Settings) -> Path:
    """Create the config folder if needed and return it."""
    folder = settings.resolve_config_folder()
    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(f"cannot create config folder {folder}: {exc}") from exc
    return folder
