"""Application-level exception types for crabshell."""

from __future__ import annotations


class CrabShellError(Exception):
    """Base exception for crabshell."""


class ConfigurationError(CrabShellError):
    """Raised when the configuration folder or settings are unusable."""


class CommandSyntaxError(CrabShellError):
    """Raised when a classified command line cannot be executed as written."""


class CommandError(CrabShellError):
    """Raised by builtin handlers when a command fails in a user-visible way."""


class HistoryIndexError(CrabShellError, IndexError):
    """Raised when a history index is outside the stored range."""
