"""crabshell - an interactive shell with folder-scoped history hints."""

from .completion import CompletionCandidate, PathCompleter
from .history import HistoryItem, HistoryStore
from .lock import FileLock
from .parsing import CommandKind, ParsedLine, Pipe, Plain, Redirection, Token, parse_line

__version__ = "0.1.0"

__all__ = [
    "CommandKind",
    "CompletionCandidate",
    "FileLock",
    "HistoryItem",
    "HistoryStore",
    "ParsedLine",
    "PathCompleter",
    "Pipe",
    "Plain",
    "Redirection",
    "Token",
    "parse_line",
]
