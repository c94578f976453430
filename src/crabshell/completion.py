"""Filesystem path completion for the last word of a command line."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from crabshell.parsing import last_token, parse_line
from crabshell.paths import IS_WINDOWS, get_home, starts_with

PARENT_SEGMENT = ".."
MAX_PARENT_SEGMENTS = 2
CASE_INSENSITIVE_FS = IS_WINDOWS or sys.platform == "darwin"


@dataclass(frozen=True)
class CompletionCandidate:
    """One completion for the word starting at ``replace_from``."""

    display_text: str
    replace_from: int
    needs_quoting: bool = False

    def quoted(self) -> str:
        if self.needs_quoting:
            return f'"{self.display_text}"'
        return self.display_text


@dataclass(frozen=True)
class CompletionResult:
    candidates: list[CompletionCandidate] = field(default_factory=list)
    search_dir: Path | None = None
    ok: bool = True


def best_path(absolute: str, relative: str) -> str:
    """Pick the clearer spelling of one folder.

    The relative form wins unless it climbs more than two levels or is longer
    than the absolute one: ``..`` beats ``/home/me``, while ``/opt`` beats
    ``../../../opt``.
    """
    if not relative:
        return absolute
    if not absolute:
        return relative
    climbs = sum(1 for part in relative.replace("\\", "/").split("/") if part == PARENT_SEGMENT)
    if climbs > MAX_PARENT_SEGMENTS:
        return absolute
    if len(absolute) > len(relative):
        return relative
    return absolute


class PathCompleter:
    """Resolve candidate files and folders for a partially typed path."""

    def __init__(
        self,
        cwd: Callable[[], str] = os.getcwd,
        home: Callable[[], str] = get_home,
        *,
        case_insensitive: bool = CASE_INSENSITIVE_FS,
    ) -> None:
        self._cwd = cwd
        self._home = home
        self._case_insensitive = case_insensitive

    def resolve(self, line: str) -> CompletionResult:
        """Complete the last word of ``line``.

        Every candidate replaces the whole last word, from its first character
        (an opening quote included) to the end of the line. Unreadable or
        missing folders produce no candidates rather than an error.
        """
        parsed = parse_line(line, strip_quotes=True)
        token = last_token(parsed)
        partial = token.text
        if IS_WINDOWS:
            partial = partial.replace("/", os.sep)

        cwd = self._cwd()
        parent, prefix = os.path.split(partial)
        if parent:
            search_dir = self._absolute(self._expand_home(parent), cwd)
            prepend = self._display_folder(search_dir, cwd)
        else:
            search_dir = cwd
            prepend = ""

        match_all = (parsed.ends_with_blank and not parsed.open_quote) or not prefix
        candidates: list[CompletionCandidate] = []
        try:
            with os.scandir(search_dir) as entries:
                for entry in entries:
                    if not match_all and not starts_with(entry.name, prefix, ignore_case=self._case_insensitive):
                        continue
                    display = prepend + entry.name
                    if _is_dir(entry) and not display.endswith(os.sep):
                        display += os.sep
                    candidates.append(
                        CompletionCandidate(
                            display_text=display,
                            replace_from=token.start,
                            needs_quoting=" " in display,
                        )
                    )
        except OSError as exc:
            logger.debug("completion.unreadable dir={} error={}", search_dir, exc)
            return CompletionResult(search_dir=Path(search_dir), ok=False)

        candidates.sort(key=lambda candidate: candidate.display_text)
        logger.debug("completion.resolved dir={} prefix={} count={}", search_dir, prefix, len(candidates))
        return CompletionResult(candidates=candidates, search_dir=Path(search_dir), ok=True)

    def completions(self, line: str) -> list[CompletionCandidate]:
        return self.resolve(line).candidates

    def _expand_home(self, parent: str) -> str:
        if parent != "~" and not parent.startswith(("~/", "~\\")):
            return parent
        home = self._home().rstrip("/\\") or os.sep
        rest = parent[1:].lstrip("/\\")
        return os.path.join(home, rest) if rest else home

    @staticmethod
    def _absolute(folder: str, cwd: str) -> str:
        return os.path.normpath(os.path.join(cwd, folder))

    @staticmethod
    def _display_folder(folder: str, cwd: str) -> str:
        try:
            relative = os.path.relpath(folder, cwd)
        except ValueError:
            # different drives on Windows
            relative = ""
        display = best_path(folder, relative)
        if not display.endswith(os.sep):
            display += os.sep
        return display


def _is_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False
