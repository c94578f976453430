"""Inline type-ahead hints drawn from folder-scoped history."""

from __future__ import annotations

import os
import time
from collections.abc import Callable, Iterable

from crabshell.history import HistoryItem, HistoryStore
from crabshell.paths import starts_with

DEFAULT_HINT_INTERVAL_SECONDS = 0.3


class HintProvider:
    """Suggest the most recent matching command for the text typed so far.

    Within ``min_interval`` of the previous lookup, text that extends the
    previously looked-up text reuses that answer when it still applies: no
    match stays no match, and a hint the longer text still prefixes stays the
    newest match. Any other text is looked up again.
    """

    def __init__(
        self,
        history: HistoryStore,
        cwd: Callable[[], str] = os.getcwd,
        *,
        min_interval: float = DEFAULT_HINT_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._history = history
        self._cwd = cwd
        self._min_interval = min_interval
        self._clock = clock
        self._last_at: float | None = None
        self._last_hint: str | None = None
        self._last_text = ""

    def hint(self, text: str) -> str | None:
        if not text.strip():
            return None

        now = self._clock()
        if self._can_reuse(text, now):
            return self._last_hint

        self._last_at = now
        self._last_text = text
        self._last_hint = self.lookup(text, self._cwd())
        return self._last_hint

    def _can_reuse(self, text: str, now: float) -> bool:
        if self._last_at is None or now - self._last_at >= self._min_interval:
            return False
        if not starts_with(text, self._last_text, ignore_case=True):
            return False
        return self._last_hint is None or starts_with(self._last_hint, text, ignore_case=True)

    def lookup(self, text: str, folder: str) -> str | None:
        """Search ``folder``'s history, then the folderless history, newest first."""
        for items in (self._history.folder_items(folder), self._history.no_folder_items()):
            match = _latest_match(items, text)
            if match is not None:
                return match
        return None


def _latest_match(items: Iterable[HistoryItem], text: str) -> str | None:
    for item in reversed(list(items)):
        if starts_with(item.command, text, ignore_case=True):
            return item.command
    return None
