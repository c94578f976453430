"""prompt_toolkit adapters for path completion and history hints."""

from __future__ import annotations

from collections.abc import Iterable

from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

from crabshell.completion import PathCompleter
from crabshell.hints import HintProvider


class PathCompletionAdapter(Completer):
    """Offer filesystem candidates for the word before the cursor."""

    def __init__(self, completer: PathCompleter) -> None:
        self._completer = completer

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        text = document.text_before_cursor
        for candidate in self._completer.resolve(text).candidates:
            yield Completion(
                candidate.quoted(),
                start_position=candidate.replace_from - len(text),
                display=candidate.display_text,
            )


class HistoryHintAdapter(AutoSuggest):
    """Show the rest of the newest matching history command as a hint."""

    def __init__(self, hints: HintProvider) -> None:
        self._hints = hints

    def get_suggestion(self, buffer: Buffer, document: Document) -> Suggestion | None:
        text = document.text
        hint = self._hints.hint(text)
        if hint is None or len(hint) <= len(text):
            return None
        return Suggestion(hint[len(text) :])
