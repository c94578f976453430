"""CLI renderer for crabshell."""

from __future__ import annotations

from collections.abc import Iterable

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggest
from prompt_toolkit.completion import Completer
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.markup import escape


class Renderer:
    """Terminal surface: rich for messages, prompt_toolkit for line input."""

    def __init__(
        self,
        *,
        completer: Completer | None = None,
        auto_suggest: AutoSuggest | None = None,
        console: Console | None = None,
    ) -> None:
        self.console: Console = console or Console()
        self._history = InMemoryHistory()
        self._completer = completer
        self._auto_suggest = auto_suggest
        self._prompt_session: PromptSession[str] | None = None

    def enable_editing(self, completer: Completer, auto_suggest: AutoSuggest) -> None:
        """Attach tab completion and inline hints to the next prompt."""
        self._completer = completer
        self._auto_suggest = auto_suggest
        self._prompt_session = None

    def seed_history(self, commands: Iterable[str]) -> None:
        """Load earlier commands so up-arrow recall works from the first prompt."""
        for command in commands:
            self._history.append_string(command)

    def add_history(self, command: str) -> None:
        self._history.append_string(command)

    def info(self, message: str) -> None:
        """Render an info message."""
        self.console.print(escape(message))

    def error(self, message: str) -> None:
        """Render an error message."""
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def welcome(self, message: str = "[bold]Welcome to crabshell[/bold]") -> None:
        """Render welcome message."""
        self.console.print(message)
        self.console.print()

    def get_user_input(self, prompt: str) -> str:
        """Prompt user for input."""
        with patch_stdout(raw=True):
            return self._session().prompt(prompt)

    def _session(self) -> PromptSession[str]:
        if self._prompt_session is None:
            self._prompt_session = PromptSession(
                history=self._history,
                completer=self._completer,
                auto_suggest=self._auto_suggest,
                complete_while_typing=False,
            )
        return self._prompt_session
