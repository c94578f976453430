"""Shell session: working directory, aliases and command dispatch."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import typer
from loguru import logger

from crabshell.commands import CommandRegistry, create_registry
from crabshell.config import Settings
from crabshell.errors import CommandError
from crabshell.executor import Executor, SubprocessExecutor
from crabshell.history import HistoryStore
from crabshell.parsing import QUOTE, Plain, Token, parse_line, render_command, tokenize, validate_command
from crabshell.paths import IS_WINDOWS, abbreviate_path, collapse_home, get_home
from crabshell.plugins import PluginHost

PROMPT_SUFFIX = "> "


@dataclass(frozen=True)
class CommandOutcome:
    """What happened to one input line."""

    handled: bool
    record: bool
    exit_requested: bool = False
    status: int = 0


class ShellSession:
    """State and dispatch for one interactive session."""

    def __init__(
        self,
        settings: Settings,
        history: HistoryStore,
        *,
        registry: CommandRegistry | None = None,
        plugins: PluginHost | None = None,
        executor: Executor | None = None,
        output: Callable[[str], None] = typer.echo,
    ) -> None:
        self.settings = settings
        self.history = history
        self.registry = registry or create_registry()
        self.plugins = plugins or PluginHost()
        self.executor = executor or SubprocessExecutor()
        self.aliases: dict[str, str] = dict(settings.aliases)
        self.dir_stack: list[str] = []
        self._output = output
        self._exit_requested = False

    @property
    def exit_requested(self) -> bool:
        return self._exit_requested

    @property
    def current_folder(self) -> str:
        return os.getcwd()

    def request_exit(self) -> None:
        self._exit_requested = True

    def echo(self, message: str) -> None:
        self._output(message)

    def change_dir(self, target: str, *, push: bool = False) -> None:
        folder = self._expand_home(target.replace(QUOTE, ""))
        previous = self.current_folder
        if not os.path.isdir(folder):
            raise CommandError(f"Directory {target} does not exist")
        try:
            os.chdir(folder)
        except OSError as exc:
            raise CommandError(f"cannot change directory to: {target}") from exc
        if push:
            self.dir_stack.append(previous)
        logger.debug("shell.cd from={} to={}", previous, self.current_folder)

    def pop_dir(self) -> bool:
        if not self.dir_stack:
            return False
        folder = self.dir_stack.pop()
        try:
            os.chdir(folder)
        except OSError as exc:
            raise CommandError(f"cannot change directory to: {folder}") from exc
        return True

    def prompt(self) -> str:
        display = collapse_home(self.current_folder, get_home())
        return abbreviate_path(display, self.settings.max_prompt) + PROMPT_SUFFIX

    def process_command(self, line: str) -> CommandOutcome:
        """Classify and run one input line.

        Plain commands go through alias substitution, environment expansion,
        builtins and plugins before reaching the executor; pipes and
        redirections go to the executor as one rebuilt line. Raises
        :class:`~crabshell.errors.CrabShellError` subclasses for malformed
        operator lines and failing builtins.
        """
        if not line.strip():
            return CommandOutcome(handled=False, record=False)

        parsed = parse_line(line, strip_quotes=False)
        command = parsed.command
        validate_command(command)

        if not isinstance(command, Plain):
            logger.debug("shell.dispatch kind={} line={}", command.kind.value, line)
            status = self.executor.run(render_command(command), Path(self.current_folder))
            return CommandOutcome(handled=True, record=True, status=status)

        if IS_WINDOWS and _is_drive(command.tokens):
            self.change_dir(command.tokens[0].text + os.sep)
            return CommandOutcome(handled=True, record=True)

        tokens = [_expand_env(token) for token in self._substitute_alias(list(command.tokens))]
        if not tokens:
            return CommandOutcome(handled=False, record=True)
        args = [token.text.replace(QUOTE, "") for token in tokens]
        if self.registry.invoke(args, self) or self.plugins.run_command(args, self):
            exiting = self._exit_requested
            return CommandOutcome(handled=True, record=not exiting, exit_requested=exiting)

        status = self.executor.run(render_command(Plain(tuple(tokens))), Path(self.current_folder))
        return CommandOutcome(handled=True, record=True, status=status)

    def _substitute_alias(self, tokens: list[Token]) -> list[Token]:
        if not tokens or tokens[0].has_quotes:
            return tokens
        replacement = self.aliases.get(tokens[0].text)
        if replacement is None:
            return tokens
        start = tokens[0].start
        expanded = [Token(text=t.text, start=start, has_quotes=t.has_quotes) for t in tokenize(replacement, False)]
        logger.debug("shell.alias name={} value={}", tokens[0].text, replacement)
        return expanded + tokens[1:]

    @staticmethod
    def _expand_home(target: str) -> str:
        if target == "~" or target.startswith(("~/", "~\\")):
            return get_home() + target[1:]
        return target


def _expand_env(token: Token) -> Token:
    if token.has_quotes or ("$" not in token.text and "%" not in token.text):
        return token
    return Token(text=os.path.expandvars(token.text), start=token.start, has_quotes=token.has_quotes)


def _is_drive(tokens: tuple[Token, ...]) -> bool:
    return len(tokens) == 1 and len(tokens[0].text) == 2 and tokens[0].text[1] == ":" and tokens[0].text[0].isalpha()
