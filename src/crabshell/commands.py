"""Builtin command handlers and their registry."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from loguru import logger

from crabshell.errors import CommandError

if TYPE_CHECKING:
    from crabshell.shell import ShellSession

DEFAULT_HISTORY_LINES = 20


class CommandHandler(Protocol):
    """A named command the shell runs in-process."""

    name: str
    help: str

    def invoke(self, args: list[str], shell: ShellSession) -> bool: ...


@dataclass(frozen=True)
class FunctionCommand:
    """Adapter turning a plain function into a :class:`CommandHandler`."""

    name: str
    help: str
    func: Callable[[list[str], ShellSession], bool]

    def invoke(self, args: list[str], shell: ShellSession) -> bool:
        return self.func(args, shell)


class CommandRegistry:
    """Registry for builtin and plugin-provided command handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}

    def register(self, handler: CommandHandler) -> None:
        if handler.name in self._handlers:
            logger.debug("command.replaced name={}", handler.name)
        self._handlers[handler.name] = handler

    def has(self, name: str) -> bool:
        return name in self._handlers

    def get(self, name: str) -> CommandHandler | None:
        return self._handlers.get(name)

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def handlers(self) -> list[CommandHandler]:
        return [self._handlers[name] for name in self.names()]

    def invoke(self, args: list[str], shell: ShellSession) -> bool:
        """Run the handler named by ``args[0]``; ``False`` when there is none."""
        if not args:
            return False
        handler = self._handlers.get(args[0])
        if handler is None:
            return False
        logger.debug("command.builtin name={} args={}", handler.name, args[1:])
        return handler.invoke(args, shell)


def _exit(args: list[str], shell: ShellSession) -> bool:
    shell.request_exit()
    return True


def _cd(args: list[str], shell: ShellSession) -> bool:
    shell.change_dir(args[1] if len(args) > 1 else "~")
    return True


def _pushd(args: list[str], shell: ShellSession) -> bool:
    if len(args) < 2:
        raise CommandError("pushd: missing directory")
    shell.change_dir(args[1], push=True)
    return True


def _popd(args: list[str], shell: ShellSession) -> bool:
    if not shell.pop_dir():
        raise CommandError("popd: directory stack empty")
    return True


def _dirs(args: list[str], shell: ShellSession) -> bool:
    for folder in [shell.current_folder, *reversed(shell.dir_stack)]:
        shell.echo(folder)
    return True


def _set(args: list[str], shell: ShellSession) -> bool:
    if len(args) == 1:
        for name in sorted(os.environ):
            shell.echo(f"{name}={os.environ[name]}")
        return True
    name, sep, value = args[1].partition("=")
    if not sep or not name:
        raise CommandError("set: expected NAME=value")
    os.environ[name] = value
    logger.debug("command.set name={}", name)
    return True


def _alias(args: list[str], shell: ShellSession) -> bool:
    if len(args) == 1:
        for name in sorted(shell.aliases):
            shell.echo(f"{name}={shell.aliases[name]}")
        return True
    definition = " ".join(args[1:])
    name, sep, value = definition.partition("=")
    if not sep:
        if name not in shell.aliases:
            raise CommandError(f"alias: {name} not found")
        shell.echo(f"{name}={shell.aliases[name]}")
        return True
    if not name:
        raise CommandError("alias: expected name=command")
    shell.aliases[name] = value
    return True


def _history(args: list[str], shell: ShellSession) -> bool:
    count = DEFAULT_HISTORY_LINES
    if len(args) > 1:
        try:
            count = int(args[1])
        except ValueError as exc:
            raise CommandError(f"history: not a number: {args[1]}") from exc
    total = len(shell.history)
    for index in range(max(0, total - count), total):
        item = shell.history.get(index)
        shell.echo(f"{index:5d}  {item.timestamp}  {item.command}")
    return True


def _help(args: list[str], shell: ShellSession) -> bool:
    for handler in shell.registry.handlers():
        shell.echo(f"{handler.name:<10} {handler.help}")
    return True


BUILTIN_COMMANDS: tuple[FunctionCommand, ...] = (
    FunctionCommand("exit", "Leave the shell", _exit),
    FunctionCommand("quit", "Leave the shell", _exit),
    FunctionCommand("cd", "Change directory, home when no argument", _cd),
    FunctionCommand("pushd", "Change directory and remember the current one", _pushd),
    FunctionCommand("popd", "Return to the last pushed directory", _popd),
    FunctionCommand("dirs", "Show the directory stack", _dirs),
    FunctionCommand("set", "Set NAME=value in the environment, list it without arguments", _set),
    FunctionCommand("alias", "Define name=command or list aliases", _alias),
    FunctionCommand("history", "Show the last N history entries", _history),
    FunctionCommand("help", "List builtin commands", _help),
)


def create_registry() -> CommandRegistry:
    registry = CommandRegistry()
    for command in BUILTIN_COMMANDS:
        registry.register(command)
    return registry
