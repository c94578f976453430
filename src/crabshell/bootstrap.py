"""Runtime bootstrap helpers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import typer
from loguru import logger

from crabshell.commands import create_registry
from crabshell.completion import PathCompleter
from crabshell.config import Settings, setup_config_folder
from crabshell.errors import CommandError
from crabshell.executor import Executor
from crabshell.hints import HintProvider
from crabshell.history import HistoryStore
from crabshell.plugins import PluginHost
from crabshell.shell import ShellSession


@dataclass(frozen=True)
class ShellRuntime:
    """Everything one shell process needs, wired together."""

    settings: Settings
    history: HistoryStore
    session: ShellSession
    completer: PathCompleter
    hints: HintProvider


def build_runtime(
    settings: Settings,
    *,
    executor: Executor | None = None,
    output: Callable[[str], None] = typer.echo,
) -> ShellRuntime:
    """Build the shell runtime for one process.

    An unreadable history file leaves the session with an empty history
    instead of aborting start-up.
    """

    config_folder = setup_config_folder(settings)
    history = HistoryStore(config_folder, lock_timeout=settings.lock_timeout, lock_poll=settings.lock_poll)
    if not history.load(settings.history_path):
        logger.warning("history.unusable path={} starting with empty history", settings.history_path)

    registry = create_registry()
    plugins = PluginHost()
    if settings.plugins_enabled:
        plugins.load(settings.plugins_path)
        plugins.register_commands(registry)

    session = ShellSession(settings, history, registry=registry, plugins=plugins, executor=executor, output=output)
    if settings.start_dir is not None:
        try:
            session.change_dir(str(settings.start_dir))
        except CommandError as exc:
            logger.warning("shell.start_dir_failed dir={} error={}", settings.start_dir, exc)

    return ShellRuntime(
        settings=settings,
        history=history,
        session=session,
        completer=PathCompleter(),
        hints=HintProvider(history, min_interval=settings.hint_delay),
    )
