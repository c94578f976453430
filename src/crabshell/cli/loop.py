"""Interactive read-process-record loop."""

from __future__ import annotations

from loguru import logger

from crabshell.bootstrap import ShellRuntime
from crabshell.errors import CrabShellError
from crabshell.shell import CommandOutcome

from .render import Renderer


def run_shell(runtime: ShellRuntime, renderer: Renderer) -> None:
    """Read lines until ``exit`` or end of input."""
    session = runtime.session
    renderer.seed_history(runtime.history.commands())
    renderer.welcome()
    while not session.exit_requested:
        try:
            line = renderer.get_user_input(session.prompt())
        except KeyboardInterrupt:
            continue
        except EOFError:
            break
        process_line(runtime, renderer, line)
    renderer.info("Goodbye")


def process_line(runtime: ShellRuntime, renderer: Renderer, line: str) -> CommandOutcome | None:
    """Run one line and record it in history when it was accepted.

    The folder recorded is the one active when the line was entered, so a
    ``cd`` is remembered where it was typed.
    """
    folder = runtime.session.current_folder
    try:
        outcome = runtime.session.process_command(line)
    except (CrabShellError, OSError) as exc:
        logger.debug("shell.command_failed line={} error={}", line, exc)
        renderer.error(str(exc))
        return None

    if outcome.record:
        runtime.history.append(line.strip(), folder)
        renderer.add_history(line.strip())
    return outcome
