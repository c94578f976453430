"""Pluggy hook namespace and shell hook specifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from crabshell.commands import CommandRegistry
    from crabshell.shell import ShellSession

CRABSHELL_HOOK_NAMESPACE = "crabshell"
hookspec = pluggy.HookspecMarker(CRABSHELL_HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(CRABSHELL_HOOK_NAMESPACE)


class CrabShellHookSpecs:
    """Hook contract for crabshell plugins."""

    @hookspec
    def register_commands(self, registry: CommandRegistry) -> None:
        """Register extra command handlers at startup."""

    @hookspec(firstresult=True)
    def run_command(self, args: list[str], shell: ShellSession) -> bool | None:
        """Handle a plain command not claimed by a builtin; return True when handled."""
