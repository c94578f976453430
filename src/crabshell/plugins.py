"""Plugin discovery and fault-isolated hook dispatch."""

from __future__ import annotations

import sys
from importlib import util as importlib_util
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

import pluggy
from loguru import logger

from crabshell.hookspecs import CRABSHELL_HOOK_NAMESPACE, CrabShellHookSpecs

if TYPE_CHECKING:
    from crabshell.commands import CommandRegistry
    from crabshell.shell import ShellSession

PLUGIN_ATTRIBUTE = "plugin"
PLUGIN_MODULE_PREFIX = "crabshell_plugin_"


class PluginHost:
    """Owns the pluggy manager; a failing plugin is logged and skipped."""

    def __init__(self) -> None:
        self._plugin_manager = pluggy.PluginManager(CRABSHELL_HOOK_NAMESPACE)
        self._plugin_manager.add_hookspecs(CrabShellHookSpecs)
        self._failed: dict[str, str] = {}

    @property
    def plugin_names(self) -> list[str]:
        return sorted(name for name, _ in self._plugin_manager.list_name_plugin() if name is not None)

    @property
    def failed_plugins(self) -> dict[str, str]:
        return dict(self._failed)

    def register(self, plugin: object, name: str | None = None) -> None:
        self._plugin_manager.register(plugin, name=name)

    def load(self, plugins_dir: Path | None = None, *, entry_points: bool = True) -> None:
        """Register plugins from the ``crabshell`` entry-point group and ``plugins_dir``."""
        if entry_points:
            try:
                count = self._plugin_manager.load_setuptools_entrypoints(CRABSHELL_HOOK_NAMESPACE)
            except Exception as exc:
                self._failed["entry-points"] = str(exc)
                logger.opt(exception=True).warning("plugin.entry_points_failed")
            else:
                logger.debug("plugin.entry_points_loaded count={}", count)

        if plugins_dir is None or not plugins_dir.is_dir():
            return
        for plugin_file in sorted(plugins_dir.glob("*.py")):
            name = f"file:{plugin_file.stem}"
            try:
                module = _load_module_from_file(plugin_file)
                self.register(getattr(module, PLUGIN_ATTRIBUTE, module), name=name)
            except Exception as exc:
                self._failed[name] = str(exc)
                logger.opt(exception=True).warning("plugin.load_failed file={}", plugin_file)
            else:
                logger.info("plugin.loaded name={}", name)

    def register_commands(self, registry: CommandRegistry) -> None:
        for impl in self._iter_hookimpls("register_commands"):
            try:
                impl.function(**self._kwargs_for_impl(impl, {"registry": registry}))
            except Exception:
                logger.opt(exception=True).warning("plugin.register_commands_failed plugin={}", impl.plugin_name)

    def run_command(self, args: list[str], shell: ShellSession) -> bool:
        """Offer ``args`` to each plugin, newest registration first, until one handles it."""
        for impl in self._iter_hookimpls("run_command"):
            try:
                handled = impl.function(**self._kwargs_for_impl(impl, {"args": args, "shell": shell}))
            except Exception:
                logger.opt(exception=True).warning("plugin.run_command_failed plugin={}", impl.plugin_name)
                continue
            if handled:
                logger.debug("plugin.handled plugin={} command={}", impl.plugin_name, args[0] if args else "")
                return True
        return False

    def _iter_hookimpls(self, hook_name: str) -> list[Any]:
        hook = getattr(self._plugin_manager.hook, hook_name, None)
        if hook is None or not hasattr(hook, "get_hookimpls"):
            return []
        return list(reversed(hook.get_hookimpls()))

    @staticmethod
    def _kwargs_for_impl(impl: Any, kwargs: dict[str, Any]) -> dict[str, Any]:
        return {name: kwargs[name] for name in impl.argnames if name in kwargs}


def _load_module_from_file(plugin_file: Path) -> ModuleType:
    module_name = f"{PLUGIN_MODULE_PREFIX}{plugin_file.stem}"
    spec = importlib_util.spec_from_file_location(module_name, plugin_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot import plugin from {plugin_file}")
    module = importlib_util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    return module
