"""Home, config folder and prompt path helpers."""

from __future__ import annotations

import ntpath
import os
import sys
from collections.abc import Mapping
from pathlib import Path

IS_WINDOWS = sys.platform.startswith("win")
PATH_SEP = "\\" if IS_WINDOWS else "/"
CONFIG_DIR_NAME = ".crabshell"


def get_home(environ: Mapping[str, str] | None = None, *, windows: bool = IS_WINDOWS) -> str:
    """Resolve the home directory from the environment.

    ``HOME`` wins everywhere. On Windows ``USERPROFILE`` and then
    ``HOMEDRIVE``/``HOMEPATH`` are tried. The filesystem root is the last resort.
    """
    env = os.environ if environ is None else environ
    sep = "\\" if windows else "/"
    home = env.get("HOME", "")
    if home:
        return home
    if windows:
        profile = env.get("USERPROFILE", "")
        if profile:
            return profile
        drive = env.get("HOMEDRIVE", "")
        if drive:
            return drive + env.get("HOMEPATH", "")
    return sep


def default_config_folder(environ: Mapping[str, str] | None = None) -> Path:
    return Path(get_home(environ)) / CONFIG_DIR_NAME


def starts_with(text: str, prefix: str, *, ignore_case: bool = False) -> bool:
    if ignore_case:
        return text.lower().startswith(prefix.lower())
    return text.startswith(prefix)


def collapse_home(path: str, home: str) -> str:
    """Show ``path`` relative to ``home`` as ``~``-prefixed when it lives below it."""
    home = home.rstrip("/\\")
    if not home or home in ("/", "\\"):
        return path
    if path == home:
        return "~"
    for sep in ("/", "\\"):
        if path.startswith(home + sep):
            return "~" + sep + path[len(home) + 1 :]
    return path


def abbreviate_path(path: str, max_len: int, *, sep: str = PATH_SEP) -> str:
    """Shorten ``path`` to roughly ``max_len`` characters.

    The last folder is always kept whole; leading folders are cut down to their
    first letter, right to left, once the accumulated length would exceed the
    budget left after reserving two characters per folder.
    """
    if len(path) <= max_len:
        return path

    drive, rest = ntpath.splitdrive(path) if sep == "\\" else ("", path)
    anchor = sep if rest.startswith(sep) else ""
    folders = [part for part in rest.split(sep) if part]
    if not folders:
        return path

    budget = max_len - (len(folders) - 1) * 2
    if budget <= 3:
        budget = 5

    result = folders[-1]
    for folder in reversed(folders[:-1]):
        if len(result) + len(folder) > budget:
            folder = folder[:1]
        result = folder + sep + result
    return drive + anchor + result
