"""Persistent, folder-scoped command history."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from loguru import logger

from crabshell.errors import HistoryIndexError
from crabshell.lock import DEFAULT_POLL_SECONDS, DEFAULT_TIMEOUT_SECONDS, FileLock

HISTORY_HEADER = "History:"
CMD_KEY = "- Cmd:"
DATE_KEY = "Date:"
FOLDER_KEY = "Folder:"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

GLOBAL_DEDUP_WINDOW = 50
FOLDER_DEDUP_WINDOW = 20


@dataclass(frozen=True)
class HistoryItem:
    """One executed command line."""

    command: str
    timestamp: str
    folder: str = ""

    def to_record(self) -> str:
        return f"{CMD_KEY} {self.command}\n  {DATE_KEY} '{self.timestamp}'\n  {FOLDER_KEY} {self.folder}\n"


def format_timestamp(moment: datetime | None = None) -> str:
    return (moment or datetime.now()).strftime(TIMESTAMP_FORMAT)


class HistoryStore:
    """Append-mostly history log indexed by folder.

    The in-memory view is always updated before the backing file is written,
    so readers in this process never see less than what is on disk.
    """

    def __init__(
        self,
        lock_folder: Path | None = None,
        *,
        lock_timeout: float = DEFAULT_TIMEOUT_SECONDS,
        lock_poll: float = DEFAULT_POLL_SECONDS,
    ) -> None:
        self._items: list[HistoryItem] = []
        self._by_folder: dict[str, list[HistoryItem]] = {}
        self._no_folder: list[HistoryItem] = []
        self._path: Path | None = None
        self._lock_folder = lock_folder
        self._lock_timeout = lock_timeout
        self._lock_poll = lock_poll

    @property
    def path(self) -> Path | None:
        return self._path

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[HistoryItem]:
        return iter(list(self._items))

    def __getitem__(self, index: int) -> HistoryItem:
        return self.get(index)

    def size(self) -> int:
        return len(self._items)

    def get(self, index: int) -> HistoryItem:
        if not 0 <= index < len(self._items):
            raise HistoryIndexError(f"history index {index} out of range 0..{len(self._items)}")
        return self._items[index]

    def commands(self) -> list[str]:
        return [item.command for item in self._items]

    def folder_items(self, folder: str) -> list[HistoryItem]:
        return list(self._by_folder.get(folder, ()))

    def no_folder_items(self) -> list[HistoryItem]:
        return list(self._no_folder)

    def folders(self) -> list[str]:
        return sorted(self._by_folder)

    def clear(self) -> None:
        self._items.clear()
        self._by_folder.clear()
        self._no_folder.clear()

    def load(self, path: Path) -> bool:
        """Replay the history file at ``path`` into memory.

        A missing file is created with just the header. Returns ``False`` when
        the header is absent or the file cannot be read, and when a truncated
        record ends a file holding no complete record.
        """
        self.clear()
        self._path = None
        if not path.exists():
            self._path = path
            try:
                path.write_text(f"{HISTORY_HEADER}\n", encoding="utf-8")
            except OSError as exc:
                logger.warning("history.create_failed path={} error={}", path, exc)
            return True

        try:
            lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as exc:
            logger.warning("history.read_failed path={} error={}", path, exc)
            return False

        remaining = iter(lines)
        if not any(line.rstrip() == HISTORY_HEADER for line in remaining):
            logger.warning("history.header_missing path={}", path)
            return False

        self._path = path
        complete = self._replay(remaining)
        logger.info("history.loaded path={} items={}", path, len(self._items))
        return complete or len(self._items) > 0

    def _replay(self, lines: Iterator[str]) -> bool:
        for line in lines:
            line = line.rstrip()
            if CMD_KEY not in line:
                continue
            command = _field_value(line, CMD_KEY)
            date_line = next(lines, None)
            folder_line = next(lines, None)
            if date_line is None or folder_line is None:
                logger.debug("history.truncated_record command={}", command)
                return False
            timestamp = _unquote(_field_value(date_line.rstrip(), DATE_KEY))
            folder = _field_value(folder_line.rstrip(), FOLDER_KEY)
            self._index(HistoryItem(command=command, timestamp=timestamp, folder=folder))
        return True

    def _index(self, item: HistoryItem) -> None:
        self._items.append(item)
        if item.folder:
            self._by_folder.setdefault(item.folder, []).append(item)
        else:
            self._no_folder.append(item)

    def append(
        self,
        command: str,
        folder: str = "",
        timestamp: str | None = None,
        persist: bool = True,
    ) -> bool:
        """Record ``command`` run in ``folder``.

        Repeats of the most recent entry are skipped; an older repeat inside
        the lookback window moves to the end instead of duplicating. Returns
        whether the global list grew, which also decides the file write.
        """
        item = HistoryItem(command=command, timestamp=timestamp or format_timestamp(), folder=folder)

        added = _move_to_end(self._items, item, GLOBAL_DEDUP_WINDOW)
        folder_list = self._by_folder.setdefault(folder, []) if folder else self._no_folder
        _move_to_end(folder_list, item, FOLDER_DEDUP_WINDOW)

        if persist and added and self._path is not None:
            self._write_record(self._path, item)
        return added

    def _write_record(self, path: Path, item: HistoryItem) -> None:
        lock_folder = self._lock_folder or path.parent
        with FileLock(
            path,
            lock_folder,
            timeout=self._lock_timeout,
            poll_interval=self._lock_poll,
        ) as lock:
            if not lock.has_lock:
                logger.warning("history.lock_timeout path={} skipped={}", path, item.command)
                return
            try:
                with path.open("a", encoding="utf-8") as handle:
                    handle.write(item.to_record())
            except OSError as exc:
                logger.warning("history.write_failed path={} error={}", path, exc)


def _move_to_end(items: list[HistoryItem], item: HistoryItem, window: int) -> bool:
    last = len(items) - 1
    for index in range(last, max(0, len(items) - window) - 1, -1):
        if items[index].command != item.command:
            continue
        if index == last:
            return False
        logger.debug("history.evicted command={} index={}", item.command, index)
        del items[index]
        break
    items.append(item)
    return True


def _field_value(line: str, key: str) -> str:
    position = line.find(key)
    if position < 0:
        return ""
    value = line[position + len(key) :]
    return value[1:] if value.startswith(" ") else value


def _unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith("'") and value.endswith("'"):
        return value[1:-1]
    return value
