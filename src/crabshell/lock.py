"""Advisory sentinel-file lock shared by crabshell processes."""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from pathlib import Path
from types import TracebackType

from loguru import logger

LOCK_SUFFIX = ".lck"
DEFAULT_TIMEOUT_SECONDS = 1.0
DEFAULT_POLL_SECONDS = 0.02


class FileLock:
    """Cooperative lock signalled by the existence of ``<name>.lck``.

    The sentinel lives in the config folder and is named after the guarded
    file. Only processes following the same protocol are excluded.
    """

    def __init__(
        self,
        guarded_file: str | Path,
        lock_folder: Path,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        poll_interval: float = DEFAULT_POLL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.path = lock_folder / f"{Path(guarded_file).name}{LOCK_SUFFIX}"
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep
        self._has_lock = False

    @property
    def has_lock(self) -> bool:
        return self._has_lock

    def acquire(self) -> bool:
        """Wait for the sentinel to disappear, then create it.

        Returns ``False`` once the timeout is exceeded or the sentinel cannot
        be created at all; the caller should then skip the guarded write.
        """
        if self._has_lock:
            return True
        started = self._clock()
        while True:
            try:
                fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                if self._clock() - started > self._timeout:
                    logger.warning("lock.timeout path={} waited={:.2f}s", self.path, self._timeout)
                    return False
                self._sleep(self._poll_interval)
                continue
            except OSError as exc:
                logger.warning("lock.failed path={} error={}", self.path, exc)
                return False
            self._has_lock = True
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(f"Locked by {os.getpid()}\n")
            except OSError as exc:
                logger.debug("lock.owner_not_written path={} error={}", self.path, exc)
            return True

    def release(self) -> None:
        if not self._has_lock:
            return
        self._has_lock = False
        self.path.unlink(missing_ok=True)

    def __enter__(self) -> FileLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()
