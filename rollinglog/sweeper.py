"""Background retention: age/count purge and compression of rotated backups."""

import logging
import os
import threading
from datetime import timedelta

from rollinglog.compressor import Compressor
from rollinglog.config import discard_error
from rollinglog.errors import DirectoryReadError, LogIOError, RollingLogError
from rollinglog.naming import COMPRESS_SUFFIX, utc_now
from rollinglog.scanner import list_backups

logger = logging.getLogger(__name__)


class Sweeper:
    """Runs at most one retention pass at a time in a worker thread.

    ``trigger()`` is called by the writer after each rotation. Each pass
    rescans the directory, so a trigger that arrives while a sweep is
    running only asks that sweep to look once more before it stops.
    Errors never leave the worker; they are handed to ``error_handler``.
    """

    def __init__(
        self,
        log_path: str,
        max_backups: int = 0,
        max_age_days: int = 0,
        compress: bool = False,
        error_handler=None,
        time_func=None,
    ):
        self._log_path = log_path
        self._max_backups = max_backups
        self._max_age_days = max_age_days
        self._compress = compress
        self._error_handler = error_handler or discard_error
        self._time_func = time_func or utc_now

        self._lock = threading.Lock()
        self._shutdown = threading.Event()
        self._thread: threading.Thread | None = None
        self._pending = False

    @property
    def enabled(self) -> bool:
        return bool(self._max_age_days or self._max_backups or self._compress)

    @property
    def running(self) -> bool:
        with self._lock:
            return self._thread is not None

    # Public API

    def trigger(self) -> None:
        """Start a sweep unless one is running or no policy is configured."""
        if not self.enabled:
            return
        with self._lock:
            if self._thread is not None:
                self._pending = True
                return
            self._pending = False
            self._thread = threading.Thread(
                target=self._run, name="rollinglog-sweep", daemon=True
            )
            self._thread.start()

    def wait(self, timeout: float | None = None) -> None:
        """Block until the current sweep, if any, has finished."""
        with self._lock:
            thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def shutdown(self) -> None:
        """Ask a running sweep to stop at its next checkpoint and wait for it."""
        with self._lock:
            thread = self._thread
        if thread is None:
            return
        self._shutdown.set()
        thread.join()
        self._shutdown.clear()

    def collect_files_for_sweep(self) -> tuple[list[str], list[str]]:
        """Decide which backups to remove and which to compress right now.

        Raises DirectoryReadError if the log directory can't be listed.
        """
        backups = list_backups(self._log_path)
        log_dir = os.path.dirname(self._log_path)
        for_remove: list[str] = []
        for_compress: list[str] = []

        # Backups are newest first, so expired ones sit at the tail.
        if self._max_age_days > 0:
            cutoff = self._time_func() - timedelta(days=self._max_age_days)
            while backups and backups[-1].timestamp < cutoff:
                for_remove.append(os.path.join(log_dir, backups.pop().name))

        if self._max_backups > 0:
            while len(backups) > self._max_backups:
                for_remove.append(os.path.join(log_dir, backups.pop().name))

        # Compressing removes the plain file, so a .gz backup is never also
        # queued under its plain name.
        if self._compress:
            for_compress = [
                os.path.join(log_dir, b.name)
                for b in backups
                if not b.name.endswith(COMPRESS_SUFFIX)
            ]

        return for_remove, for_compress

    # Internal helpers

    def _run(self) -> None:
        try:
            self._sweep()
        finally:
            with self._lock:
                if self._thread is threading.current_thread():
                    self._thread = None

    def _sweep(self) -> None:
        while not self._shutdown.is_set():
            with self._lock:
                self._pending = False

            try:
                for_remove, for_compress = self.collect_files_for_sweep()
            except DirectoryReadError as exc:
                self._report(exc)
                return

            if not for_remove and not for_compress:
                with self._lock:
                    if not self._pending:
                        self._thread = None
                        return
                continue

            for path in for_remove:
                try:
                    os.remove(path)
                    logger.info("Purged backup %s", path)
                except OSError as exc:
                    err = LogIOError("remove", path, str(exc))
                    err.__cause__ = exc
                    self._report(err)

            for path in for_compress:
                if self._shutdown.is_set():
                    break
                try:
                    Compressor(path).compress()
                except RollingLogError as exc:
                    # Retried on the next rotation rather than hammered now.
                    self._report(exc)
                    return
                logger.info("Compressed backup %s", path)

    def _report(self, err: Exception) -> None:
        logger.warning("Sweep of %s failed: %s", self._log_path, err)
        try:
            self._error_handler(err)
        except Exception:
            logger.exception("Error handler failed for %s", self._log_path)
