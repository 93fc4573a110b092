"""Size-bounded log writer with rename-and-create rotation."""

import logging
import os
import threading
from datetime import timedelta

from rollinglog.config import Config
from rollinglog.errors import LogIOError, MultiError, OversizedWriteError
from rollinglog.naming import (
    COMPRESS_SUFFIX,
    clock_for,
    encode_backup_name,
    split_filename,
)
from rollinglog.sweeper import Sweeper

logger = logging.getLogger(__name__)

DIR_MODE = 0o755
FILE_MODE = 0o644


def _file_opener(path, flags):
    return os.open(path, flags, FILE_MODE)


def _size_exceeded(size: int, limit: int) -> bool:
    # A limit of 0 means the file is never rotated.
    return limit > 0 and size > limit


def _io_error(op: str, path: str, exc: OSError) -> LogIOError:
    err = LogIOError(op, path, str(exc))
    err.__cause__ = exc
    return err


class RollingWriter:
    """Thread-safe byte sink that rotates its file before it grows past
    ``config.max_bytes`` and hands old segments to a background Sweeper.
    """

    def __init__(self, config: Config, time_func=None):
        self._config = config
        self._filepath = config.filename
        self._time_func = time_func or clock_for(config.localtime)
        self._lock = threading.Lock()
        self._file = None
        self._size = 0
        self._sweeper = Sweeper(
            config.filename,
            max_backups=config.max_backups,
            max_age_days=config.max_age_days,
            compress=config.compress,
            error_handler=config.error_handler,
            time_func=self._time_func,
        )

    @property
    def filename(self) -> str:
        return self._filepath

    @property
    def size(self) -> int:
        with self._lock:
            return self._size

    @property
    def sweeping(self) -> bool:
        return self._sweeper.running

    def write(self, data: bytes) -> int:
        """Append *data* to the active file, rotating first if it would overflow.

        Returns the number of bytes written.
        """
        with self._lock:
            length = len(data)
            limit = self._config.max_bytes

            if _size_exceeded(length, limit):
                raise OversizedWriteError(length, limit)

            if self._file is None:
                self._open_or_create(length)

            if _size_exceeded(self._size + length, limit):
                self._close()
                self._rotate()
                self._create()

            try:
                self._file.write(data)
                self._file.flush()
            except OSError as exc:
                self._abandon(_io_error("write", self._filepath, exc))
            self._size += length
            return length

    def close(self) -> None:
        """Drain any running sweep, then sync and close the active file.

        Calling close on an already closed writer does nothing.
        """
        with self._lock:
            self._sweeper.shutdown()
            self._close()

    def wait_for_sweep(self, timeout: float | None = None) -> None:
        """Block until the background sweep, if any, has finished."""
        self._sweeper.wait(timeout)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # Internal helpers (caller holds self._lock)

    def _create(self) -> None:
        log_dir = os.path.dirname(self._filepath)
        if log_dir:
            try:
                os.makedirs(log_dir, mode=DIR_MODE, exist_ok=True)
            except OSError as exc:
                raise _io_error("make directories for", log_dir, exc) from exc
        try:
            self._file = open(self._filepath, "wb", opener=_file_opener)
        except OSError as exc:
            raise _io_error("create", self._filepath, exc) from exc
        self._size = 0

    def _open_or_create(self, pending: int) -> None:
        try:
            current = os.stat(self._filepath).st_size
        except FileNotFoundError:
            self._create()
            return
        except OSError as exc:
            raise _io_error("stat", self._filepath, exc) from exc

        if _size_exceeded(current + pending, self._config.max_bytes):
            self._rotate()
            self._create()
            return

        try:
            self._file = open(self._filepath, "ab", opener=_file_opener)
        except OSError as exc:
            raise _io_error("open", self._filepath, exc) from exc
        self._size = current

    def _close(self) -> None:
        f, self._file = self._file, None
        self._size = 0
        if f is None:
            return

        errors = []
        try:
            f.flush()
            os.fsync(f.fileno())
        except OSError as exc:
            errors.append(_io_error("sync", self._filepath, exc))
        try:
            f.close()
        except OSError as exc:
            errors.append(_io_error("close", self._filepath, exc))
        if errors:
            raise MultiError(errors)

    def _abandon(self, err: LogIOError) -> None:
        """Drop the handle after a failed write and raise *err*.

        Part of the data may already be on disk, so the size counter is no
        longer trusted; the next write re-stats the file.
        """
        try:
            self._close()
        except MultiError as close_err:
            raise MultiError([err, *close_err.errors]) from err.__cause__
        raise err from err.__cause__

    def _backup_path(self) -> str:
        log_dir = os.path.dirname(self._filepath)
        prefix, suffix = split_filename(self._filepath)
        ts = self._time_func()
        while True:
            path = os.path.join(log_dir, encode_backup_name(prefix, suffix, ts))
            if not os.path.exists(path) and not os.path.exists(path + COMPRESS_SUFFIX):
                return path
            ts += timedelta(milliseconds=1)

    def _rotate(self) -> None:
        backup = self._backup_path()
        try:
            os.replace(self._filepath, backup)
        except OSError as exc:
            raise _io_error("rename", self._filepath, exc) from exc
        logger.info("Rotated %s -> %s", self._filepath, backup)
        self._sweeper.trigger()
