"""Gzip a rotated backup next to itself and drop exactly one of the two copies."""

import gzip
import logging
import os
import shutil

from rollinglog.errors import (
    CompressionError,
    CompressionWriteError,
    DestinationCreateError,
    LogIOError,
    SecondaryCleanupError,
    SourceMissingError,
    raise_if_any,
)
from rollinglog.naming import COMPRESS_SUFFIX

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


def _create_opener(path, flags):
    return os.open(path, flags, FILE_MODE)


class Compressor:
    """One-shot compression job for a single backup file.

    On success the source is removed and ``source + ".gz"`` remains. On a
    failed transform the partial destination is removed instead, so a
    truncated archive is never mistaken for a valid backup.
    """

    def __init__(self, source: str):
        self.source = source
        self.destination = source + COMPRESS_SUFFIX
        self._errors: list[Exception] = []
        self._src = None
        self._dst = None
        self._remove_after = None

    def compress(self) -> None:
        """Run the job. Raises MultiError listing every failure, primary first."""
        try:
            self._src = open(self.source, "rb")
        except FileNotFoundError as exc:
            self._fail(SourceMissingError(f"log for compress not found: {self.source}"), exc)
            return self._finish()
        except OSError as exc:
            self._fail(CompressionError(f"failed to open log for compress {self.source}: {exc}"), exc)
            return self._finish()

        try:
            self._dst = open(self.destination, "wb", opener=_create_opener)
        except OSError as exc:
            self._fail(DestinationCreateError(f"failed to create compressed log {self.destination}: {exc}"), exc)
            return self._finish()

        gz = None
        try:
            gz = gzip.GzipFile(filename="", mode="wb", fileobj=self._dst)
            shutil.copyfileobj(self._src, gz)
        except OSError as exc:
            self._remove_after = self.destination
            self._fail(CompressionWriteError(f"failed to write compressed log {self.destination}: {exc}"), exc)
            if gz is not None:
                self._close_stream(gz)
            return self._finish()

        try:
            gz.close()
            self._dst.flush()
        except OSError as exc:
            self._remove_after = self.destination
            self._fail(CompressionWriteError(f"failed to finalize gzip stream for {self.destination}: {exc}"), exc)
            return self._finish()

        self._remove_after = self.source
        return self._finish()

    def _fail(self, error: Exception, cause: BaseException) -> None:
        error.__cause__ = cause
        self._errors.append(error)

    def _close_stream(self, gz: gzip.GzipFile) -> None:
        # The destination is removed afterwards; only the handle matters here.
        try:
            gz.close()
        except OSError as exc:
            self._fail(LogIOError("close", self.destination, str(exc)), exc)

    def _finish(self) -> None:
        for path, handle in ((self.source, self._src), (self.destination, self._dst)):
            if handle is None:
                continue
            try:
                handle.close()
            except OSError as exc:
                self._fail(LogIOError("close", path, str(exc)), exc)

        if self._remove_after is not None:
            try:
                os.remove(self._remove_after)
            except OSError as exc:
                self._fail(SecondaryCleanupError(f"failed to remove {self._remove_after}: {exc}"), exc)

        raise_if_any(self._errors)
        logger.debug("Compressed %s -> %s", self.source, self.destination)


def compress_file(filepath: str) -> str:
    """Gzip-compress a backup in place. Returns the .gz path."""
    job = Compressor(filepath)
    job.compress()
    return job.destination
