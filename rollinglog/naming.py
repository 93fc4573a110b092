"""Backup filename codec: rotation timestamps embedded in file names."""

import os
import re
from datetime import datetime, timedelta, timezone

from rollinglog.errors import MalformedBackupName

# YYYYMMDDHHMMSS.mmm
BACKUP_TIME_FORMAT = "%Y%m%d%H%M%S"
BACKUP_TIME_WIDTH = 18
COMPRESS_SUFFIX = ".gz"

# ASCII digits only.
_STAMP_RE = re.compile(r"[0-9]{14}\.[0-9]{3}")


def utc_now() -> datetime:
    """Current UTC wall-clock time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_now() -> datetime:
    return datetime.now()


def clock_for(localtime: bool):
    """Return the clock used for rotation timestamps and age cutoffs."""
    return local_now if localtime else utc_now


def split_filename(path: str) -> tuple[str, str]:
    """Split a log path into (prefix, suffix) around the timestamp slot.

    >>> split_filename("/var/log/app.log")
    ('app.', '.log')
    """
    name = os.path.basename(path)
    dot = name.rfind(".")
    suffix = name[dot:] if dot >= 0 else ""
    return name[: len(name) - len(suffix)] + ".", suffix


def format_timestamp(ts: datetime) -> str:
    return ts.strftime(BACKUP_TIME_FORMAT) + f".{ts.microsecond // 1000:03d}"


def encode_backup_name(prefix: str, suffix: str, ts: datetime) -> str:
    return f"{prefix}{format_timestamp(ts)}{suffix}"


def decode_backup_name(filename: str, prefix: str, suffix: str) -> datetime:
    """Extract the rotation timestamp from *filename*.

    Raises MalformedBackupName when the name does not have the shape
    ``prefix + YYYYMMDDHHMMSS.mmm + suffix``.
    """
    if not filename.startswith(prefix):
        raise MalformedBackupName(f"{filename}: prefix mismatch")
    if not filename.endswith(suffix):
        raise MalformedBackupName(f"{filename}: suffix mismatch")
    if len(filename) - len(prefix) - len(suffix) != BACKUP_TIME_WIDTH:
        raise MalformedBackupName(f"{filename}: no timestamp field")

    stamp = filename[len(prefix): len(filename) - len(suffix)]
    if not _STAMP_RE.fullmatch(stamp):
        raise MalformedBackupName(f"{filename}: bad timestamp {stamp!r}")
    try:
        ts = datetime.strptime(stamp[:14], BACKUP_TIME_FORMAT)
        return ts + timedelta(milliseconds=int(stamp[15:]))
    except ValueError as exc:
        raise MalformedBackupName(f"{filename}: bad timestamp {stamp!r}") from exc


def truncate_to_millis(ts: datetime) -> datetime:
    return ts.replace(microsecond=ts.microsecond // 1000 * 1000)
