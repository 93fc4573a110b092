"""Enumerate the rotated backups that belong to a log file."""

import os
from dataclasses import dataclass
from datetime import datetime

from rollinglog.errors import DirectoryReadError, MalformedBackupName
from rollinglog.naming import COMPRESS_SUFFIX, decode_backup_name, split_filename


@dataclass(frozen=True)
class BackupInfo:
    name: str
    timestamp: datetime


def _decode_any(name: str, prefix: str, suffix: str) -> datetime | None:
    for candidate in (suffix, suffix + COMPRESS_SUFFIX):
        try:
            return decode_backup_name(name, prefix, candidate)
        except MalformedBackupName:
            continue
    return None


def list_backups(log_path: str) -> list[BackupInfo]:
    """Return backups of *log_path*, plain or compressed, newest first.

    Files whose names don't decode are not backups of this log and are
    skipped. Raises DirectoryReadError if the directory can't be listed.
    """
    log_dir = os.path.dirname(log_path) or "."
    prefix, suffix = split_filename(log_path)

    backups = []
    try:
        with os.scandir(log_dir) as entries:
            for entry in entries:
                if entry.is_dir():
                    continue
                ts = _decode_any(entry.name, prefix, suffix)
                if ts is not None:
                    backups.append(BackupInfo(entry.name, ts))
    except OSError as exc:
        raise DirectoryReadError(
            f"can't read log file directory {log_dir}: {exc}"
        ) from exc

    # Stable sort keeps discovery order for equal timestamps.
    backups.sort(key=lambda b: b.timestamp, reverse=True)
    return backups
