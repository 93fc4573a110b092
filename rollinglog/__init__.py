"""Size/age-bounded rotating log writer."""

from rollinglog.config import Config, load_config, load_yaml_config
from rollinglog.errors import (
    CompressionError,
    DirectoryReadError,
    LogIOError,
    MalformedBackupName,
    MultiError,
    OversizedWriteError,
    RollingLogError,
    SecondaryCleanupError,
)
from rollinglog.writer import RollingWriter

__all__ = [
    "Config",
    "CompressionError",
    "DirectoryReadError",
    "LogIOError",
    "MalformedBackupName",
    "MultiError",
    "OversizedWriteError",
    "RollingLogError",
    "RollingWriter",
    "SecondaryCleanupError",
    "load_config",
    "load_yaml_config",
]
