"""Exception types raised by the rolling writer and its background sweep."""


class RollingLogError(Exception):
    """Base class for all rollinglog failures."""


class OversizedWriteError(RollingLogError):
    """A single write is larger than the configured size limit."""

    def __init__(self, length: int, limit: int):
        super().__init__(f"write length {length} exceeds file size limit {limit}")
        self.length = length
        self.limit = limit


class LogIOError(RollingLogError):
    """A filesystem operation on a log or backup file failed.

    The underlying ``OSError`` is available as ``__cause__``.
    """

    def __init__(self, op: str, path: str, reason: str = ""):
        message = f"can't {op} {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.op = op
        self.path = path


class DirectoryReadError(RollingLogError):
    """The directory holding the log file could not be listed."""


class MalformedBackupName(RollingLogError, ValueError):
    """A filename does not carry a valid rotation timestamp."""


class CompressionError(RollingLogError):
    """Compressing a backup failed."""


class SourceMissingError(CompressionError):
    pass


class DestinationCreateError(CompressionError):
    pass


class CompressionWriteError(CompressionError):
    pass


class SecondaryCleanupError(RollingLogError):
    """Removing a superseded or partial file failed after compression."""


class MultiError(RollingLogError):
    """Several independent failures reported together, primary first."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__(self._format())

    def _format(self) -> str:
        if len(self.errors) == 1:
            return f"1 error occurred: {self.errors[0]}"
        lines = [f"{len(self.errors)} errors occurred:"]
        lines.extend(f"  * {err}" for err in self.errors)
        return "\n".join(lines)

    def __iter__(self):
        return iter(self.errors)

    def __len__(self):
        return len(self.errors)


def raise_if_any(errors: list) -> None:
    """Raise a MultiError carrying *errors* if the list is not empty."""
    if errors:
        raise MultiError(errors)
