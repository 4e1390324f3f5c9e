from __future__ import annotations

from pathlib import Path


class BacklightError(Exception):
    pass


class DeviceIOError(BacklightError):
    """A device directory or control file could not be opened, read or written.

    The underlying ``OSError`` is kept as ``cause`` (and chained as ``__cause__``
    by the code raising this).
    """

    def __init__(self, path: str | Path, cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        self.errno = cause.errno
        reason = cause.strerror or str(cause)
        super().__init__(f"{self.path}: {reason}")


class MalformedDataError(BacklightError, ValueError):
    """A control file was readable but did not hold an integer."""

    def __init__(self, path: str | Path, content: str) -> None:
        self.path = Path(path)
        self.content = content
        super().__init__(f"{self.path}: cannot parse {content.strip()!r} as an integer")
