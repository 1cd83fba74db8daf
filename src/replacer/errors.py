"""Error types and the shared error collector."""

import threading


class ReplacerError(Exception):
    """Base class for errors recorded during a run.

    Attributes:
        path: File or directory the error relates to, if any
    """

    kind = 'error'

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        message = super().__str__()
        if self.path:
            return f'{self.path}: {message}'
        return message


class WalkError(ReplacerError):
    """A directory entry could not be listed or stat'ed. Traversal continues."""

    kind = 'walk'

    @classmethod
    def from_os_error(cls, path: str, exc: OSError) -> 'WalkError':
        err = cls(exc.strerror or str(exc), path=path)
        err.__cause__ = exc
        return err


class RewriteError(ReplacerError):
    """Reading, writing or renaming one file failed. Other files are unaffected."""

    kind = 'rewrite'

    @classmethod
    def from_os_error(cls, path: str, exc: OSError) -> 'RewriteError':
        err = cls(exc.strerror or str(exc), path=path)
        err.__cause__ = exc
        return err


class OperationCancelled(ReplacerError):
    """The run deadline passed or an interrupt was received."""

    kind = 'cancelled'

    def __init__(self, reason: str, path: str | None = None):
        super().__init__(reason, path=path)
        self.reason = reason


class ErrorCollector:
    """Append-only error list shared by the walker and all workers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._errors: list[ReplacerError] = []

    def add(self, error: ReplacerError) -> None:
        with self._lock:
            self._errors.append(error)

    def snapshot(self) -> list[ReplacerError]:
        """Return a copy of the errors collected so far."""
        with self._lock:
            return list(self._errors)

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)

    def __bool__(self) -> bool:
        return len(self) > 0
