"""Run-wide cancellation signal.

A CancellationToken fires once, either when its deadline passes or when
cancel() is called (typically from a SIGINT/SIGTERM handler). Every
component polls it between units of work; nothing is interrupted
preemptively.
"""

import logging
import signal
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager

from replacer.errors import OperationCancelled


logger = logging.getLogger(__name__)

DEADLINE_EXCEEDED = 'deadline exceeded'
INTERRUPTED = 'interrupted'


class CancellationToken:
    """One-shot, monotonic cancellation signal with an optional deadline."""

    def __init__(self, timeout: float | None = None):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: str | None = None
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def reason(self) -> str | None:
        """Why the token fired, or None while it has not."""
        if not self.cancelled:
            return None
        return self._reason

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel(DEADLINE_EXCEEDED)
            return True
        return False

    def cancel(self, reason: str = INTERRUPTED) -> None:
        """Fire the token. Later calls keep the first reason."""
        with self._lock:
            if self._reason is None:
                self._reason = reason
                logger.debug(f'Cancellation requested: {reason}')
            self._event.set()

    def raise_if_cancelled(self, path: str | None = None) -> None:
        if self.cancelled:
            raise OperationCancelled(self._reason or INTERRUPTED, path=path)


@contextmanager
def handle_signals(token: CancellationToken, signals=(signal.SIGINT, signal.SIGTERM)) -> Iterator[None]:
    """Cancel the token on SIGINT/SIGTERM for the duration of the block.

    Previous handlers are restored on exit. Outside the main thread signal
    handlers cannot be installed, so the block runs without them.
    """
    if threading.current_thread() is not threading.main_thread():
        logger.debug('Not on main thread, signal handlers not installed')
        yield
        return

    def _on_signal(signum, frame):
        logger.info(f'Received {signal.Signals(signum).name}, cancelling')
        token.cancel(INTERRUPTED)

    previous = {}
    for sig in signals:
        previous[sig] = signal.signal(sig, _on_signal)
    try:
        yield
    finally:
        for sig, handler in previous.items():
            if handler is not None:
                signal.signal(sig, handler)
