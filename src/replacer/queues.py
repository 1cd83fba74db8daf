"""Bounded work queue with explicit close."""

import threading
from collections import deque

from replacer.cancellation import CancellationToken


# How often a producer blocked on a full queue re-checks the token
POLL_INTERVAL = 0.05


class QueueClosed(Exception):
    """put() was called on a closed queue."""


class WorkQueue:
    """Bounded FIFO channel of file paths.

    Single producer, many consumers. The producer closes the queue once;
    consumers then drain the remaining items and get None.
    """

    def __init__(self, maxsize: int, name: str = 'queue'):
        if maxsize <= 0:
            raise ValueError('maxsize must be positive')
        self.maxsize = maxsize
        self.name = name
        self._items: deque[str] = deque()
        self._closed = False
        self._cond = threading.Condition()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def put(self, item: str, token: CancellationToken | None = None) -> None:
        """Append an item, blocking while the queue is full.

        Raises:
            OperationCancelled: If the token fires while waiting
            QueueClosed: If the queue was closed
        """
        with self._cond:
            while len(self._items) >= self.maxsize and not self._closed:
                if token is not None:
                    token.raise_if_cancelled()
                self._cond.wait(POLL_INTERVAL)
            if self._closed:
                raise QueueClosed(self.name)
            self._items.append(item)
            self._cond.notify_all()

    def get(self) -> str | None:
        """Take the next item, blocking while empty. Returns None once closed and drained."""
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if self._items:
                item = self._items.popleft()
                self._cond.notify_all()
                return item
            return None

    def close(self) -> None:
        """Mark the queue closed and wake every waiter. Idempotent."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def __iter__(self):
        while True:
            item = self.get()
            if item is None:
                return
            yield item
