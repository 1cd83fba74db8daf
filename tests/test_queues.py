"""Tests for the bounded work queue."""

import threading

import pytest

from replacer.cancellation import CancellationToken
from replacer.errors import OperationCancelled
from replacer.queues import QueueClosed, WorkQueue


class TestWorkQueue:
    """Test FIFO order, close semantics and backpressure."""

    def test_fifo_order(self):
        queue = WorkQueue(3)
        for item in ('a', 'b', 'c'):
            queue.put(item)
        queue.close()
        assert list(queue) == ['a', 'b', 'c']

    def test_get_after_close_drains_then_returns_none(self):
        queue = WorkQueue(2)
        queue.put('a')
        queue.close()
        assert queue.get() == 'a'
        assert queue.get() is None
        assert queue.get() is None

    def test_close_wakes_all_consumers(self):
        queue = WorkQueue(1)
        results = []
        lock = threading.Lock()

        def consume():
            item = queue.get()
            with lock:
                results.append(item)

        threads = [threading.Thread(target=consume) for _ in range(4)]
        for t in threads:
            t.start()
        queue.close()
        for t in threads:
            t.join(timeout=5)

        assert results == [None] * 4
        assert all(not t.is_alive() for t in threads)

    def test_put_after_close_raises(self):
        queue = WorkQueue(1)
        queue.close()
        with pytest.raises(QueueClosed):
            queue.put('a')

    def test_close_is_idempotent(self):
        queue = WorkQueue(1)
        queue.close()
        queue.close()
        assert queue.closed is True

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            WorkQueue(0)

    def test_full_queue_blocks_until_consumed(self):
        queue = WorkQueue(1)
        queue.put('a')
        done = threading.Event()

        def produce():
            queue.put('b')
            done.set()

        thread = threading.Thread(target=produce)
        thread.start()
        assert not done.wait(0.1)
        assert queue.get() == 'a'
        assert done.wait(5)
        thread.join()
        assert queue.get() == 'b'

    def test_full_queue_put_observes_cancellation(self):
        queue = WorkQueue(1)
        queue.put('a')
        token = CancellationToken()
        timer = threading.Timer(0.05, token.cancel)
        timer.start()
        try:
            with pytest.raises(OperationCancelled):
                queue.put('b', token)
        finally:
            timer.cancel()
        assert len(queue) == 1

    def test_many_consumers_receive_each_item_once(self):
        queue = WorkQueue(4)
        received = []
        lock = threading.Lock()

        def consume():
            for item in queue:
                with lock:
                    received.append(item)

        consumers = [threading.Thread(target=consume) for _ in range(4)]
        for t in consumers:
            t.start()
        for i in range(200):
            queue.put(str(i))
        queue.close()
        for t in consumers:
            t.join(timeout=5)

        assert sorted(received, key=int) == [str(i) for i in range(200)]
