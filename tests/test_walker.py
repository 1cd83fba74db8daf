"""Tests for directory walking and size classification."""

import os
import threading

import pytest

from replacer.cancellation import CancellationToken
from replacer.errors import ErrorCollector, OperationCancelled, WalkError
from replacer.queues import WorkQueue
from replacer.walker import classify, walk


def run_walk(root, threshold=10, token=None):
    small = WorkQueue(100, name='small')
    large = WorkQueue(100, name='large')
    errors = ErrorCollector()
    walk(str(root), small, large, token or CancellationToken(), errors, threshold)
    return sorted(small), sorted(large), errors


class TestClassify:
    def test_threshold_is_inclusive_for_small(self):
        assert classify(10, 10) == 'small'
        assert classify(11, 10) == 'large'
        assert classify(0, 10) == 'small'


class TestWalk:
    """Test traversal, routing and queue closing."""

    def test_routes_files_by_size(self, make_tree):
        root = make_tree({
            'small.txt': b'tiny',
            'big.txt': b'x' * 100,
            'exact.txt': b'y' * 10,
        })
        small, large, errors = run_walk(root, threshold=10)

        assert small == [str(root / 'exact.txt'), str(root / 'small.txt')]
        assert large == [str(root / 'big.txt')]
        assert len(errors) == 0

    def test_each_file_goes_to_exactly_one_queue(self, make_tree):
        root = make_tree({f'f{i}.txt': b'z' * i for i in range(30)})
        small, large, _ = run_walk(root, threshold=15)

        assert set(small).isdisjoint(large)
        assert len(small) + len(large) == 30

    def test_recurses_into_nested_directories(self, make_tree):
        root = make_tree({
            'a/b/c/deep.txt': b'deep',
            'a/side.txt': b'side',
            'top.txt': b'top',
        })
        small, large, _ = run_walk(root)

        assert small == sorted([
            str(root / 'a' / 'b' / 'c' / 'deep.txt'),
            str(root / 'a' / 'side.txt'),
            str(root / 'top.txt'),
        ])
        assert large == []

    def test_directories_are_not_queued(self, tmp_path):
        (tmp_path / 'empty' / 'nested').mkdir(parents=True)
        small, large, errors = run_walk(tmp_path)
        assert small == []
        assert large == []
        assert len(errors) == 0

    def test_queues_closed_after_walk(self, make_tree):
        root = make_tree({'a.txt': b'a'})
        small = WorkQueue(10)
        large = WorkQueue(10)
        walk(str(root), small, large, CancellationToken(), ErrorCollector(), 10)
        assert small.closed and large.closed

    def test_missing_root_is_recorded(self, tmp_path):
        small, large, errors = run_walk(tmp_path / 'does-not-exist')

        recorded = errors.snapshot()
        assert small == [] and large == []
        assert len(recorded) == 1
        assert isinstance(recorded[0], WalkError)
        assert recorded[0].path == str(tmp_path / 'does-not-exist')

    def test_root_file_is_not_queued(self, make_tree):
        root = make_tree({'only.txt': b'content'})
        small, large, errors = run_walk(root / 'only.txt')

        assert small == [] and large == []
        assert isinstance(errors.snapshot()[0], WalkError)

    def test_symlinks_are_skipped(self, make_tree):
        root = make_tree({'real/target.txt': b'target'})
        os.symlink(root / 'real' / 'target.txt', root / 'link.txt')
        os.symlink(root / 'real', root / 'linkdir')

        small, large, errors = run_walk(root)
        assert small == [str(root / 'real' / 'target.txt')]
        assert len(errors) == 0

    def test_cancelled_walk_raises_and_closes_queues(self, make_tree):
        root = make_tree({'a.txt': b'a', 'b/c.txt': b'c'})
        small = WorkQueue(10)
        large = WorkQueue(10)
        token = CancellationToken(timeout=0)

        with pytest.raises(OperationCancelled):
            walk(str(root), small, large, token, ErrorCollector(), 10)

        assert small.closed and large.closed
        assert list(small) == []

    def test_blocked_put_observes_cancellation(self, make_tree):
        root = make_tree({f'f{i}.txt': b'a' for i in range(5)})
        small = WorkQueue(1)
        large = WorkQueue(1)
        token = CancellationToken(timeout=0.1)

        # Nobody consumes, so the walker blocks on the second file until the deadline
        with pytest.raises(OperationCancelled):
            walk(str(root), small, large, token, ErrorCollector(), 10)
        assert small.closed and large.closed


class TestErrorCollector:
    """Test the synchronized error list."""

    def test_concurrent_adds_are_not_lost(self):
        errors = ErrorCollector()

        def add_many(n):
            for i in range(500):
                errors.add(WalkError(f'error {n}-{i}'))

        threads = [threading.Thread(target=add_many, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(errors) == 8 * 500

    def test_snapshot_is_a_copy(self):
        errors = ErrorCollector()
        errors.add(WalkError('one'))
        snapshot = errors.snapshot()
        errors.add(WalkError('two'))
        assert len(snapshot) == 1
        assert bool(errors) is True
