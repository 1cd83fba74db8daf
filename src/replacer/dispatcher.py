"""Concurrent replace pipeline.

This module provides the Replacer class, which walks a directory tree in a
background thread and rewrites the discovered files with two worker pools:

- small files (<= threshold) are rewritten in memory
- large files (> threshold) are streamed line by line

Both pools are sized to the worker count and drain their queues while the
walker is still producing. Errors from the walker and every worker are
gathered in one ErrorCollector; nothing aborts the run except the
cancellation token.
"""

import logging
import os
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from time import time

from replacer.cancellation import CancellationToken
from replacer.config import get_large_file_threshold_bytes, get_worker_count
from replacer.errors import ErrorCollector, OperationCancelled, RewriteError, WalkError
from replacer.models import ErrorRecord, RunReport
from replacer.queues import WorkQueue
from replacer.rewrite import LARGE, SMALL, RewriteResult, rewrite_large_file, rewrite_small_file
from replacer.walker import walk


logger = logging.getLogger(__name__)

WORKER_FAILED = 'worker failed'
WALK_FAILED = 'walk failed'


class ReplaceResult:
    """Per-file outcomes of a run, safe to update from worker threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self.rewritten: list[RewriteResult] = []

    def add(self, result: RewriteResult) -> None:
        with self._lock:
            self.rewritten.append(result)

    def count(self, strategy: str) -> int:
        with self._lock:
            return sum(1 for r in self.rewritten if r.strategy == strategy)

    @property
    def changed_files(self) -> list[str]:
        with self._lock:
            return sorted(r.path for r in self.rewritten if r.changed)

    @property
    def replacements(self) -> int:
        with self._lock:
            return sum(r.replacements for r in self.rewritten)


class Replacer:
    """Runs search-and-replace over a directory tree.

    Example:
        token = CancellationToken(timeout=180)
        report = Replacer('foo', 'bar').run('/srv/data', token)
    """

    def __init__(
        self,
        search: str,
        replace: str,
        workers: int | None = None,
        threshold: int | None = None,
    ):
        """Initialize the replacer.

        Args:
            search: Literal text to look for
            replace: Replacement text
            workers: Workers per pool (default: REPLACER_WORKERS or CPU count)
            threshold: Large file threshold in bytes (default: REPLACER_LARGE_FILE_MB)
        """
        self.search = search
        self.replace = replace
        self.workers = workers if workers and workers > 0 else get_worker_count()
        self.threshold = threshold if threshold is not None else get_large_file_threshold_bytes()

    def run(self, root: str, token: CancellationToken | None = None) -> RunReport:
        """Walk root and rewrite every regular file below it.

        Args:
            root: Directory to process
            token: Cancellation token; a token without deadline is used if None

        Returns:
            RunReport with counts, changed files and all collected errors
        """
        token = token or CancellationToken()
        errors = ErrorCollector()
        result = ReplaceResult()
        start_time = time()

        small_files = WorkQueue(self.workers, name=SMALL)
        large_files = WorkQueue(self.workers, name=LARGE)

        logger.debug(
            f'[REPLACE] Starting in {root} with {self.workers} workers per pool '
            f'(threshold={self.threshold} bytes)'
        )

        walker = threading.Thread(
            target=self._walk,
            args=(root, small_files, large_files, token, errors),
            name='replacer-walker',
            daemon=True,
        )
        walker.start()

        small_pool = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix='replacer-small')
        large_pool = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix='replacer-large')
        with small_pool, large_pool:
            futures = []
            for _ in range(self.workers):
                futures.append(small_pool.submit(self._worker, small_files, SMALL, token, errors, result))
                futures.append(large_pool.submit(self._worker, large_files, LARGE, token, errors, result))

            # The walker closes both queues once it sees the token
            wait(futures, return_when=FIRST_EXCEPTION)
            if any(f.done() and f.exception() is not None for f in futures):
                token.cancel(WORKER_FAILED)
            for future in futures:
                future.result()

        walker.join()

        report = RunReport(
            root=root,
            search=self.search,
            replace=self.replace,
            time=time() - start_time,
            workers=self.workers,
            threshold_bytes=self.threshold,
            small_files=result.count(SMALL),
            large_files=result.count(LARGE),
            changed_files=result.changed_files,
            replacements=result.replacements,
            errors=[ErrorRecord.from_error(e) for e in errors.snapshot()],
            cancelled=token.cancelled,
        )
        logger.debug(
            f'[REPLACE] Completed: {report.small_files} small, {report.large_files} large, '
            f'{len(report.changed_files)} changed, {len(report.errors)} errors in {report.time:.2f}s'
        )
        return report

    def _walk(
        self,
        root: str,
        small_files: WorkQueue,
        large_files: WorkQueue,
        token: CancellationToken,
        errors: ErrorCollector,
    ) -> None:
        try:
            walk(root, small_files, large_files, token, errors, self.threshold)
        except OperationCancelled as e:
            logger.debug(f'[WALK] Cancelled: {e}')
            errors.add(e)
        except Exception as e:
            logger.error(f'[WALK] Failed under {root}: {e!r}')
            errors.add(WalkError(f'walk failed: {e!r}', path=root))
            token.cancel(WALK_FAILED)

    def _worker(
        self,
        queue: WorkQueue,
        strategy: str,
        token: CancellationToken,
        errors: ErrorCollector,
        result: ReplaceResult,
    ) -> None:
        """Drain one queue until it is closed or the token fires."""
        for path in queue:
            logger.debug(f'Processing {path}')
            if token.cancelled:
                errors.add(OperationCancelled(token.reason))
                return

            try:
                if strategy == LARGE:
                    rewritten = rewrite_large_file(path, self.search, self.replace, token)
                else:
                    rewritten = rewrite_small_file(path, self.search, self.replace)
            except OperationCancelled as e:
                errors.add(e)
                return
            except OSError as e:
                logger.debug(f'Failed to rewrite {path}: {e}')
                errors.add(RewriteError.from_os_error(path, e))
                continue
            except Exception as e:
                # Stops the walker too, so it cannot block on a queue nobody drains
                logger.error(f'Worker failed on {path}: {e!r}')
                errors.add(RewriteError(f'worker failed: {e!r}', path=path))
                token.cancel(WORKER_FAILED)
                return

            result.add(rewritten)


def replace_tree(
    root: str,
    search: str,
    replace: str,
    token: CancellationToken | None = None,
    workers: int | None = None,
    threshold: int | None = None,
) -> RunReport:
    """Convenience wrapper around Replacer.run()."""
    root = os.fspath(root)
    return Replacer(search, replace, workers=workers, threshold=threshold).run(root, token)
