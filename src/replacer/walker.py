"""Directory walker that classifies files by size and feeds the work queues."""

import logging
import os

from replacer.cancellation import CancellationToken
from replacer.errors import ErrorCollector, WalkError
from replacer.queues import WorkQueue


logger = logging.getLogger(__name__)


def classify(size: int, threshold: int) -> str:
    """Return 'large' for files above the threshold, else 'small'."""
    return 'large' if size > threshold else 'small'


def walk(
    root: str,
    small_files: WorkQueue,
    large_files: WorkQueue,
    token: CancellationToken,
    errors: ErrorCollector,
    threshold: int,
) -> None:
    """Walk the tree under root and close both queues when done.

    The queues are closed exactly once, whether the walk finishes, is
    cancelled or fails.

    Raises:
        OperationCancelled: If the token fired during the walk
    """
    try:
        walk_dir(root, small_files, large_files, token, errors, threshold)
    finally:
        small_files.close()
        large_files.close()


def walk_dir(
    root: str,
    small_files: WorkQueue,
    large_files: WorkQueue,
    token: CancellationToken,
    errors: ErrorCollector,
    threshold: int,
) -> None:
    """Visit every entry below root using an explicit directory stack.

    Regular files go to exactly one queue based on their size. Symlinks
    and special files are skipped. Entries that cannot be listed or
    stat'ed are recorded and their siblings are still visited. The root
    itself is never queued.

    Raises:
        OperationCancelled: If the token fired during the walk
    """
    stack = [root]

    while stack:
        directory = stack.pop()
        token.raise_if_cancelled()

        try:
            with os.scandir(directory) as entries:
                children = list(entries)
        except OSError as e:
            logger.debug(f'Cannot list {directory}: {e}')
            errors.add(WalkError.from_os_error(directory, e))
            continue

        subdirs = []
        for entry in children:
            token.raise_if_cancelled()
            logger.debug(f'Walking {entry.path}')

            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(entry.path)
                    continue
                if not entry.is_file(follow_symlinks=False):
                    logger.debug(f'Skipping non-regular file {entry.path}')
                    continue
                size = entry.stat(follow_symlinks=False).st_size
            except OSError as e:
                errors.add(WalkError.from_os_error(entry.path, e))
                continue

            if classify(size, threshold) == 'large':
                large_files.put(entry.path, token)
            else:
                small_files.put(entry.path, token)

        # Reversed so that subdirectories are visited in listing order
        stack.extend(reversed(subdirs))
