"""File rewrite strategies.

Two strategies share the same literal replacement:

- Small files are read whole, replaced in memory and written to a temporary
  file that is renamed over the original.
- Large files are streamed line by line into a temporary file that is renamed
  over the original. The cancellation token is polled before every line; on
  cancellation the temporary file is removed and the original is untouched.

Both write the temporary file next to the target so that os.replace() stays
on one filesystem and is atomic.
"""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import AnyStr

from replacer.cancellation import CancellationToken


logger = logging.getLogger(__name__)

SMALL = 'small'
LARGE = 'large'

TEMP_PREFIX = '.replacer-'
TEMP_SUFFIX = '.tmp'

# Write buffer for the streamed strategy
DEFAULT_BUFFER_SIZE = 1024 * 1024

NEWLINE = b'\n'


@dataclass
class RewriteResult:
    """Outcome of rewriting one file"""

    path: str
    strategy: str
    replacements: int
    changed: bool  # False when the file was left byte-for-byte as it was


def to_bytes(value: str | bytes) -> bytes:
    """Encode a CLI string back to the raw bytes it was decoded from."""
    if isinstance(value, bytes):
        return value
    return os.fsencode(value)


def replace_literal_count(data: AnyStr, search: AnyStr, replace: AnyStr) -> tuple[AnyStr, int]:
    """Replace every non-overlapping occurrence of search, left to right.

    An empty search string matches nothing.

    Returns:
        Tuple of (new data, number of replacements)
    """
    if not search:
        return data, 0
    count = data.count(search)
    if count == 0:
        return data, 0
    return data.replace(search, replace), count


def _make_temp(path: str) -> tuple[int, str]:
    directory = os.path.dirname(os.path.abspath(path))
    return tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX, dir=directory)


def _discard(temp_path: str) -> None:
    try:
        os.unlink(temp_path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f'Failed to remove temporary file {temp_path}: {e}')


def _commit(temp_path: str, path: str) -> None:
    # mkstemp creates 0600 files
    shutil.copymode(path, temp_path)
    os.replace(temp_path, path)


def rewrite_small_file(path: str, search: str | bytes, replace: str | bytes) -> RewriteResult:
    """Rewrite a file by reading it fully into memory.

    The file is opened for reading and writing so that a file we may not
    modify fails before anything is written. Files whose content would not
    change are not rewritten.

    Args:
        path: File to rewrite
        search: Literal text to look for
        replace: Replacement text

    Returns:
        RewriteResult for the file

    Raises:
        OSError: If the file cannot be read or the result cannot be written
    """
    search_b = to_bytes(search)
    replace_b = to_bytes(replace)

    with open(path, 'r+b') as f:
        content = f.read()

    new_content, count = replace_literal_count(content, search_b, replace_b)
    if new_content == content:
        return RewriteResult(path=path, strategy=SMALL, replacements=count, changed=False)

    fd, temp_path = _make_temp(path)
    try:
        with os.fdopen(fd, 'wb') as out:
            out.write(new_content)
            out.flush()
            os.fsync(out.fileno())
        _commit(temp_path, path)
    except BaseException:
        _discard(temp_path)
        raise

    logger.debug(f'Rewrote {path}: {count} replacements')
    return RewriteResult(path=path, strategy=SMALL, replacements=count, changed=True)


def rewrite_large_file(
    path: str,
    search: str | bytes,
    replace: str | bytes,
    token: CancellationToken | None = None,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> RewriteResult:
    """Rewrite a file line by line through a temporary file.

    Lines are split on '\\n'; the delimiter is stripped before replacement
    and written back after it, so the output always ends with a newline
    unless the input is empty. '\\r' is ordinary content.

    Args:
        path: File to rewrite
        search: Literal text to look for (never matches across lines)
        replace: Replacement text
        token: Polled before the file is opened and before every line
        buffer_size: Size of the write buffer

    Returns:
        RewriteResult for the file

    Raises:
        OperationCancelled: If the token fired. The original is unchanged.
        OSError: On any read, write or rename failure. The original is unchanged.
    """
    search_b = to_bytes(search)
    replace_b = to_bytes(replace)

    if token is not None:
        token.raise_if_cancelled(path)

    replacements = 0
    added_newline = False

    with open(path, 'rb') as source:
        fd, temp_path = _make_temp(path)
        try:
            with os.fdopen(fd, 'wb', buffering=buffer_size) as out:
                for line in source:
                    if token is not None:
                        token.raise_if_cancelled(path)

                    if line.endswith(NEWLINE):
                        line = line[:-1]
                    else:
                        added_newline = True

                    new_line, count = replace_literal_count(line, search_b, replace_b)
                    replacements += count
                    out.write(new_line)
                    out.write(NEWLINE)

                out.flush()
                os.fsync(out.fileno())
        except BaseException:
            _discard(temp_path)
            raise

    try:
        _commit(temp_path, path)
    except BaseException:
        _discard(temp_path)
        raise

    logger.debug(f'Streamed {path}: {replacements} replacements')
    return RewriteResult(
        path=path,
        strategy=LARGE,
        replacements=replacements,
        changed=added_newline or (replacements > 0 and search_b != replace_b),
    )
