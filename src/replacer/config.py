"""Runtime configuration defaults.

Values come from environment variables and can be overridden by CLI options:

- REPLACER_LARGE_FILE_MB: files above this size (MiB) are streamed (default 2048)
- REPLACER_WORKERS: workers per pool (default: logical CPU count)
- REPLACER_TIMEOUT: Go-style duration bounding the whole run (default 3m)
- REPLACER_LOG_LEVEL: logging level name (default WARNING)
- REPLACER_NO_COLOR: disable colored CLI output
"""

import logging

import psutil

from replacer.utils import get_bool_env, get_int_env, get_str_env, parse_duration


logger = logging.getLogger(__name__)

# 2 GiB
DEFAULT_LARGE_FILE_MB = 2048
DEFAULT_TIMEOUT = '3m'
DEFAULT_LOG_LEVEL = 'WARNING'


def mb_to_bytes(mb: int) -> int:
    return mb * 1024 * 1024


def get_large_file_threshold_bytes() -> int:
    """Get the size in bytes above which a file is handled as large.

    Controlled by REPLACER_LARGE_FILE_MB. Non-positive or invalid values
    fall back to DEFAULT_LARGE_FILE_MB.
    """
    mb = get_int_env('REPLACER_LARGE_FILE_MB', DEFAULT_LARGE_FILE_MB)
    if mb <= 0:
        mb = DEFAULT_LARGE_FILE_MB
    return mb_to_bytes(mb)


def get_worker_count() -> int:
    """Get the number of workers per pool.

    Uses REPLACER_WORKERS when set to a positive integer, otherwise the
    number of logical CPUs.
    """
    workers = get_int_env('REPLACER_WORKERS', 0)
    if workers > 0:
        return workers
    return psutil.cpu_count(logical=True) or 1


def get_timeout_seconds() -> float:
    """Get the run timeout in seconds from REPLACER_TIMEOUT."""
    raw = get_str_env('REPLACER_TIMEOUT', DEFAULT_TIMEOUT)
    try:
        return parse_duration(raw)
    except ValueError:
        logger.warning(f'Invalid REPLACER_TIMEOUT {raw!r}, using {DEFAULT_TIMEOUT}')
        return parse_duration(DEFAULT_TIMEOUT)


def get_log_level() -> str:
    return get_str_env('REPLACER_LOG_LEVEL', DEFAULT_LOG_LEVEL)


def get_no_color() -> bool:
    return get_bool_env('REPLACER_NO_COLOR', False)
