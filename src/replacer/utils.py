"""Utility functions for replacer"""

import logging
import os
import re


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Go-style duration units, in seconds
_DURATION_UNITS = {
    'ns': 1e-9,
    'us': 1e-6,
    'µs': 1e-6,
    'ms': 1e-3,
    's': 1.0,
    'm': 60.0,
    'h': 3600.0,
}
_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)')


def get_int_env(key: str, default: int = 0) -> int:
    """Get integer value from environment variable, return default if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def get_str_env(key: str, default: str) -> str:
    """
    Get string from environment variable, return default if not set.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        String value or default
    """
    return os.getenv(key, default)


def get_bool_env(key: str, default: bool) -> bool:
    """
    Get boolean from environment variable, return default if not set.

    Recognizes: true/false, yes/no, 1/0 (case-insensitive)

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Boolean value or default
    """
    val = os.getenv(key)
    if val is None:
        return default
    val_lower = val.lower()
    if val_lower in ('true', 'yes', '1'):
        return True
    elif val_lower in ('false', 'no', '0'):
        return False
    return default


def parse_duration(value: str) -> float:
    """Parse a Go-style duration string into seconds.

    Accepts a sequence of decimal numbers each followed by a unit, such as
    '3m', '90s', '1h30m', '1.5h' or '500ms'. A bare '0' is allowed.

    Args:
        value: Duration string

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    if text == '0':
        return 0.0
    if not text:
        raise ValueError('empty duration')

    negative = text.startswith('-')
    if text[0] in '+-':
        text = text[1:]

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if not match:
            raise ValueError(f'invalid duration {value!r}')
        number, unit = match.groups()
        total += float(number) * _DURATION_UNITS[unit]
        pos = match.end()

    if pos == 0:
        raise ValueError(f'invalid duration {value!r}')
    return -total if negative else total


def human_readable_size(size_bytes: float) -> str:
    """Convert bytes to human-readable format."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024:
            return f'{size_bytes:.2f} {unit}'
        size_bytes /= 1024
    return f'{size_bytes:.2f} PB'


def setup_logging(level_name: str) -> None:
    """Configure root logging for the CLI.

    Unknown level names fall back to WARNING.
    """
    level = getattr(logging, level_name.upper(), logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
