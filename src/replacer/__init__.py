"""Recursive, concurrent literal search-and-replace."""

from replacer.__version__ import __version__


__all__ = ['__version__']
