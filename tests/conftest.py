"""Pytest configuration and shared fixtures for replacer tests.

This module provides an auto-use fixture that keeps REPLACER_* environment
variables from the developer's shell out of the tests, plus helpers for
building small directory trees.
"""

import os

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Auto-use fixture that clears replacer configuration from the environment.

    This ensures:
    - A REPLACER_WORKERS or REPLACER_LARGE_FILE_MB set in the shell does not
      change routing or pool sizes under test
    - Tests that set variables with monkeypatch do not leak into each other
    """
    for key in list(os.environ):
        if key.startswith('REPLACER_'):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def make_tree(tmp_path):
    """Fixture that creates files under tmp_path from a {relative_path: bytes} mapping.

    Returns:
        Callable that builds the tree and returns its root
    """

    def _make(files):
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        return tmp_path

    return _make

