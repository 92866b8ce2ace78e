"""conftest.py for benchmarks.

Provides a session-wide sink that discards everything, so the timings
measure the logging pipeline and not terminal or file I/O.
"""

from __future__ import annotations

import os

import pytest


@pytest.fixture(scope="session")
def null_sink():
    """Text stream opened on ``os.devnull``."""
    with open(os.devnull, "w", encoding="utf-8") as sink:
        yield sink
