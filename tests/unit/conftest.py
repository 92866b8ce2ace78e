"""Shared fixtures for kvlog unit tests."""

from __future__ import annotations

import io
import re
from collections.abc import Callable
from typing import Any, NamedTuple

import pytest

from kvlog import AtomicLevel, Level, Logger, new_production_logger
from kvlog import context as log

# Examples of matched records:
#   [ts:2019-04-01T15:39:09.142773Z][level:debug][caller:unit/test_logger.py:21][msg:before]
#   [ts:2019-04-01T17:19:16.290081Z][level:warn][logger:a.b.c][caller:unit/test_logger.py:97][msg:my Warn message]
RECORD_RE = re.compile(
    r"^\[ts:(?P<ts>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{6}Z)\]"
    r"\[level:(?P<level>[a-z]+)\]"
    r"(?:\[logger:(?P<logger>[^\]]*)\])?"
    r"\[caller:(?P<caller>[^\]]*)\]"
    r"(?P<body>.*?)"
    r"(?:\[stacktrace:(?P<stack>.*)\])?$",
    re.DOTALL,
)


class Record(NamedTuple):
    ts: str
    level: str
    logger: str | None
    caller: str
    body: str
    stack: str | None


def parse_records(text: str) -> list[Record]:
    """Split sink output into records; stack traces may span several lines."""
    text = text.rstrip("\n")
    if not text:
        return []
    records = []
    for chunk in re.split(r"\n(?=\[ts:)", text):
        match = RECORD_RE.match(chunk)
        assert match is not None, f"unparseable record: {chunk!r}"
        records.append(Record(**match.groupdict()))
    return records


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def make_logger(output: io.StringIO) -> Callable[..., Logger]:
    """Build a production logger writing into ``output``."""

    def _make(level: AtomicLevel | Level | str = Level.DEBUG, **kwargs: Any) -> Logger:
        holder = level if isinstance(level, AtomicLevel) else AtomicLevel(level)
        return new_production_logger(holder, output=output, **kwargs)

    return _make


@pytest.fixture
def records(output: io.StringIO) -> Callable[[], list[Record]]:
    return lambda: parse_records(output.getvalue())


@pytest.fixture(autouse=True)
def _restore_default_logger() -> Any:
    previous = log.default_logger()
    yield
    log.set_default_logger(previous)
