"""Shared fixtures for the flysession test suite."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import pytest

from flysession.session.adapters.memory import InMemorySessionStore


class FakeClock:
    """Manually advanced UTC clock for expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemorySessionStore:
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def restore_logging():
    """Put back the root level and handlers changed by logging configuration."""
    root = logging.getLogger()
    level, handlers = root.level, root.handlers[:]
    named = {name: logging.getLogger(name).level for name in ("flysession", "flysession.session")}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, named_level in named.items():
        logging.getLogger(name).setLevel(named_level)
