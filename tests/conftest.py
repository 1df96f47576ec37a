"""Shared test fixtures."""
from __future__ import annotations

import pytest

from tests.factories import FakeUoW, RecordingPublisher


@pytest.fixture
def uow() -> FakeUoW:
    uow = FakeUoW()
    for username in ("alice", "bob", "carol"):
        uow.users.add(username)
    return uow


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()
