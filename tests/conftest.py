"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from revgate.engine import Engine
from revgate.models import Actor, WorkflowSession

from helpers import TickingClock, complete_artifacts, make_session


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def engine(clock: TickingClock) -> Engine:
    return Engine.in_memory(clock=clock)


@pytest.fixture
def author() -> Actor:
    return Actor(name="Ada Reviewer", email="ada@example.com")


@pytest.fixture
def complete_session() -> WorkflowSession:
    return make_session(complete_artifacts())
