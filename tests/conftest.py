"""
Shared pytest fixtures for the performance-suite unit tests.

Fixtures here give each test a clean process environment and a real
Locust ``Environment`` whose ``request`` events are captured, so trend
observations can be asserted on without starting a runner.

Key Concepts Demonstrated:
- ``monkeypatch`` for isolating environment-variable driven behaviour
- Real framework objects instead of mocks where they are cheap to build
- Listener-based capture of fired events
"""

from __future__ import annotations

from typing import Any

import pytest
from faker import Faker
from locust.env import Environment
from locust.event import Events
from locust.stats import RequestStats

from performance.config import MEDIAN_THRESHOLD_ENV, P95_THRESHOLD_ENV, TEST_NAME_ENV

fake = Faker()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove every variable the metrics helper reads before each test."""
    for key in (TEST_NAME_ENV, MEDIAN_THRESHOLD_ENV, P95_THRESHOLD_ENV):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def locust_env() -> Environment:
    """
    Provide a bare Locust environment with its own event hooks.

    A ``RequestStats`` instance is wired to the ``request`` event the same
    way a runner would, so recorded trends appear in ``locust_env.stats``.
    """
    environment = Environment(events=Events())
    environment.stats = RequestStats()

    def _log(request_type, name, response_time, response_length, **_kwargs):
        environment.stats.log_request(request_type, name, response_time, response_length)

    environment.events.request.add_listener(_log)
    return environment


@pytest.fixture
def fired_requests(locust_env) -> list[dict[str, Any]]:
    """Collect the keyword arguments of every fired ``request`` event."""
    captured: list[dict[str, Any]] = []

    def _capture(**kwargs):
        captured.append(kwargs)

    locust_env.events.request.add_listener(_capture)
    return captured


@pytest.fixture
def sample_test_name() -> str:
    """A realistic free-form test name containing spaces and punctuation."""
    return f"{fake.word()} load-test #{fake.random_int(1, 99)}"
