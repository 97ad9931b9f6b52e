"""
Unit tests for the Locust entrypoint's ``init`` listener.

The listener is called directly with a real ``Environment``; no runner
is started and no traffic is generated.
"""

from __future__ import annotations

from argparse import Namespace

import pytest
from locust.env import Environment
from locust.event import Events

from performance import locustfile
from performance.scenarios.base import MetricsUser
from performance.scenarios.fence_query import FenceUser
from performance.scenarios.slice_query import SliceUser

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def unbound_users(monkeypatch):
    """Start every test with no trends bound to the scenarios."""
    for user_class in (SliceUser, FenceUser):
        monkeypatch.setattr(user_class, "trends", None)


def _environment(tags=None) -> Environment:
    return Environment(
        user_classes=[SliceUser, FenceUser],
        events=Events(),
        parsed_options=Namespace(tags=tags),
    )


def test_init_binds_trends_to_every_user_class(clean_env):
    """Test that both scenarios share the handles registered at init."""
    # Arrange
    clean_env.setenv("TEST_NAME", "ci-smoke")
    environment = _environment()

    # Act
    locustfile._setup_run(environment)

    # Assert
    assert SliceUser.trends is not None
    assert SliceUser.trends is FenceUser.trends
    assert SliceUser.trends.request_time.name == "request_time_ci_smoke"
    assert MetricsUser.trends is None


def test_init_filters_user_classes_by_tag():
    """Test that --tags narrows the spawned classes and only binds those."""
    # Arrange
    environment = _environment(tags=["fence"])

    # Act
    locustfile._setup_run(environment)

    # Assert
    assert environment.user_classes == [FenceUser]
    assert FenceUser.trends is not None
    assert SliceUser.trends is None


def test_unknown_tags_keep_all_user_classes():
    """Test that tags without a mapped class leave the selection alone."""
    environment = _environment(tags=["unrelated"])

    locustfile._setup_run(environment)

    assert environment.user_classes == [SliceUser, FenceUser]

