"""
Trend metrics and latency thresholds for the load test.

Locust tracks statistics per request name, so a "trend" here is simply a
named statistics entry that observations are fired into through the
environment's ``request`` event.  Locust then reports median, p95 and
the other percentiles for it next to the real HTTP requests, both in the
web UI and in the ``*_stats.csv`` output.

Two trends are registered once per run:

- ``response_length`` — body size of every query response
- ``request_time_<test name>`` — query duration in milliseconds, named
  after the ``TEST_NAME`` environment variable so results from different
  runs can be told apart

The latency limits the run is judged against come from ``MEDTIME`` and
``MAXTIME`` and are resolved fresh on every call.

Key Concepts Demonstrated:
- Custom metrics on top of Locust's event hooks
- Explicit metric handles instead of module-level globals
- Identifier sanitisation with a single regular expression
"""

from __future__ import annotations

import logging
import re
from numbers import Real
from typing import Any, NamedTuple

from locust.env import Environment

from performance.config import (
    MEDIAN_THRESHOLD_ENV,
    P95_THRESHOLD_ENV,
    TEST_NAME_ENV,
    resolve,
)

logger = logging.getLogger(__name__)

RESPONSE_LENGTH_METRIC = "response_length"
REQUEST_TIME_PREFIX = "request_time_"
DEFAULT_TEST_NAME = "test"
MAX_METRIC_NAME_LENGTH = 127

# Request type under which trend observations show up in Locust's stats.
TREND_REQUEST_TYPE = "Trend"

DEFAULT_MEDIAN_THRESHOLD_MS = 30000
DEFAULT_P95_THRESHOLD_MS = 60000

_DISALLOWED_CHARS = re.compile(r"[^a-zA-Z0-9_]")


class DuplicateMetricError(ValueError):
    """Raised when a trend name is registered twice in the same run."""


def sanitize_metric_name(raw: str | None) -> str:
    """
    Turn an arbitrary test name into a metric identifier.

    Every character outside ``[a-zA-Z0-9_]`` is replaced by ``_``.  A
    missing or empty name becomes ``"test"``.  The result is cut to
    :data:`MAX_METRIC_NAME_LENGTH` characters.

    Args:
        raw: The raw test name, usually from ``TEST_NAME``.

    Returns:
        A string matching ``^[a-zA-Z0-9_]{0,127}$``.
    """
    name = _DISALLOWED_CHARS.sub("_", raw) if raw else DEFAULT_TEST_NAME
    return name[:MAX_METRIC_NAME_LENGTH]


def request_time_metric_name(test_name: str | None = None) -> str:
    """
    Build the request-time trend name for *test_name*.

    When *test_name* is ``None`` the ``TEST_NAME`` environment variable
    is used.
    """
    if test_name is None:
        test_name = resolve(TEST_NAME_ENV, None)
    return f"{REQUEST_TIME_PREFIX}{sanitize_metric_name(test_name)}"


class TrendMetric:
    """
    Handle for one named series of numeric observations.

    Attributes:
        name: Statistics entry name shown in Locust's reports.
        is_time: ``True`` when observations are durations in milliseconds.
    """

    def __init__(self, environment: Environment, name: str, is_time: bool = False) -> None:
        self._environment = environment
        self.name = name
        self.is_time = is_time

    def add(self, value: float, tags: dict[str, Any] | None = None) -> None:
        """
        Record one observation.

        Args:
            value: The observed number (milliseconds for time trends).
            tags: Optional context passed along to ``request`` listeners.

        Raises:
            TypeError: If *value* is not a real number.
        """
        if isinstance(value, bool) or not isinstance(value, Real):
            raise TypeError(f"Trend {self.name!r} only accepts numbers, got {value!r}")

        self._environment.events.request.fire(
            request_type=TREND_REQUEST_TYPE,
            name=self.name,
            response_time=value,
            response_length=0,
            exception=None,
            context=dict(tags or {}),
        )

    def __repr__(self) -> str:
        return f"TrendMetric(name={self.name!r}, is_time={self.is_time})"


class TrendRegistry:
    """
    Name-to-handle registry for the trends of a single Locust environment.

    Names are unique per registry; registering one twice raises
    :class:`DuplicateMetricError` instead of silently merging two series.
    """

    def __init__(self, environment: Environment) -> None:
        self.environment = environment
        self._trends: dict[str, TrendMetric] = {}

    def register(self, name: str, is_time: bool = False) -> TrendMetric:
        """Create and return a new trend handle named *name*."""
        if name in self._trends:
            raise DuplicateMetricError(f"Trend metric {name!r} is already registered")

        trend = TrendMetric(self.environment, name, is_time=is_time)
        self._trends[name] = trend
        logger.info("Registered trend metric %s (is_time=%s)", name, is_time)
        return trend

    def get(self, name: str) -> TrendMetric | None:
        return self._trends.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._trends

    def __len__(self) -> int:
        return len(self._trends)


class TrendHandles(NamedTuple):
    """The two trends every scenario records into."""

    response_length: TrendMetric
    request_time: TrendMetric


def register_trends(
    environment: Environment,
    registry: TrendRegistry | None = None,
    test_name: str | None = None,
) -> TrendHandles:
    """
    Register the response-length and request-time trends for a run.

    Called once from Locust's ``init`` event.  The returned handles are
    passed explicitly to whatever records observations.

    Args:
        environment: The Locust environment whose events receive the
            observations.
        registry: Registry to register into.  A fresh one is created for
            *environment* when omitted.
        test_name: Overrides the ``TEST_NAME`` environment variable.

    Returns:
        The registered :class:`TrendHandles`.

    Raises:
        DuplicateMetricError: If either name is already in *registry*.
    """
    if registry is None:
        registry = TrendRegistry(environment)

    response_length = registry.register(RESPONSE_LENGTH_METRIC)
    request_time = registry.register(request_time_metric_name(test_name), is_time=True)
    return TrendHandles(response_length=response_length, request_time=request_time)


def median_threshold() -> Any:
    """Acceptable median request time in ms (``MEDTIME``, default 30000)."""
    return resolve(MEDIAN_THRESHOLD_ENV, DEFAULT_MEDIAN_THRESHOLD_MS)


def p95_threshold() -> Any:
    """
    Acceptable 95th-percentile request time in ms.

    Still read from ``MAXTIME`` (default 60000) for compatibility with
    existing pipelines, even though the limit is applied to p95.  The
    raw environment string is returned unconverted.
    """
    return resolve(P95_THRESHOLD_ENV, DEFAULT_P95_THRESHOLD_MS)
