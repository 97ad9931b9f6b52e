"""
Helper utilities for Locust performance scenarios.

Provides the building blocks that every Locust user class relies on:
query payload factories for the slice and fence endpoints, and a POST
wrapper that validates the response and feeds the run's trend metrics.

Key Concepts Demonstrated:
- Reusable request helpers that wrap Locust's ``catch_response`` protocol
- Trend handles passed in as parameters rather than imported globals
- Randomised payloads to defeat server-side caching and exercise
  varied code paths
"""

from __future__ import annotations

import logging
import random
from typing import Any

from locust.clients import HttpSession

from performance.config import Config
from performance.metrics import TrendHandles

logger = logging.getLogger(__name__)


def _response_length(response: Any) -> int:
    """Return the body size in bytes, or ``0`` when there is no body."""
    content = getattr(response, "content", None)
    return len(content) if content else 0


def _elapsed_ms(response: Any) -> float:
    """Return how long the request took in milliseconds."""
    elapsed = getattr(response, "elapsed", None)
    if elapsed is None:
        return 0.0
    return elapsed.total_seconds() * 1000.0


def record_response(trends: TrendHandles, response: Any) -> None:
    """
    Record one completed response into the run's trends.

    Args:
        trends: Handles returned by
            :func:`~performance.metrics.register_trends`.
        response: A Locust/requests ``Response`` object.
    """
    trends.response_length.add(_response_length(response))
    trends.request_time.add(_elapsed_ms(response))


def post_query(
    client: HttpSession,
    trends: TrendHandles,
    path: str,
    payload: dict[str, Any],
    *,
    name: str,
    timeout: float | None = None,
) -> bool:
    """
    POST a query and record its size and duration.

    Observations are recorded for failed responses too, so that slow
    error paths still show up in the request-time trend.

    Args:
        client: The Locust HTTP session.
        trends: Handles to record into.
        path: Endpoint path, e.g. ``"/slice"``.
        payload: JSON-serialisable query body.
        name: Statistics name for the HTTP request itself.
        timeout: Optional client timeout in seconds.

    Returns:
        ``True`` if the server answered ``200 OK``, ``False`` otherwise.
    """
    with client.post(
        path,
        json=payload,
        name=name,
        timeout=timeout,
        catch_response=True,
    ) as response:
        record_response(trends, response)

        if response.status_code != 200:
            logger.debug("%s returned %s", name, response.status_code)
            response.failure(f"Expected 200, got {response.status_code}")
            return False

        response.success()
        return True


def slice_payload(vds: str, sas: str, *, direction: str, lineno: int) -> dict[str, Any]:
    """Build a ``/slice`` request body."""
    return {
        "vds": vds,
        "direction": direction,
        "lineno": lineno,
        "sas": sas,
    }


def fence_payload(
    vds: str,
    sas: str,
    coordinates: list[list[float]],
    *,
    coordinate_system: str,
) -> dict[str, Any]:
    """Build a ``/fence`` request body."""
    return {
        "vds": vds,
        "coordinate_system": coordinate_system,
        "coordinates": coordinates,
        "sas": sas,
    }


def random_slice_payload(settings: type[Config]) -> dict[str, Any]:
    """
    Build a slice query for a random line along the configured axis.

    Line numbers are drawn from ``[0, SLICE_LINENO_MAX]`` so that
    consecutive requests rarely hit the same cached slice.
    """
    return slice_payload(
        settings.VDS,
        settings.SAS,
        direction=settings.SLICE_DIRECTION,
        lineno=random.randint(0, settings.SLICE_LINENO_MAX),
    )


def random_fence_payload(settings: type[Config], points: int = 10) -> dict[str, Any]:
    """
    Build a fence query along a random straight line.

    The fence runs between two random corners of the
    ``SLICE_LINENO_MAX``-sized square, sampled at *points* evenly spaced
    positions.
    """
    limit = settings.SLICE_LINENO_MAX
    x0, y0 = random.uniform(0, limit), random.uniform(0, limit)
    x1, y1 = random.uniform(0, limit), random.uniform(0, limit)

    steps = max(points - 1, 1)
    coordinates = [
        [x0 + (x1 - x0) * i / steps, y0 + (y1 - y0) * i / steps]
        for i in range(points)
    ]
    return fence_payload(
        settings.VDS,
        settings.SAS,
        coordinates,
        coordinate_system=settings.FENCE_COORDINATE_SYSTEM,
    )
