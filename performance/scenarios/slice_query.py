"""
Slice-heavy Locust scenario.

Defines :class:`SliceUser`, which requests full slices through the
dataset at random line numbers.  Slices are the largest responses the
service produces, so this scenario drives the response-length trend.

The weight distribution (total weight 10) is:

- **90 % slice queries** — POST ``/slice`` with a random line number
- **10 % health checks** — GET ``/health``
"""

from __future__ import annotations

from locust import between, tag, task

from performance.helpers import random_slice_payload
from performance.scenarios.base import MetricsUser


@tag("slice")
class SliceUser(MetricsUser):
    """Fetch random slices with a short think-time between requests."""

    wait_time = between(0.5, 2)

    @task(9)
    def fetch_slice(self) -> None:
        """Request one slice and record its size and duration."""
        self._query("/slice", random_slice_payload(self.settings), name="/slice [POST]")

    @task(1)
    def health(self) -> None:
        """Check that the service is still answering."""
        with self.client.get(
            "/health",
            name="/health [GET]",
            catch_response=True,
        ) as response:
            if response.status_code != 200:
                response.failure(f"Expected 200, got {response.status_code}")
                return

            response.success()
