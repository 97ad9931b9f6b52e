"""
Fence Locust scenario.

Defines :class:`FenceUser`, which requests values along random straight
fences through the dataset.  Fence responses are small compared to
slices, so latency rather than payload size dominates this scenario.
"""

from __future__ import annotations

from locust import between, tag, task

from performance.helpers import random_fence_payload
from performance.scenarios.base import MetricsUser


@tag("fence")
class FenceUser(MetricsUser):
    """Fetch random fences with the same think-time as the slice scenario."""

    wait_time = between(0.5, 2)

    # Number of sample points along each generated fence.
    fence_points = 50

    @task
    def fetch_fence(self) -> None:
        """Request one fence and record its size and duration."""
        payload = random_fence_payload(self.settings, points=self.fence_points)
        self._query("/fence", payload, name="/fence [POST]")
