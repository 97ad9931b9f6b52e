"""
Shared abstract Locust user class for performance scenarios.

:class:`MetricsUser` owns what every scenario needs: the trend handles
registered for the run, the active configuration class, and a query
primitive that records each response into those trends.  Concrete user
classes (e.g. :class:`~performance.scenarios.slice_query.SliceUser`) only
declare Locust ``@task`` methods that delegate to :meth:`_query`.

Key Concepts Demonstrated:
- Abstract Locust base classes for DRY scenario authoring
- Trend handles bound once at ``init`` and passed to every request
- ``catch_response=True`` for in-band response validation
"""

from __future__ import annotations

from typing import Any

from locust import HttpUser
from locust.exception import StopUser

from performance.config import Config, get_config
from performance.helpers import post_query
from performance.metrics import TrendHandles


class MetricsUser(HttpUser):
    """
    Base user that records every query into the run's trends.

    ``abstract = True`` tells Locust not to spawn this class directly.

    Attributes:
        trends: Handles bound by the locustfile's ``init`` listener.
            ``None`` until then.
        settings: Configuration class resolved at start.
    """

    abstract = True

    trends: TrendHandles | None = None
    settings: type[Config]

    @classmethod
    def bind_trends(cls, trends: TrendHandles) -> None:
        """Attach the run's trend handles to this user class."""
        cls.trends = trends

    def on_start(self) -> None:
        """Resolve configuration and refuse to run without trends."""
        if self.trends is None:
            raise StopUser("Trend metrics were not registered for this run")
        self.settings = get_config()

    def _query(self, path: str, payload: dict[str, Any], *, name: str) -> bool:
        """POST *payload* to *path* and record the response."""
        return post_query(
            self.client,
            self.trends,
            path,
            payload,
            name=name,
            timeout=self.settings.REQUEST_TIMEOUT,
        )
