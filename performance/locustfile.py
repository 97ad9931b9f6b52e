# ruff: noqa: E402
"""
Locust entrypoint for performance tests.

This is the file that the ``locust`` CLI discovers and loads.  It
imports every concrete user class and wires up an ``init`` event
listener that registers the run's trend metrics, hands them to the user
classes, and maps ``--tags`` values to user classes.

Usage examples::

    # Run both scenarios:
    TEST_NAME="nightly slice" VDS=... SAS=... \\
        locust -f performance/locustfile.py --host http://localhost:8080

    # Run only slice traffic and write CSV stats for the threshold gate:
    locust -f performance/locustfile.py --tags slice --headless \\
        --csv results/run ...

Key Concepts Demonstrated:
- Locust ``events.init`` hook for one-time metric registration
- Dynamic user-class filtering by tag
- ``sys.path`` manipulation so imports resolve regardless of the
  working directory Locust is launched from
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from locust import events

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from performance.metrics import register_trends
from performance.scenarios.base import MetricsUser
from performance.scenarios.fence_query import FenceUser
from performance.scenarios.slice_query import SliceUser

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

__all__ = ["SliceUser", "FenceUser"]

# Maps CLI ``--tags`` values to concrete user classes.  When no tags
# are provided Locust spawns all classes in ``__all__``.
TAG_TO_USER_CLASS = {
    "slice": SliceUser,
    "fence": FenceUser,
}


def _select_user_classes(environment) -> None:
    """Narrow ``environment.user_classes`` to the requested ``--tags``."""
    parsed_options = getattr(environment, "parsed_options", None)
    selected_tags = set(getattr(parsed_options, "tags", None) or [])
    if not selected_tags:
        return

    selected_classes = [
        user_class
        for tag, user_class in TAG_TO_USER_CLASS.items()
        if tag in selected_tags
    ]
    if selected_classes:
        environment.user_classes = selected_classes


@events.init.add_listener
def _setup_run(environment, **_kwargs):
    """
    Register trends once and bind them to every scenario.

    Runs before any user is spawned.  A registration failure propagates
    and aborts start-up.
    """
    _select_user_classes(environment)

    trends = register_trends(environment)
    for user_class in environment.user_classes:
        if issubclass(user_class, MetricsUser):
            user_class.bind_trends(trends)

    logger.info("Recording request times into %s", trends.request_time.name)
