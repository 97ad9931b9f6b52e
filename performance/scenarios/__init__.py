"""
Locust scenario user classes.

Each module in this package defines one Locust ``HttpUser`` subclass
that models a specific traffic pattern:

- :mod:`.slice_query` — slice requests along one axis, with health checks
- :mod:`.fence_query` — arbitrary fence requests

All concrete scenarios inherit from :class:`.base.MetricsUser`, which
holds the run's trend handles and records every query into them.
"""
