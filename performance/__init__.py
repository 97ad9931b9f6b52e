"""
Performance testing package (Locust-based).

Contains Locust user classes, trend-metric registration, environment
driven latency thresholds, and a CI threshold checker that together
provide load and performance regression testing for the seismic query
service's ``/slice`` and ``/fence`` endpoints.

Key Concepts Demonstrated:
- Custom trend metrics layered on Locust's request statistics
- Latency thresholds configured per run through environment variables
- Tagged scenarios so CI can run subsets via ``--tags``
- CSV-based threshold gates for automated pass/fail decisions
"""
