"""
Validate Locust CSV output against the run's latency thresholds.

After a Locust run completes, CI invokes this script to decide whether
the build passes or fails.  It reads the ``*_stats.csv`` file Locust
generates and checks three things:

- **Median request time (ms)** of the request-time trend against
  ``MEDTIME`` (default 30000)
- **P95 request time (ms)** of the same trend against ``MAXTIME``
  (default 60000)
- **Error rate (%)** of the HTTP request rows (trend rows and the
  ``Aggregated`` total excluded) against ``max_error_rate_percent`` in
  :file:`thresholds.yml`

Latencies must stay strictly below their limits; the error rate may
equal its limit.

Exit codes follow a three-state convention so that CI can distinguish
"thresholds breached" from "script crashed":

- ``0`` — all thresholds passed
- ``1`` — at least one threshold was breached
- ``2`` — the script itself failed (missing file, bad YAML, non-numeric
  threshold, etc.)

Usage::

    python -m performance.check_thresholds --stats results/run_stats.csv
"""

from __future__ import annotations

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from performance.metrics import (
    TREND_REQUEST_TYPE,
    median_threshold,
    p95_threshold,
    request_time_metric_name,
)

logger = logging.getLogger(__name__)

# Three-state exit codes so CI can tell "test failed" from "script crashed".
EXIT_PASS = 0
EXIT_THRESHOLD_BREACH = 1
EXIT_SCRIPT_ERROR = 2

DEFAULT_THRESHOLDS_PATH = Path(__file__).resolve().parent / "thresholds.yml"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the threshold checker."""
    parser = argparse.ArgumentParser(
        description="Check Locust stats CSV against performance thresholds."
    )
    parser.add_argument(
        "--stats",
        required=True,
        type=Path,
        help="Path to Locust *_stats.csv file",
    )
    parser.add_argument(
        "--thresholds",
        type=Path,
        default=DEFAULT_THRESHOLDS_PATH,
        help="Path to thresholds YAML file",
    )
    parser.add_argument(
        "--metric",
        default=None,
        help="Trend name to check (default: derived from TEST_NAME)",
    )
    return parser.parse_args(argv)


def _load_max_error_rate(path: Path) -> float:
    """
    Read the error-rate limit from a YAML file.

    Raises:
        ValueError: If ``max_error_rate_percent`` is missing or non-numeric.
    """
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    try:
        return float(data["max_error_rate_percent"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError("Thresholds file must define numeric max_error_rate_percent") from exc


def _parse_float(value: Any, field_name: str) -> float:
    """
    Coerce *value* to ``float``, stripping ``%`` suffixes if present.

    Raises:
        ValueError: If the value is missing, empty, or non-numeric.
    """
    if value is None:
        raise ValueError(f"Missing field: {field_name}")

    text = str(value).strip().replace("%", "")
    if text == "":
        raise ValueError(f"Empty value for field: {field_name}")

    try:
        return float(text)
    except ValueError as exc:
        raise ValueError(f"Non-numeric value for {field_name}: {value}") from exc


def _load_rows(stats_path: Path) -> list[dict[str, str]]:
    with stats_path.open("r", encoding="utf-8", newline="") as handle:
        return list(csv.DictReader(handle))


def _find_row(rows: list[dict[str, str]], name: str) -> dict[str, str]:
    """
    Return the first row whose ``Name`` (or ``Type``) is *name*.

    Raises:
        ValueError: If no such row exists.
    """
    for row in rows:
        if row.get("Name") == name or row.get("Type") == name:
            return row
    raise ValueError(f"Could not find {name!r} row in stats CSV")


def _extract_percentile(row: dict[str, str], candidates: tuple[str, ...], label: str) -> float:
    """
    Read the first populated column out of *candidates*.

    Different Locust versions label percentile columns differently, so
    several known variants are tried in order.
    """
    for candidate in candidates:
        if candidate in row and row[candidate] not in (None, ""):
            return _parse_float(row[candidate], candidate)
    raise ValueError(f"Could not find {label} column in stats CSV")


def _extract_median_ms(row: dict[str, str]) -> float:
    return _extract_percentile(row, ("50%", "Median Response Time", "median"), "median")


def _extract_p95_ms(row: dict[str, str]) -> float:
    return _extract_percentile(row, ("95%", "95%ile", "95th percentile", "p95"), "p95")


def _is_request_row(row: dict[str, str]) -> bool:
    """Return ``True`` for per-endpoint HTTP rows, skipping trends and totals."""
    return row.get("Type") != TREND_REQUEST_TYPE and row.get("Name") != "Aggregated"


def _compute_error_rate_percent(rows: list[dict[str, str]]) -> float:
    """
    Compute ``Failure Count / Request Count × 100`` over the HTTP rows.

    Trend observations are fired as ``request`` events, so Locust counts
    them as successful requests in its ``Aggregated`` row.  The totals are
    therefore summed from the per-endpoint rows instead.

    Raises:
        ValueError: If counts are missing or the request total is zero.
    """
    request_count = 0.0
    failure_count = 0.0
    for row in rows:
        if not _is_request_row(row):
            continue
        request_count += _parse_float(row.get("Request Count"), "Request Count")
        failure_count += _parse_float(row.get("Failure Count"), "Failure Count")

    if request_count <= 0:
        raise ValueError("Request Count must be > 0 for threshold checks")

    return (failure_count / request_count) * 100.0


def evaluate(
    rows: list[dict[str, str]],
    *,
    metric: str,
    max_error_rate: float,
) -> dict[str, dict[str, float | bool]]:
    """
    Compare the stats rows against every threshold.

    Latency limits come from ``MEDTIME`` / ``MAXTIME`` at call time.

    Args:
        rows: Parsed rows of a Locust stats CSV.
        metric: Name of the request-time trend row.
        max_error_rate: Highest acceptable error rate in percent.

    Returns:
        A mapping of check label to ``{"actual", "limit", "passed"}``.

    Raises:
        ValueError: If a row, column, or threshold cannot be read.
    """
    trend_row = _find_row(rows, metric)

    median_limit = _parse_float(median_threshold(), "MEDTIME")
    p95_limit = _parse_float(p95_threshold(), "MAXTIME")

    median_ms = _extract_median_ms(trend_row)
    p95_ms = _extract_p95_ms(trend_row)
    error_rate = _compute_error_rate_percent(rows)

    return {
        "Median time (ms)": {
            "actual": median_ms,
            "limit": median_limit,
            "passed": median_ms < median_limit,
        },
        "P95 time (ms)": {
            "actual": p95_ms,
            "limit": p95_limit,
            "passed": p95_ms < p95_limit,
        },
        "Error rate (%)": {
            "actual": error_rate,
            "limit": max_error_rate,
            "passed": error_rate <= max_error_rate,
        },
    }


def _print_summary(metric: str, results: dict[str, dict[str, float | bool]], passed: bool) -> None:
    """Print a human-readable results table to stdout for CI logs."""
    print(f"Performance Threshold Check: {metric}")
    print("-" * 60)
    print(f"{'Metric':<22}{'Actual':>12}{'Limit':>14}{'Status':>12}")
    print("-" * 60)
    for label, result in results.items():
        status = "PASS" if result["passed"] else "FAIL"
        print(f"{label:<22}{result['actual']:>12.2f}{result['limit']:>14.2f}{status:>12}")
    print("-" * 60)
    print(f"Overall: {'PASS' if passed else 'FAIL'}")


def main(argv: list[str] | None = None) -> int:
    """
    Entry point: load thresholds, parse CSV, compare, and print results.

    Returns:
        ``EXIT_PASS`` (0) if all thresholds are met,
        ``EXIT_THRESHOLD_BREACH`` (1) if any are exceeded, or
        ``EXIT_SCRIPT_ERROR`` (2) on unexpected failures.
    """
    args = parse_args(argv)
    metric = args.metric or request_time_metric_name()

    try:
        max_error_rate = _load_max_error_rate(args.thresholds)
        rows = _load_rows(args.stats)
        results = evaluate(rows, metric=metric, max_error_rate=max_error_rate)
    except Exception as exc:
        logger.debug("Threshold check aborted", exc_info=True)
        print(f"Threshold check failed: {exc}", file=sys.stderr)
        return EXIT_SCRIPT_ERROR

    passed = all(result["passed"] for result in results.values())
    _print_summary(metric, results, passed)
    return EXIT_PASS if passed else EXIT_THRESHOLD_BREACH


if __name__ == "__main__":
    raise SystemExit(main())
