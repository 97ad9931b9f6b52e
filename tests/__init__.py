"""
Test suite for the load-test metrics package.

This package contains:
- unit/: fast tests of trend registration, thresholds, helpers, scenarios
  and the CSV threshold gate; no running service is required
"""
