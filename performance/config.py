"""
Performance suite configuration.

Every knob the load test exposes is an environment variable, so that CI
jobs and operators can tune a run without editing code.  Lookups go
through :func:`resolve`, which treats an empty value the same as an unset
one and falls back to the given default.

Configuration classes follow the same inheritance layout as the service
configs: a shared ``Config`` base plus per-environment overrides, selected
by :func:`get_config` from the ``PERF_ENV`` variable.

Key Concepts Demonstrated:
- One fallback rule for every environment-derived value
- Class-based configuration with inheritance for DRY defaults
- Environment-variable overrides for 12-factor deployability
"""

from __future__ import annotations

import logging
import os
from typing import Any

# Environment variable names read by the metrics helper.
TEST_NAME_ENV = "TEST_NAME"
MEDIAN_THRESHOLD_ENV = "MEDTIME"
P95_THRESHOLD_ENV = "MAXTIME"

logger = logging.getLogger(__name__)


def resolve(env_key: str, default: Any) -> Any:
    """
    Return the value of *env_key*, or *default* when unset or empty.

    The environment value is returned as the raw string; no coercion is
    attempted.  Callers that need a number convert it themselves.

    Args:
        env_key: Name of the environment variable.
        default: Value returned when the variable is missing or ``""``.

    Returns:
        The raw environment string, or *default*.
    """
    value = os.environ.get(env_key)
    return value if value else default


def resolve_int(env_key: str, default: int) -> int:
    """
    Return *env_key* as an ``int``, or *default* when unset or malformed.

    Settings are read at import time, so a bad value must not stop the
    package (and its threshold resolvers) from loading.
    """
    value = resolve(env_key, None)
    if value is None:
        return default

    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", env_key, value, default)
        return default


class Config:
    """
    Base configuration shared by every run profile.

    ``VDS`` and ``SAS`` identify the dataset under test and the token used
    to read it.  Both are passed verbatim in each query body.
    """

    # Dataset URL and its shared access signature.
    VDS: str = resolve("VDS", "")
    SAS: str = resolve("SAS", "")

    # Slice axis and the upper bound for randomly chosen line numbers.
    SLICE_DIRECTION: str = resolve("SLICE_DIRECTION", "inline")
    SLICE_LINENO_MAX: int = resolve_int("SLICE_LINENO_MAX", 100)

    # Coordinate system used for fence queries.
    FENCE_COORDINATE_SYSTEM: str = resolve("FENCE_COORDINATE_SYSTEM", "ilxl")

    # Seconds a single query may take before the client gives up.
    REQUEST_TIMEOUT: int = resolve_int("REQUEST_TIMEOUT", 120)


class DevelopmentConfig(Config):
    """Local runs against a developer's own instance."""

    DEBUG: bool = True


class CIConfig(Config):
    """
    Pipeline runs.

    Uses a shorter client timeout so that a hung backend fails the job
    instead of stalling it.
    """

    DEBUG: bool = False
    REQUEST_TIMEOUT: int = resolve_int("CI_REQUEST_TIMEOUT", 60)


# Lookup table mapping environment name strings to their config classes.
config = {
    "development": DevelopmentConfig,
    "ci": CIConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Return the configuration class for the given run profile.

    Args:
        env: ``"development"`` or ``"ci"``.  When *None*, the ``PERF_ENV``
            environment variable is consulted, falling back to
            ``"development"``.

    Returns:
        The ``Config`` subclass for the profile, or ``DevelopmentConfig``
        if the key is unrecognised.
    """
    if env is None:
        env = resolve("PERF_ENV", "development")
    return config.get(env, config["default"])
