"""
Configuration module for loading environment variables.
All tunables are read once at import time; legacy flag names are still honored.
"""
import os
import logging
import threading
from typing import Optional


logger = logging.getLogger(__name__)

# Absolute ceiling for recommendation batches, regardless of configuration
MAX_BATCH_SIZE_LIMIT = 500

# Legacy environment variable names for the batch size, newest first
LEGACY_BATCH_SIZE_VARS = ("AWSCOST_MAX_BATCH", "MAX_BATCH_SIZE")


def _read_batch_size() -> int:
    """
    Read the recommendation batch size from the environment.

    AWSCOST_MAX_BATCH_SIZE wins over the legacy names. Invalid or
    non-positive values fall back to the default of 100; values above the
    hard limit are capped.
    """
    raw: Optional[str] = os.getenv("AWSCOST_MAX_BATCH_SIZE")
    if raw is None:
        for name in LEGACY_BATCH_SIZE_VARS:
            raw = os.getenv(name)
            if raw is not None:
                break
    if raw is None:
        return 100
    try:
        value = int(raw)
    except ValueError:
        return 100
    if value <= 0:
        return 100
    return min(value, MAX_BATCH_SIZE_LIMIT)


def _read_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration loaded from environment variables."""

    # Region this service prices for. Requests for other regions are rejected.
    AWS_REGION: str = os.getenv("AWSCOST_REGION", os.getenv("AWS_REGION", "us-east-1"))

    # Pricing Configuration
    AWS_PRICING_REGION: str = os.getenv("AWS_PRICING_REGION", "us-east-1")
    PRICING_CACHE_TTL_SECONDS: int = int(os.getenv("PRICING_CACHE_TTL_SECONDS", "86400"))  # 24 hours
    PRICING_CACHE_DIR: str = os.getenv("AWSCOST_PRICING_CACHE_DIR", "pricing-cache/aws")
    PRICING_SOURCE: str = os.getenv("AWSCOST_PRICING_SOURCE", "static")  # static | bulk | api
    HOURS_PER_MONTH: int = 730  # Standard assumption: 24/7 operation
    DEV_HOURS_PER_MONTH: int = 160  # 8 hours/day, 20 days/month

    # Recommendations
    MAX_BATCH_SIZE: int = _read_batch_size()
    STRICT_VALIDATION: bool = _read_bool("AWSCOST_STRICT_VALIDATION")

    LOG_LEVEL: str = os.getenv("AWSCOST_LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """
        Validates that required configuration values are set.

        Raises:
            ValueError: If any required configuration is missing or invalid.
        """
        if not cls.AWS_REGION:
            raise ValueError("AWSCOST_REGION is required")
        if cls.PRICING_SOURCE not in ("static", "bulk", "api"):
            raise ValueError(
                f"AWSCOST_PRICING_SOURCE must be one of static, bulk, api (got: {cls.PRICING_SOURCE})"
            )
        if cls.HOURS_PER_MONTH <= 0 or cls.DEV_HOURS_PER_MONTH <= 0:
            raise ValueError("Hours per month must be positive")
        if cls.DEV_HOURS_PER_MONTH > cls.HOURS_PER_MONTH:
            raise ValueError("DEV_HOURS_PER_MONTH cannot exceed HOURS_PER_MONTH")


config = Config()


_deprecation_lock = threading.Lock()
_deprecation_warned = False


def warn_deprecated_settings() -> bool:
    """
    Log a one-time warning when legacy batch size variables are set.

    Safe to call from any number of threads; the warning is emitted at most
    once per process.

    Returns:
        True if this call emitted the warning, False otherwise
    """
    global _deprecation_warned
    legacy_in_use = [name for name in LEGACY_BATCH_SIZE_VARS if os.getenv(name) is not None]
    if not legacy_in_use:
        return False
    with _deprecation_lock:
        if _deprecation_warned:
            return False
        _deprecation_warned = True
    logger.warning(
        "Deprecated environment variable(s) %s in use; set AWSCOST_MAX_BATCH_SIZE instead",
        ", ".join(legacy_in_use),
    )
    return True


def _reset_deprecation_warning() -> None:
    """Reset the one-time warning flag. Used by tests."""
    global _deprecation_warned
    with _deprecation_lock:
        _deprecation_warned = False
