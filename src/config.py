"""
Configuration loader for the drift gate Lambda functions.
"""

import os
from dataclasses import dataclass
from typing import Optional

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Configuration class shared by the drift check and callback handlers."""

    correlation_table: str
    aws_region: Optional[str] = None
    log_level: str = "INFO"
    max_retries: int = 3
    timeout_seconds: int = 30
    require_scan_id_match: bool = False


def _parse_int(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


def _parse_bool(name: str, default: str) -> bool:
    raw = os.environ.get(name, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{name} must be a boolean, got '{raw}'")


def load_config() -> Config:
    """
    Loads and validates configuration for the Lambda functions.

    Returns:
        Config object with validated settings

    Raises:
        ValueError: If required configuration is missing or invalid
    """
    # Required configuration
    correlation_table = os.environ.get("DDB_TABLE")
    if not correlation_table:
        raise ValueError("DDB_TABLE environment variable is required")

    # Optional configuration with defaults
    aws_region = os.environ.get("AWS_REGION")
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ValueError(
            f"LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}, got '{log_level}'"
        )
    max_retries = _parse_int("MAX_RETRIES", "3")
    timeout_seconds = _parse_int("TIMEOUT_SECONDS", "30")
    require_scan_id_match = _parse_bool("REQUIRE_SCAN_ID_MATCH", "false")

    return Config(
        correlation_table=correlation_table,
        aws_region=aws_region,
        log_level=log_level,
        max_retries=max_retries,
        timeout_seconds=timeout_seconds,
        require_scan_id_match=require_scan_id_match,
    )
