"""Shared utility functions for the executive order aggregation engine."""

import logging
import os
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytz


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str = logging.INFO
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Components are built once per run, so only attach handlers the first time
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        target = os.path.abspath(log_file)
        attached = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in logger.handlers
        )
        if not attached:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def to_utc(dt: datetime, from_tz: str = "US/Eastern") -> datetime:
    """Convert datetime to UTC."""
    if dt.tzinfo is None:
        dt = pytz.timezone(from_tz).localize(dt)
    return dt.astimezone(pytz.UTC)


def parse_timestamp(value: str | None, from_tz: str = "US/Eastern") -> datetime | None:
    """Parse a source fetch date into an aware UTC datetime.

    Fetch dates arrive as free-form strings ("2024-02-15", "2024-02-15 10:30:00",
    ISO 8601 with offset). Naive values are assumed to be in ``from_tz``.

    Args:
        value: Raw date string.
        from_tz: Timezone applied to naive values.

    Returns:
        UTC datetime, or None when the value is empty or unparsable.
    """
    if not value or not isinstance(value, str):
        return None

    parsed = pd.to_datetime(value, errors="coerce")
    if pd.isna(parsed):
        return None

    return to_utc(parsed.to_pydatetime(), from_tz=from_tz)


def format_utc(dt: datetime | None) -> str | None:
    """Format a UTC datetime as ISO 8601 (YYYY-MM-DDTHH:MM:SSZ)."""
    if dt is None:
        return None
    return dt.astimezone(pytz.UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
