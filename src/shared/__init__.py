"""Shared utilities and configuration."""

from src.shared.config import Config
from src.shared.utils import format_utc, parse_timestamp, setup_logger, to_utc

__all__ = ["Config", "setup_logger", "to_utc", "parse_timestamp", "format_utc"]
