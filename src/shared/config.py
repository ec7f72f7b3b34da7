"""Configuration management for the executive order aggregation engine."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = Path(__file__).parent.parent.parent
    DATA_DIR = Path(os.getenv("EO_DATA_DIR", str(ROOT_DIR / "data")))
    LOGS_DIR = Path(os.getenv("EO_LOGS_DIR", str(ROOT_DIR / "logs")))
    EXPORT_DIR = Path(os.getenv("EO_EXPORT_DIR", str(DATA_DIR / "export")))
    INPUT_FILE = Path(os.getenv("EO_INPUT_FILE", str(DATA_DIR / "raw" / "executive_orders.json")))

    # Runtime settings
    LOG_LEVEL: str = os.getenv("EO_LOG_LEVEL", "INFO")
    MAX_WORKERS: int = int(os.getenv("EO_MAX_WORKERS", "1"))

    # Aggregation thresholds
    KEY_PERSPECTIVE_MIN_LENGTH: int = int(os.getenv("EO_KEY_PERSPECTIVE_MIN_LENGTH", "100"))
    KEY_PERSPECTIVE_TEASER_LENGTH: int = int(os.getenv("EO_KEY_PERSPECTIVE_TEASER_LENGTH", "150"))
    CONTENT_FINGERPRINT_WIDTH: int = int(os.getenv("EO_CONTENT_FINGERPRINT_WIDTH", "50"))

    # Export settings
    SOURCE_SUMMARY_FORMAT: str = os.getenv("EO_SOURCE_SUMMARY_FORMAT", "json")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration values."""
        if cls.MAX_WORKERS < 1:
            raise ValueError(f"EO_MAX_WORKERS must be >= 1, got {cls.MAX_WORKERS}")
        if cls.CONTENT_FINGERPRINT_WIDTH < 1:
            raise ValueError(
                f"EO_CONTENT_FINGERPRINT_WIDTH must be >= 1, got {cls.CONTENT_FINGERPRINT_WIDTH}"
            )
        if cls.SOURCE_SUMMARY_FORMAT not in ("json", "csv", "parquet"):
            raise ValueError(
                f"Invalid EO_SOURCE_SUMMARY_FORMAT '{cls.SOURCE_SUMMARY_FORMAT}'. "
                "Must be 'json', 'csv' or 'parquet'."
            )

    @property
    def log_file(self) -> Path:
        """Default log file for export runs."""
        return self.LOGS_DIR / "export_orders.log"


config = Config()
