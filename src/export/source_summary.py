"""Source-metadata summary across a document batch.

One row per source name:
    source_name: Source name as fetched
    abbreviation: Stable short code
    source_url: First known URL for the source
    order_count: Number of distinct documents referencing the source
    last_fetch_date: Most recent fetch date (ISO 8601 UTC) or None
"""

from pathlib import Path

import pandas as pd

from src.aggregation.models import PolicyDocument
from src.aggregation.source_normalizer import SourceNormalizer
from src.shared.utils import format_utc, parse_timestamp

SUMMARY_COLUMNS = ["source_name", "abbreviation", "source_url", "order_count", "last_fetch_date"]


def build_source_summary(documents: list[PolicyDocument]) -> pd.DataFrame:
    """Summarize which sources the batch references and how recently they were fetched."""
    rows = [
        {
            "source_name": source.source_name,
            "source_url": source.source_url,
            "document_key": position,
            "fetch_date": source.fetch_date,
        }
        for position, document in enumerate(documents)
        for source in document.sources
    ]
    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df = pd.DataFrame(rows)
    df["_fetched"] = pd.to_datetime(
        pd.Series([parse_timestamp(v) for v in df["fetch_date"]], index=df.index, dtype=object),
        utc=True,
    )

    summary = (
        df.groupby("source_name", sort=True)
        .agg(
            source_url=("source_url", "first"),
            order_count=("document_key", "nunique"),
            _last_fetched=("_fetched", "max"),
        )
        .reset_index()
    )

    summary["last_fetch_date"] = [
        None if pd.isna(ts) else format_utc(ts.to_pydatetime()) for ts in summary["_last_fetched"]
    ]
    summary["abbreviation"] = summary["source_name"].map(SourceNormalizer.abbreviate)
    summary["order_count"] = summary["order_count"].astype(int)

    return summary[SUMMARY_COLUMNS]


def write_source_summary(df: pd.DataFrame, path: Path, format: str = "json") -> Path:
    """Write the summary as JSON records, CSV or Parquet.

    Raises:
        ValueError: If format is invalid.
    """
    if format not in ("json", "csv", "parquet"):
        raise ValueError(f"Invalid format '{format}'. Must be 'json', 'csv' or 'parquet'.")

    path.parent.mkdir(parents=True, exist_ok=True)
    if format == "json":
        df.to_json(path, orient="records", indent=2, force_ascii=False)
    elif format == "csv":
        df.to_csv(path, index=False, encoding="utf-8")
    else:  # parquet
        df.to_parquet(path, index=False, engine="pyarrow")
    return path
