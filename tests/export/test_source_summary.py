"""Tests for the source-metadata summary."""

import json

import pandas as pd
import pytest

from src.aggregation.models import PolicyDocument, RawSource
from src.export.source_summary import (
    SUMMARY_COLUMNS,
    build_source_summary,
    write_source_summary,
)


@pytest.fixture
def documents() -> list[PolicyDocument]:
    return [
        PolicyDocument(
            id=1,
            sources=[
                RawSource("COGR Executive Order Tracker", "https://www.cogr.edu", None, "2024-02-15"),
                RawSource("NIH Policy Notices", "https://grants.nih.gov", None, "2024-02-20T10:30:00Z"),
            ],
        ),
        PolicyDocument(
            id=2,
            sources=[
                RawSource("COGR Executive Order Tracker", "https://www.cogr.edu/other", None, "2024-03-01"),
                RawSource("Office of Compliance Review", None, None, "not a date"),
            ],
        ),
        PolicyDocument(id=3),
    ]


class TestBuildSourceSummary:
    """Test suite for build_source_summary."""

    def test_one_row_per_source(self, documents):
        df = build_source_summary(documents)

        assert list(df.columns) == SUMMARY_COLUMNS
        assert sorted(df["source_name"]) == [
            "COGR Executive Order Tracker",
            "NIH Policy Notices",
            "Office of Compliance Review",
        ]

    def test_counts_and_latest_fetch(self, documents):
        df = build_source_summary(documents).set_index("source_name")

        cogr = df.loc["COGR Executive Order Tracker"]
        assert cogr["abbreviation"] == "COGR"
        assert cogr["order_count"] == 2
        assert cogr["source_url"] == "https://www.cogr.edu"
        assert cogr["last_fetch_date"] == "2024-03-01T05:00:00Z"

        assert df.loc["NIH Policy Notices", "last_fetch_date"] == "2024-02-20T10:30:00Z"

    def test_unparsable_fetch_date_gives_none(self, documents):
        df = build_source_summary(documents).set_index("source_name")

        row = df.loc["Office of Compliance Review"]
        assert row["abbreviation"] == "OCR"
        assert row["last_fetch_date"] is None

    def test_same_source_twice_in_one_document_counted_once(self):
        document = PolicyDocument(
            id=1,
            sources=[RawSource("NIH Policy Notices"), RawSource("NIH Policy Notices")],
        )

        df = build_source_summary([document])

        assert df.loc[0, "order_count"] == 1

    def test_empty_batch(self):
        df = build_source_summary([PolicyDocument(id=1)])

        assert df.empty
        assert list(df.columns) == SUMMARY_COLUMNS


class TestWriteSourceSummary:
    """Test suite for write_source_summary."""

    def test_json_records(self, documents, tmp_path):
        path = write_source_summary(build_source_summary(documents), tmp_path / "sources.json")

        rows = json.loads(path.read_text(encoding="utf-8"))
        assert len(rows) == 3
        assert set(rows[0]) == set(SUMMARY_COLUMNS)

    def test_csv(self, documents, tmp_path):
        path = write_source_summary(
            build_source_summary(documents), tmp_path / "out" / "sources.csv", format="csv"
        )

        df = pd.read_csv(path)
        assert list(df.columns) == SUMMARY_COLUMNS
        assert len(df) == 3

    def test_parquet(self, documents, tmp_path):
        path = write_source_summary(
            build_source_summary(documents), tmp_path / "sources.parquet", format="parquet"
        )

        df = pd.read_parquet(path)
        assert df["order_count"].tolist() == [2, 1, 1]

    def test_invalid_format_raises(self, documents, tmp_path):
        with pytest.raises(ValueError, match="Invalid format"):
            write_source_summary(build_source_summary(documents), tmp_path / "s.xml", format="xml")
