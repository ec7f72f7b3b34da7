"""Tests for OrderExporter."""

import json
import logging
import os
from unittest.mock import patch

import pytest

from src.aggregation.impact_aggregator import DEFAULT_UNIVERSITY_IMPACT_AREAS
from src.aggregation.models import PolicyDocument, RawSource
from src.export.exporter import OrderExporter, order_file_stem

AGGREGATE_FIELDS = {
    "sources",
    "source_insights",
    "source_analysis",
    "simplified_impact_areas",
    "institution_specific_guidance",
    "source_aware_impact_analysis",
    "integrated_analysis",
}


@pytest.fixture
def exporter(tmp_path) -> OrderExporter:
    return OrderExporter(output_dir=tmp_path / "export")


class TestAggregateDocument:
    """Per-document aggregation."""

    def test_all_fields_present(self, exporter, document):
        record = exporter.aggregate_document(document)

        assert AGGREGATE_FIELDS <= set(record)
        assert record["id"] == 1
        assert record["president"] == "Sanders"

    def test_sources_normalized(self, exporter, document):
        record = exporter.aggregate_document(document)
        assert [s["abbreviation"] for s in record["sources"]] == ["COGR", "NIH"]

    def test_consensus_and_guidance(self, exporter, document):
        record = exporter.aggregate_document(document)

        analysis = record["source_aware_impact_analysis"]
        assert analysis["Research Funding"]["consensus_rating"] == "Positive"
        assert analysis["Regulatory Compliance"]["consensus_rating"] == "Negative"

        guidance = record["institution_specific_guidance"]
        assert guidance["R1 Research Universities"]["relevance_score"] == 10
        assert guidance["Community Colleges"]["exemptions"][0]["source"] == "NIH"

    def test_document_without_sources(self, exporter):
        document = PolicyDocument(id=42, title="Quiet Order", impact_level="High")

        record = exporter.aggregate_document(document)

        assert record["sources"] == []
        assert record["institution_specific_guidance"] == {}
        assert record["integrated_analysis"]["source_contributions"] == {}
        assert record["source_insights"]["summary"]["source_count"] == 0
        assert record["source_insights"]["summary"]["has_implementation_details"] is False
        for area in record["source_aware_impact_analysis"].values():
            assert area["consensus_rating"] == "Neutral"
            assert area["perspectives"] == []

    def test_malformed_payload_degrades_to_empty_source(self, exporter):
        document = PolicyDocument(
            id=8,
            impact_level="Low",
            sources=[RawSource("NIH Policy Notices", specific_data="{broken")],
        )

        record = exporter.aggregate_document(document)

        assert record["sources"][0]["metadata"] is None
        assert record["source_insights"]["sources"] == []

    def test_summary_availability_flags(self, exporter):
        document = PolicyDocument.from_dict(
            {"id": 1, "executive_brief": "Short brief", "plain_language_summary": "   "}
        )

        record = exporter.aggregate_document(document)

        assert record["has_executive_brief"] is True
        assert record["has_plain_language_summary"] is False
        assert record["has_comprehensive_analysis"] is False
        assert record["summary_formats_available"] == ["executive_brief"]


class TestAggregateBatch:
    """Batch aggregation and failure isolation."""

    def test_order_preserved_with_threads(self, tmp_path, order_data):
        exporter = OrderExporter(output_dir=tmp_path, max_workers=4)
        documents = [PolicyDocument.from_dict({**order_data, "id": i}) for i in range(12)]

        records = exporter.aggregate_batch(documents)

        assert [r["id"] for r in records] == list(range(12))

    def test_threaded_matches_sequential(self, tmp_path, order_data):
        documents = [PolicyDocument.from_dict({**order_data, "id": i}) for i in range(5)]

        sequential = OrderExporter(output_dir=tmp_path).aggregate_batch(documents)
        threaded = OrderExporter(output_dir=tmp_path, max_workers=3).aggregate_batch(documents)

        assert sequential == threaded

    def test_invalid_worker_count(self, tmp_path):
        with pytest.raises(ValueError, match="max_workers"):
            OrderExporter(output_dir=tmp_path, max_workers=0)

    def test_failed_document_exported_with_defaults(self, exporter, order_data, caplog):
        documents = [PolicyDocument.from_dict({**order_data, "id": i}) for i in (1, 2, 3)]
        real_generate = exporter.guidance_generator.generate

        def flaky(document, extracted):
            if document.id == 2:
                raise RuntimeError("boom")
            return real_generate(document, extracted)

        with patch.object(exporter.guidance_generator, "generate", side_effect=flaky):
            records = exporter.aggregate_batch(documents)

        assert [r["id"] for r in records] == [1, 2, 3]
        failed = records[1]
        assert AGGREGATE_FIELDS <= set(failed)
        assert failed["sources"] == []
        assert failed["institution_specific_guidance"] == {}
        assert [a["name"] for a in failed["simplified_impact_areas"]] == [
            a["name"] for a in DEFAULT_UNIVERSITY_IMPACT_AREAS
        ]
        assert records[2]["institution_specific_guidance"]
        assert "Failed to aggregate document 2: boom" in caplog.text


class TestExport:
    """Artifacts written by export()."""

    def test_artifacts_written(self, exporter, document):
        paths = exporter.export([document, PolicyDocument(id=None, title="Untitled")])

        assert set(paths) == {
            "orders",
            "processed_orders",
            "individual_orders",
            "sources",
            "search_index",
            "manifest",
        }
        for name in ("orders", "processed_orders", "sources", "search_index", "manifest"):
            assert paths[name].exists()

        orders = json.loads(paths["orders"].read_text(encoding="utf-8"))
        assert [o["id"] for o in orders] == [1, None]

        individual = sorted(p.name for p in paths["individual_orders"].iterdir())
        assert individual == ["1.json", "order_1.json"]

    def test_processed_orders_drop_narrative_columns(self, exporter, document):
        paths = exporter.export([document])

        processed = json.loads(paths["processed_orders"].read_text(encoding="utf-8"))[0]
        assert "comprehensive_analysis" not in processed
        assert processed["has_comprehensive_analysis"] is True
        assert "institution_specific_guidance" in processed

    def test_source_summary_and_index(self, exporter, document):
        paths = exporter.export([document])

        sources = json.loads(paths["sources"].read_text(encoding="utf-8"))
        assert [s["abbreviation"] for s in sources] == ["COGR", "NIH"]

        index = json.loads(paths["search_index"].read_text(encoding="utf-8"))
        assert index["president:sanders"] == [1]
        assert index["year:2025"] == [1]

    def test_manifest(self, exporter, document):
        paths = exporter.export([document, PolicyDocument(id=2)])

        manifest = json.loads(paths["manifest"].read_text(encoding="utf-8"))
        assert manifest["pipeline"] == "executive_order_export"
        assert manifest["documents_exported"] == 2
        assert manifest["documents_with_sources"] == 1
        assert manifest["sources"] == ["COGR Executive Order Tracker", "NIH Policy Notices"]

    def test_csv_summary_format(self, tmp_path, document):
        exporter = OrderExporter(output_dir=tmp_path, summary_format="csv")

        paths = exporter.export([document])

        assert paths["sources"].name == "sources.csv"

    def test_empty_batch(self, exporter):
        paths = exporter.export([])

        assert json.loads(paths["orders"].read_text(encoding="utf-8")) == []
        assert json.loads(paths["search_index"].read_text(encoding="utf-8")) == {}

    def test_unsafe_ids_stay_inside_orders_dir(self, tmp_path):
        exporter = OrderExporter(output_dir=tmp_path / "export")
        documents = [PolicyDocument(id="../escape"), PolicyDocument(id="EO 14110/a"), PolicyDocument(id="..")]

        paths = exporter.export(documents)

        written = sorted(p.name for p in paths["individual_orders"].iterdir())
        assert written == ["EO_14110_a.json", "escape.json", "order_2.json"]
        assert not (tmp_path / "export" / "escape.json").exists()


class TestOrderFileStem:
    """File names for per-order artifacts."""

    @pytest.mark.parametrize(
        "doc_id,expected",
        [
            (1, "1"),
            ("EO-14110", "EO-14110"),
            ("EO 14110", "EO_14110"),
            ("../../etc/passwd", "etc_passwd"),
            ("a\\b", "a_b"),
            ("..", "order_7"),
            ("", "order_7"),
            (None, "order_7"),
        ],
    )
    def test_stem(self, doc_id, expected):
        assert order_file_stem(doc_id, 7) == expected


def test_repeated_exporters_share_one_file_handler(tmp_path):
    log_file = tmp_path / "logs" / "export.log"
    for _ in range(3):
        OrderExporter(output_dir=tmp_path / "export", log_file=log_file)

    handlers = [
        h
        for h in logging.getLogger("SourceNormalizer").handlers
        if isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file)
    ]
    assert len(handlers) == 1
