"""Executive order exporter: aggregate every document and write the batch.

For each document the exporter runs, in order:
    SourceNormalizer -> ReferenceExtractor -> ImpactAreaAggregator,
    InstitutionGuidanceGenerator, CombinedAnalysisComposer, SourceInsightsComposer

and attaches the results to the document's base fields:
    sources, source_insights, source_analysis, simplified_impact_areas,
    institution_specific_guidance, source_aware_impact_analysis,
    integrated_analysis

Artifacts written to output_dir:
    executive_orders.json            full enriched batch
    processed_executive_orders.json  batch without long narrative columns
    orders/{id}.json                 one file per document
    sources.{json,csv,parquet}       source-metadata summary
    search_index.json                term -> document ids
    manifests/export_run_{ts}.json   run manifest

Aggregation is pure per document, so the batch can be spread over a thread
pool. A document whose aggregation fails is logged and exported with default
aggregate fields. Only file I/O errors propagate.
"""

import json
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from src.aggregation.combined_analysis import CombinedAnalysisComposer
from src.aggregation.impact_aggregator import ImpactAreaAggregator
from src.aggregation.institution_guidance import InstitutionGuidanceGenerator
from src.aggregation.models import CombinedAnalysis, PolicyDocument, SourceInsights
from src.aggregation.reference_extractor import ReferenceExtractor
from src.aggregation.source_insights import SourceInsightsComposer
from src.aggregation.source_normalizer import SourceNormalizer
from src.export.search_index import build_search_index
from src.export.source_summary import build_source_summary, write_source_summary
from src.shared.utils import setup_logger

NARRATIVE_COLUMNS = ("plain_language_summary", "executive_brief", "comprehensive_analysis")

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


def order_file_stem(doc_id: Any, position: int) -> str:
    """File name (without extension) for one exported order.

    Characters outside ``[A-Za-z0-9._-]`` become ``_``. Missing ids and ids
    made only of dots or separators fall back to ``order_<position>``.
    """
    if doc_id is None:
        return f"order_{position}"
    stem = _UNSAFE_FILENAME_RE.sub("_", str(doc_id)).strip("._")
    return stem or f"order_{position}"


class OrderExporter:
    """Aggregates a batch of policy documents and writes the export artifacts."""

    def __init__(
        self,
        output_dir: Path,
        log_file: Path | None = None,
        max_workers: int = 1,
        canonical_areas: list[dict[str, Any]] | None = None,
        summary_format: str = "json",
        key_perspective_min_length: int = 100,
        key_perspective_teaser_length: int = 150,
        fingerprint_width: int = 50,
    ) -> None:
        """Initialize the exporter.

        Args:
            output_dir: Directory for export artifacts.
            log_file: Optional path for file-based logging.
            max_workers: Worker threads for per-document aggregation.
            canonical_areas: Impact areas seeded into every document
                (default: the university impact area catalog).
            summary_format: Source summary format ("json", "csv" or "parquet").
            key_perspective_min_length: Minimum excerpt length for a key perspective.
            key_perspective_teaser_length: Teaser length for key perspectives.
            fingerprint_width: Characters used to fingerprint key takeaways.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self.output_dir = output_dir
        self.max_workers = max_workers
        self.summary_format = summary_format
        self.logger = setup_logger(self.__class__.__name__, log_file)

        self.normalizer = SourceNormalizer(log_file)
        self.extractor = ReferenceExtractor(log_file)
        self.impact_aggregator = ImpactAreaAggregator(canonical_areas, log_file)
        self.guidance_generator = InstitutionGuidanceGenerator(log_file)
        self.analysis_composer = CombinedAnalysisComposer(
            min_length=key_perspective_min_length,
            teaser_length=key_perspective_teaser_length,
            log_file=log_file,
        )
        self.insights_composer = SourceInsightsComposer(fingerprint_width, log_file)

    def aggregate_document(self, document: PolicyDocument) -> dict[str, Any]:
        """Aggregate one document's sources into its exported record."""
        normalized = self.normalizer.normalize_all(document.sources)
        extracted = self.extractor.extract_all(normalized)

        impact_areas = self.impact_aggregator.aggregate(document, extracted)
        guidance = self.guidance_generator.generate(document, extracted)
        analysis = self.analysis_composer.compose(document, extracted)
        insights = self.insights_composer.compose(document, extracted)

        return {
            **self._base_record(document),
            "sources": [source.to_dict() for source in normalized],
            "source_insights": insights.to_dict(),
            "source_analysis": analysis.to_source_analysis_dict(),
            "simplified_impact_areas": ImpactAreaAggregator.to_simplified(impact_areas),
            "institution_specific_guidance": InstitutionGuidanceGenerator.to_dict(guidance),
            "source_aware_impact_analysis": {
                name: area.to_dict() for name, area in impact_areas.items()
            },
            "integrated_analysis": analysis.to_integrated_dict(),
        }

    def aggregate_batch(self, documents: list[PolicyDocument]) -> list[dict[str, Any]]:
        """Aggregate every document, preserving batch order."""
        if self.max_workers == 1 or len(documents) < 2:
            records = [self._safe_aggregate(document) for document in documents]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                records = list(pool.map(self._safe_aggregate, documents))

        with_sources = sum(1 for record in records if record["sources"])
        self.logger.info(
            "Aggregated %d documents (%d with source data)", len(records), with_sources
        )
        return records

    def export(self, documents: list[PolicyDocument]) -> dict[str, Path]:
        """Aggregate ``documents`` and write every artifact.

        Returns:
            Mapping of artifact name to written path.

        Raises:
            OSError: If an artifact cannot be written.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        records = self.aggregate_batch(documents)
        paths: dict[str, Path] = {}

        paths["orders"] = self._write_json(self.output_dir / "executive_orders.json", records)
        self.logger.info("Exported %d executive orders to %s", len(records), paths["orders"])

        processed = [
            {key: value for key, value in record.items() if key not in NARRATIVE_COLUMNS}
            for record in records
        ]
        paths["processed_orders"] = self._write_json(
            self.output_dir / "processed_executive_orders.json", processed
        )

        individual_dir = self.output_dir / "orders"
        individual_dir.mkdir(parents=True, exist_ok=True)
        for position, record in enumerate(records):
            name = order_file_stem(record.get("id"), position)
            self._write_json(individual_dir / f"{name}.json", record)
        paths["individual_orders"] = individual_dir
        self.logger.info("Exported %d individual order files to %s", len(records), individual_dir)

        summary = build_source_summary(documents)
        paths["sources"] = write_source_summary(
            summary, self.output_dir / f"sources.{self.summary_format}", self.summary_format
        )
        self.logger.info("Exported metadata for %d sources to %s", len(summary), paths["sources"])

        paths["search_index"] = self._write_json(
            self.output_dir / "search_index.json", build_search_index(records)
        )

        paths["manifest"] = self._write_manifest(records, summary["source_name"].tolist(), paths)
        return paths

    def _safe_aggregate(self, document: PolicyDocument) -> dict[str, Any]:
        try:
            return self.aggregate_document(document)
        except Exception as e:
            self.logger.error("Failed to aggregate document %s: %s", document.id, e)
            return self._default_record(document)

    def _default_record(self, document: PolicyDocument) -> dict[str, Any]:
        """Record with every aggregate field present but empty."""
        label = document.order_number or document.title or document.id
        analysis = CombinedAnalysis(
            summary=document.summary or "",
            extended_analysis=document.comprehensive_analysis or "",
        )
        impact_areas = self.impact_aggregator.aggregate(PolicyDocument(id=document.id), [])
        return {
            **self._base_record(document),
            "sources": [],
            "source_insights": SourceInsights(title=f"Source Insights for {label}").to_dict(),
            "source_analysis": analysis.to_source_analysis_dict(),
            "simplified_impact_areas": ImpactAreaAggregator.to_simplified(impact_areas),
            "institution_specific_guidance": {},
            "source_aware_impact_analysis": {
                name: area.to_dict() for name, area in impact_areas.items()
            },
            "integrated_analysis": analysis.to_integrated_dict(),
        }

    @staticmethod
    def _base_record(document: PolicyDocument) -> dict[str, Any]:
        record = document.base_fields
        available = {
            column: isinstance(record.get(column), str) and record[column].strip() != ""
            for column in NARRATIVE_COLUMNS
        }
        record["has_plain_language_summary"] = available["plain_language_summary"]
        record["has_executive_brief"] = available["executive_brief"]
        record["has_comprehensive_analysis"] = available["comprehensive_analysis"]
        record["summary_formats_available"] = [
            label
            for label, column in (
                ("executive_brief", "executive_brief"),
                ("standard", "plain_language_summary"),
                ("comprehensive", "comprehensive_analysis"),
            )
            if available[column]
        ]
        return record

    def _write_manifest(
        self, records: list[dict[str, Any]], source_names: list[str], paths: dict[str, Path]
    ) -> Path:
        run_time_utc = datetime.now(timezone.utc).isoformat()
        manifest = {
            "run_time_utc": run_time_utc,
            "pipeline": "executive_order_export",
            "documents_exported": len(records),
            "documents_with_sources": sum(1 for record in records if record["sources"]),
            "sources": source_names,
            "artifacts": {name: str(path) for name, path in paths.items()},
        }
        manifest_dir = self.output_dir / "manifests"
        manifest_dir.mkdir(parents=True, exist_ok=True)
        return self._write_json(
            manifest_dir / f"export_run_{run_time_utc.replace(':', '-')}.json", manifest
        )

    @staticmethod
    def _write_json(path: Path, payload: Any) -> Path:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False, default=str)
        return path
