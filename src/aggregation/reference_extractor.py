"""Extraction of implementation references from normalized source payloads.

A source payload (``specificData``) may carry an ``implementation_references``
array. Each entry is read defensively: absent or wrongly-typed optional fields
become empty collections, and a source without the array simply has no
structured data.

Expected reference shape:
    {
        "title": str,
        "url": str,
        "context": str,              # optional
        "analysis": str,             # optional
        "impact_areas": {area: {"impact": str, "description": str}},
        "institution_specific_guidance": {institution_type: str},
        "exemptions": [institution_type, ...],
        "action_items": [{"title", "description", "deadline", "institution_type"}],
    }
"""

from pathlib import Path
from typing import Any

from src.aggregation.models import (
    ActionItem,
    AreaRating,
    ImpactRating,
    ImplementationReference,
    NormalizedSource,
    SourceReferences,
)
from src.shared.utils import setup_logger


class ReferenceExtractor:
    """Walks a normalized source's payload and yields its references."""

    REFERENCES_KEY = "implementation_references"

    def __init__(self, log_file: Path | None = None) -> None:
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def extract(self, source: NormalizedSource) -> list[ImplementationReference]:
        """Extract all references carried by ``source``.

        Args:
            source: Normalized source.

        Returns:
            References in payload order; empty when the source has no
            structured data.
        """
        metadata = source.metadata
        if not metadata:
            return []

        raw_refs = metadata.get(self.REFERENCES_KEY)
        if not isinstance(raw_refs, list):
            if raw_refs is not None:
                self.logger.warning(
                    "%s: '%s' is not a list, treating source as unstructured",
                    source.abbreviation,
                    self.REFERENCES_KEY,
                )
            return []

        references = []
        for index, raw in enumerate(raw_refs):
            if not isinstance(raw, dict):
                self.logger.warning(
                    "%s: skipping reference %d (expected object, got %s)",
                    source.abbreviation,
                    index,
                    type(raw).__name__,
                )
                continue
            references.append(self._parse_reference(raw, source.abbreviation))

        self.logger.debug("%s: extracted %d references", source.abbreviation, len(references))
        return references

    def extract_all(self, sources: list[NormalizedSource]) -> list[SourceReferences]:
        """Pair every source with its references, preserving source order."""
        return [SourceReferences(source=source, references=self.extract(source)) for source in sources]

    def _parse_reference(self, raw: dict[str, Any], source_code: str) -> ImplementationReference:
        return ImplementationReference(
            title=_text(raw.get("title")),
            url=_text(raw.get("url")),
            context=_text(raw.get("context")),
            analysis=_text(raw.get("analysis")),
            description=_text(raw.get("description")),
            date=_text(raw.get("date") or raw.get("deadline_date")),
            impact_areas=self._parse_impact_areas(raw.get("impact_areas")),
            institution_specific_guidance=self._parse_guidance(
                raw.get("institution_specific_guidance")
            ),
            exemptions=[e for e in _as_list(raw.get("exemptions")) if isinstance(e, str)],
            action_items=self._parse_action_items(raw.get("action_items"), source_code),
        )

    @staticmethod
    def _parse_impact_areas(value: Any) -> dict[str, AreaRating]:
        if not isinstance(value, dict):
            return {}

        areas = {}
        for name, rating in value.items():
            if isinstance(rating, dict):
                areas[name] = AreaRating(
                    impact=ImpactRating.parse(rating.get("impact")),
                    description=_text(rating.get("description")),
                )
            else:
                # A bare rating string ("Positive") is accepted as shorthand
                areas[name] = AreaRating(impact=ImpactRating.parse(rating))
        return areas

    @staticmethod
    def _parse_guidance(value: Any) -> dict[str, str]:
        if not isinstance(value, dict):
            return {}
        return {inst: text for inst, text in value.items() if isinstance(text, str) and text}

    @staticmethod
    def _parse_action_items(value: Any, source_code: str) -> list[ActionItem]:
        items = []
        for raw in _as_list(value):
            if not isinstance(raw, dict) or not _text(raw.get("title")):
                continue
            items.append(
                ActionItem(
                    title=raw["title"],
                    description=_text(raw.get("description")),
                    deadline=_text(raw.get("deadline")),
                    institution_type=_text(raw.get("institution_type")),
                    source=source_code,
                )
            )
        return items


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _text(value: Any) -> str | None:
    """Return non-empty strings, None for anything else."""
    if isinstance(value, str) and value.strip():
        return value
    return None
