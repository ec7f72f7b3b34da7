"""Data model for multi-source executive order aggregation.

Every object here is produced fresh on each aggregation run and discarded
after serialization. Ratings are a closed enumeration; impact-area names and
institution types stay open string keys because their catalogs grow with the
sources.

Output shapes (per exported document):
    sources: [{name, abbreviation, url, reference_id, fetch_date, metadata}]
    source_aware_impact_analysis:
        {area: {description, notes, consensus_rating, perspectives: [{source, impact, insight}]}}
    institution_specific_guidance:
        {type: {relevance_score, action_items, exemptions, source_considerations}}
    integrated_analysis / source_analysis:
        {summary, extended_analysis, source_contributions | source_insights, key_perspectives}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ImpactRating(str, Enum):
    """Impact classification a source assigns to one impact area."""

    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"
    MIXED = "Mixed"

    @classmethod
    def parse(cls, value: Any) -> "ImpactRating":
        """Map a raw rating string to a rating, defaulting to Neutral.

        Matching is case-insensitive. Missing or unrecognized values are
        Neutral.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for rating in cls:
                if rating.value.lower() == normalized:
                    return rating
        return cls.NEUTRAL


# Base relevance contribution keyed by the document's declared impact level
IMPACT_LEVEL_SCORES: dict[str, int] = {
    "Critical": 5,
    "High": 4,
    "Medium": 3,
    "Low": 2,
}
DEFAULT_IMPACT_LEVEL_SCORE = 1


@dataclass
class RawSource:
    """One source row as handed over by the storage collaborator."""

    source_name: str
    source_url: str | None = None
    external_reference_id: str | None = None
    fetch_date: str | None = None
    specific_data: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawSource":
        return cls(
            source_name=data.get("source_name") or "",
            source_url=data.get("source_url"),
            external_reference_id=data.get("external_reference_id"),
            fetch_date=data.get("fetch_date"),
            specific_data=data.get("specificData"),
        )


@dataclass
class NormalizedSource:
    """Source with a stable short code."""

    name: str
    abbreviation: str
    url: str | None
    reference_id: str | None
    fetch_date: str | None
    metadata: dict[str, Any] | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "abbreviation": self.abbreviation,
            "url": self.url,
            "reference_id": self.reference_id,
            "fetch_date": self.fetch_date,
            "metadata": self.metadata,
        }


@dataclass
class ActionItem:
    """A recommended action. ``source`` may hold several comma-joined codes."""

    title: str
    description: str | None = None
    deadline: str | None = None
    institution_type: str | None = None
    source: str = ""

    def applies_to(self, institution_type: str) -> bool:
        """True when untagged or tagged with ``institution_type``."""
        return not self.institution_type or self.institution_type == institution_type

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "deadline": self.deadline,
            "source": self.source,
        }


@dataclass
class AreaRating:
    impact: ImpactRating
    description: str | None = None


@dataclass
class ImplementationReference:
    """One structured annotation extracted from a source payload."""

    title: str | None
    url: str | None = None
    context: str | None = None
    analysis: str | None = None
    description: str | None = None
    date: str | None = None
    impact_areas: dict[str, AreaRating] = field(default_factory=dict)
    institution_specific_guidance: dict[str, str] = field(default_factory=dict)
    exemptions: list[str] = field(default_factory=list)
    action_items: list[ActionItem] = field(default_factory=list)

    @property
    def narrative(self) -> str | None:
        """Analysis text, falling back to context."""
        return self.analysis or self.context or None


@dataclass
class SourceReferences:
    """A normalized source paired with the references extracted from it."""

    source: NormalizedSource
    references: list[ImplementationReference] = field(default_factory=list)

    @property
    def code(self) -> str:
        return self.source.abbreviation

    @property
    def has_data(self) -> bool:
        return self.source.metadata is not None


@dataclass
class Perspective:
    """One source's view of one impact area."""

    source: str
    impact: ImpactRating
    insight: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "impact": self.impact.value,
            "insight": self.insight,
        }


@dataclass
class ConsensusImpact:
    """Cross-source view of one impact area."""

    description: str | None = None
    notes: str | None = None
    perspectives: list[Perspective] = field(default_factory=list)
    consensus_rating: ImpactRating = ImpactRating.NEUTRAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "notes": self.notes,
            "consensus_rating": self.consensus_rating.value,
            "perspectives": [p.to_dict() for p in self.perspectives],
        }


@dataclass
class InstitutionGuidance:
    """Guidance tailored to one institution type."""

    relevance_score: int
    action_items: list[ActionItem] = field(default_factory=list)
    exemptions: list[dict[str, str]] = field(default_factory=list)
    source_considerations: dict[str, list[dict[str, Any]]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "relevance_score": self.relevance_score,
            "action_items": [item.to_dict() for item in self.action_items],
            "exemptions": list(self.exemptions),
            "source_considerations": {
                code: list(entries) for code, entries in self.source_considerations.items()
            },
        }


@dataclass
class CombinedAnalysis:
    """Document narrative merged with per-source analysis excerpts.

    ``source_insights`` and ``key_perspectives`` hold one entry per
    contributing source. ``source_contributions`` is keyed by source code, so
    sources sharing a code keep only the first there.
    """

    summary: str = ""
    extended_analysis: str = ""
    source_insights: list[dict[str, Any]] = field(default_factory=list)
    source_contributions: dict[str, dict[str, Any]] = field(default_factory=dict)
    key_perspectives: list[dict[str, Any]] = field(default_factory=list)

    def to_integrated_dict(self) -> dict[str, Any]:
        """Keyed view: source code -> contribution."""
        return {
            "summary": self.summary,
            "extended_analysis": self.extended_analysis,
            "source_contributions": dict(self.source_contributions),
            "key_perspectives": list(self.key_perspectives),
        }

    def to_source_analysis_dict(self) -> dict[str, Any]:
        """List view: one entry per contributing source, in source order."""
        return {
            "summary": self.summary,
            "extended_analysis": self.extended_analysis,
            "source_insights": list(self.source_insights),
            "key_perspectives": list(self.key_perspectives),
        }


@dataclass
class SourceInsights:
    """Per-document digest of what each source contributed."""

    title: str
    description: str = "Combined analysis from authoritative sources"
    source_count: int = 0
    has_implementation_details: bool = False
    sources: list[dict[str, Any]] = field(default_factory=list)
    key_takeaways: list[dict[str, Any]] = field(default_factory=list)
    implementation_references: list[dict[str, Any]] = field(default_factory=list)
    resource_links: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": {
                "title": self.title,
                "description": self.description,
                "source_count": self.source_count,
                "has_implementation_details": self.has_implementation_details,
            },
            "sources": list(self.sources),
            "key_takeaways": list(self.key_takeaways),
            "implementation_references": list(self.implementation_references),
            "resource_links": list(self.resource_links),
        }


@dataclass
class PolicyDocument:
    """An executive order and the raw source rows attached to it."""

    id: Any
    title: str | None = None
    order_number: str | None = None
    signing_date: str | None = None
    summary: str | None = None
    comprehensive_analysis: str | None = None
    impact_level: str | None = None
    sources: list[RawSource] = field(default_factory=list)
    differentiated_impacts: dict[str, dict[str, Any]] = field(default_factory=dict)
    university_impact_areas: list[dict[str, Any]] = field(default_factory=list)
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PolicyDocument":
        """Build a document from one input record.

        Every key except ``sources`` is kept in ``fields`` so the exported
        record carries the document's base columns unchanged.
        """
        sources = [
            RawSource.from_dict(row) for row in data.get("sources") or [] if isinstance(row, dict)
        ]
        differentiated = data.get("differentiated_impacts")
        areas = data.get("university_impact_areas")
        return cls(
            id=data.get("id"),
            title=data.get("title"),
            order_number=data.get("order_number"),
            signing_date=data.get("signing_date"),
            summary=data.get("summary"),
            comprehensive_analysis=data.get("comprehensive_analysis"),
            impact_level=data.get("impact_level"),
            sources=sources,
            differentiated_impacts=differentiated if isinstance(differentiated, dict) else {},
            university_impact_areas=areas if isinstance(areas, list) else [],
            fields={key: value for key, value in data.items() if key != "sources"},
        )

    @property
    def base_fields(self) -> dict[str, Any]:
        """All base columns in their input form, for the exported record."""
        record = {
            "id": self.id,
            "order_number": self.order_number,
            "title": self.title,
            "signing_date": self.signing_date,
            "impact_level": self.impact_level,
            "summary": self.summary,
            "comprehensive_analysis": self.comprehensive_analysis,
        }
        record.update(self.fields)
        return record
