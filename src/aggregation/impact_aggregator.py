"""Impact-area consensus across sources.

Every source rates impact areas independently. The aggregator collects those
ratings per area and derives one consensus rating by plurality vote:

- Each perspective counts once; sources are equally authoritative.
- The bucket with the strictly highest count wins.
- Any tie, including the no-perspective case, resolves to Neutral.

The canonical university impact areas are always present in the result, so a
document nobody commented on still reports every area at Neutral.
"""

from collections import Counter
from pathlib import Path
from typing import Any

from src.aggregation.models import (
    ConsensusImpact,
    ImpactRating,
    Perspective,
    PolicyDocument,
    SourceReferences,
)
from src.shared.utils import setup_logger

DEFAULT_UNIVERSITY_IMPACT_AREAS: list[dict[str, str]] = [
    {
        "name": "Research Funding",
        "description": "Impacts on federal research grants, funding priorities, and research administration",
    },
    {
        "name": "Student Aid & Higher Education Finance",
        "description": "Changes to student financial aid, federal student loans, and university funding mechanisms",
    },
    {
        "name": "Administrative Compliance",
        "description": "Compliance requirements, reporting mandates, and regulatory changes affecting university administration",
    },
    {
        "name": "Workforce & Employment Policy",
        "description": "Impacts on faculty, staff employment, labor relations, and workforce diversity",
    },
    {
        "name": "Public-Private Partnerships",
        "description": "Changes affecting university-industry collaborations, tech transfer, and economic development initiatives",
    },
]


def consensus_rating(perspectives: list[Perspective]) -> ImpactRating:
    """Plurality vote over the four rating buckets; ties resolve to Neutral."""
    if not perspectives:
        return ImpactRating.NEUTRAL

    counts = Counter(p.impact for p in perspectives)
    ranked = counts.most_common()
    top_rating, top_count = ranked[0]
    if len(ranked) > 1 and ranked[1][1] == top_count:
        return ImpactRating.NEUTRAL
    return top_rating


class ImpactAreaAccumulator:
    """Per-document area map with get-or-create semantics."""

    def __init__(self) -> None:
        self._areas: dict[str, ConsensusImpact] = {}

    def seed(self, name: str, description: str | None = None, notes: str | None = None) -> None:
        """Declare an area, filling in description/notes without dropping perspectives."""
        area = self.get_or_create(name)
        if description:
            area.description = description
        if notes:
            area.notes = notes

    def get_or_create(self, name: str) -> ConsensusImpact:
        if name not in self._areas:
            self._areas[name] = ConsensusImpact()
        return self._areas[name]

    def add(self, name: str, perspective: Perspective) -> None:
        self.get_or_create(name).perspectives.append(perspective)

    def finalize(self) -> dict[str, ConsensusImpact]:
        for area in self._areas.values():
            area.consensus_rating = consensus_rating(area.perspectives)
        return self._areas


class ImpactAreaAggregator:
    """Computes per-area consensus for one document."""

    def __init__(
        self,
        canonical_areas: list[dict[str, Any]] | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            canonical_areas: Areas seeded into every result
                (default: DEFAULT_UNIVERSITY_IMPACT_AREAS).
            log_file: Optional path for file-based logging.
        """
        self.canonical_areas = (
            canonical_areas if canonical_areas is not None else DEFAULT_UNIVERSITY_IMPACT_AREAS
        )
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def aggregate(
        self, document: PolicyDocument, extracted: list[SourceReferences]
    ) -> dict[str, ConsensusImpact]:
        """Build the consensus view for ``document``.

        Args:
            document: The policy document (its declared areas are seeded too).
            extracted: Sources paired with their references, in source order.

        Returns:
            Mapping of area name to ConsensusImpact. Seeded areas come first,
            then areas discovered in source data in first-seen order.
        """
        accumulator = ImpactAreaAccumulator()

        for area in self.canonical_areas:
            accumulator.seed(area["name"], area.get("description"), area.get("notes"))
        for area in document.university_impact_areas:
            name = area.get("name") if isinstance(area, dict) else area
            if not isinstance(name, str) or not name:
                continue
            if isinstance(area, dict):
                accumulator.seed(name, area.get("description"), area.get("notes"))
            else:
                accumulator.seed(name)

        for entry in extracted:
            for ref in entry.references:
                for area_name, rating in ref.impact_areas.items():
                    accumulator.add(
                        area_name,
                        Perspective(
                            source=entry.code,
                            impact=rating.impact,
                            insight=rating.description,
                            url=ref.url,
                        ),
                    )

        areas = accumulator.finalize()
        self.logger.debug(
            "Document %s: %d impact areas, %d rated",
            document.id,
            len(areas),
            sum(1 for area in areas.values() if area.perspectives),
        )
        return areas

    @staticmethod
    def to_simplified(areas: dict[str, ConsensusImpact]) -> list[dict[str, Any]]:
        """List view of the consensus map, one entry per area."""
        return [
            {
                "name": name,
                "description": area.description,
                "consensus_rating": area.consensus_rating.value,
                "source_insights": [
                    {
                        "source": p.source,
                        "impact": p.impact.value,
                        "description": p.insight,
                        "url": p.url,
                    }
                    for p in area.perspectives
                ],
            }
            for name, area in areas.items()
        ]
