"""Institution-specific guidance derived from multiple sources.

For each institution type the generator produces:
    relevance_score: int in [1, 10]
    action_items: action items that apply to the type, merged by title
    exemptions: [{source, description}] for references exempting the type
    source_considerations: {source_code: [{title, guidance, url}]}

Institution types come from the document's differentiated-impact map
(institution type -> functional area -> {score, description, ...}) and from
any reference that carries guidance text for a type. A type named in neither
gets no entry.

Relevance score:
    base (Critical=5, High=4, Medium=3, Low=2, other=1)
    + mean of the numeric impact scores recorded for the type (0 if none)
    rounded half up, clamped to [1, 10]
"""

import math
from pathlib import Path
from typing import Any

from src.aggregation.dedup import merge_action_items
from src.aggregation.models import (
    DEFAULT_IMPACT_LEVEL_SCORE,
    IMPACT_LEVEL_SCORES,
    ActionItem,
    InstitutionGuidance,
    PolicyDocument,
    SourceReferences,
)
from src.shared.utils import setup_logger

MIN_RELEVANCE_SCORE = 1
MAX_RELEVANCE_SCORE = 10


def relevance_score(impact_level: str | None, impacts: dict[str, Any] | None = None) -> int:
    """Score how strongly a document matters to one institution type.

    Args:
        impact_level: Document impact level ("Critical", "High", ...).
        impacts: Functional area -> impact record (``{"score": 8, ...}``) or a
            bare number.

    Returns:
        Integer in [1, 10].
    """
    score = float(IMPACT_LEVEL_SCORES.get(impact_level or "", DEFAULT_IMPACT_LEVEL_SCORE))

    numeric = _numeric_scores(impacts)
    if numeric:
        score += sum(numeric) / len(numeric)

    rounded = math.floor(score + 0.5)
    return min(MAX_RELEVANCE_SCORE, max(MIN_RELEVANCE_SCORE, rounded))


def _numeric_scores(impacts: dict[str, Any] | None) -> list[float]:
    if not isinstance(impacts, dict):
        return []

    scores = []
    for record in impacts.values():
        value = record.get("score") if isinstance(record, dict) else record
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if math.isfinite(value):
            scores.append(float(value))
    return scores


class InstitutionGuidanceGenerator:
    """Builds per-institution-type guidance for one document."""

    def __init__(self, log_file: Path | None = None) -> None:
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def institution_types(
        self, document: PolicyDocument, extracted: list[SourceReferences]
    ) -> list[str]:
        """Types with a differentiated-impact entry, then types only named in guidance text."""
        types = list(document.differentiated_impacts)
        for entry in extracted:
            for ref in entry.references:
                for inst_type in ref.institution_specific_guidance:
                    if inst_type not in types:
                        types.append(inst_type)
        return types

    def generate(
        self, document: PolicyDocument, extracted: list[SourceReferences]
    ) -> dict[str, InstitutionGuidance]:
        """Build guidance for every institution type relevant to ``document``."""
        guidance = {}
        for inst_type in self.institution_types(document, extracted):
            guidance[inst_type] = self._build(document, extracted, inst_type)

        if guidance:
            self.logger.debug(
                "Document %s: guidance for %d institution types", document.id, len(guidance)
            )
        return guidance

    def _build(
        self, document: PolicyDocument, extracted: list[SourceReferences], inst_type: str
    ) -> InstitutionGuidance:
        impacts = document.differentiated_impacts.get(inst_type)
        if impacts is None:
            self.logger.debug(
                "Document %s: no differentiated impact for '%s', scoring from impact level only",
                document.id,
                inst_type,
            )

        result = InstitutionGuidance(relevance_score=relevance_score(document.impact_level, impacts))
        pending: list[ActionItem] = []

        for entry in extracted:
            considerations = []
            for ref in entry.references:
                text = ref.institution_specific_guidance.get(inst_type)
                if text:
                    considerations.append(
                        {
                            "title": ref.title or "Implementation Reference",
                            "guidance": text,
                            "url": ref.url,
                        }
                    )

                if inst_type in ref.exemptions:
                    result.exemptions.append(
                        {
                            "source": entry.code,
                            "description": f"Exemption noted in {ref.title or 'implementation reference'}",
                        }
                    )

                pending.extend(item for item in ref.action_items if item.applies_to(inst_type))

            if considerations:
                result.source_considerations[entry.code] = considerations

        result.action_items = merge_action_items(pending)
        return result

    @staticmethod
    def to_dict(guidance: dict[str, InstitutionGuidance]) -> dict[str, Any]:
        return {inst_type: g.to_dict() for inst_type, g in guidance.items()}
