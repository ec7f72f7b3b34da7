"""Combined narrative analysis: document text plus one excerpt per source."""

from pathlib import Path

from src.aggregation.models import CombinedAnalysis, PolicyDocument, SourceReferences
from src.shared.utils import setup_logger


class CombinedAnalysisComposer:
    """Merges a document's narrative fields with per-source analysis excerpts.

    Each source contributes the ``analysis`` (else ``context``) of its first
    reference. Contributions longer than ``min_length`` characters are also
    listed as key perspectives with a ``teaser_length`` teaser, in source
    order. Sources sharing a short code each keep their own insight and key
    perspective.
    """

    def __init__(
        self,
        min_length: int = 100,
        teaser_length: int = 150,
        log_file: Path | None = None,
    ) -> None:
        self.min_length = min_length
        self.teaser_length = teaser_length
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def compose(
        self, document: PolicyDocument, extracted: list[SourceReferences]
    ) -> CombinedAnalysis:
        analysis = CombinedAnalysis(
            summary=document.summary or "",
            extended_analysis=document.comprehensive_analysis or "",
        )

        for entry in extracted:
            if not entry.references:
                continue

            main_ref = entry.references[0]
            text = main_ref.narrative
            if not text:
                continue

            analysis.source_insights.append(
                {"source": entry.code, "text": text, "url": main_ref.url}
            )

            # The keyed view holds one contribution per code
            if entry.code in analysis.source_contributions:
                self.logger.debug(
                    "Document %s: source code %s shared by several sources, "
                    "keyed view keeps the first",
                    document.id,
                    entry.code,
                )
            else:
                analysis.source_contributions[entry.code] = {"text": text, "url": main_ref.url}

            if len(text) > self.min_length:
                analysis.key_perspectives.append(
                    {
                        "source": entry.code,
                        "summary": text[: self.teaser_length] + "...",
                        "full_text": text,
                        "url": main_ref.url,
                    }
                )

        return analysis
