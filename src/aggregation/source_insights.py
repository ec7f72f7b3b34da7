"""Per-document source insights: takeaways, references and resource links."""

from pathlib import Path

from src.aggregation.dedup import dedupe_by_content, dedupe_by_title
from src.aggregation.models import PolicyDocument, SourceInsights, SourceReferences
from src.shared.utils import setup_logger


class SourceInsightsComposer:
    """Collects what every source says about a document.

    Resource links are deduplicated by normalized title and key takeaways by
    content fingerprint, since takeaways have no title of their own.
    """

    def __init__(self, fingerprint_width: int = 50, log_file: Path | None = None) -> None:
        self.fingerprint_width = fingerprint_width
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def compose(
        self, document: PolicyDocument, extracted: list[SourceReferences]
    ) -> SourceInsights:
        label = document.order_number or document.title or document.id
        insights = SourceInsights(
            title=f"Source Insights for {label}",
            source_count=len(extracted),
        )

        for entry in extracted:
            if not entry.has_data:
                continue

            code = entry.code
            insights.sources.append(
                {
                    "name": entry.source.name,
                    "abbreviation": code,
                    "url": entry.source.url,
                    "fetch_date": entry.source.fetch_date,
                    "has_detailed_implementation": bool(entry.references),
                }
            )
            if entry.references:
                insights.has_implementation_details = True

            for ref in entry.references:
                description = ref.context or ref.description
                insights.implementation_references.append(
                    {
                        "title": ref.title or f"{code} Implementation Reference",
                        "url": ref.url,
                        "source": code,
                        "date": ref.date,
                        "description": description,
                    }
                )
                if ref.url:
                    insights.resource_links.append(
                        {"title": ref.title or f"{code} Resource", "url": ref.url, "source": code}
                    )
                if description:
                    insights.key_takeaways.append(
                        {"source": code, "content": description, "url": ref.url}
                    )

        link_count = len(insights.resource_links)
        takeaway_count = len(insights.key_takeaways)
        insights.resource_links = dedupe_by_title(insights.resource_links)
        insights.key_takeaways = dedupe_by_content(
            insights.key_takeaways, width=self.fingerprint_width
        )

        removed = (link_count - len(insights.resource_links)) + (
            takeaway_count - len(insights.key_takeaways)
        )
        if removed:
            self.logger.debug("Document %s: removed %d duplicate insights", document.id, removed)
        return insights
