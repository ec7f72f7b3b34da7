"""Source normalization: raw source rows to a uniform shape with a short code."""

from pathlib import Path

from src.aggregation.models import NormalizedSource, RawSource
from src.shared.utils import setup_logger


class SourceNormalizer:
    """Canonicalizes raw source rows.

    Known authorities map to a fixed code; any other name is abbreviated from
    the initials of its capitalized words ("Office of Compliance Review" ->
    "OCR"). A name with no capitalized word falls back to every initial.
    """

    ABBREVIATIONS: dict[str, str] = {
        "COGR Executive Order Tracker": "COGR",
        "NSF Implementation Pages": "NSF",
        "NIH Policy Notices": "NIH",
        "ACE Policy Briefs": "ACE",
    }

    def __init__(self, log_file: Path | None = None) -> None:
        self.logger = setup_logger(self.__class__.__name__, log_file)

    @classmethod
    def abbreviate(cls, source_name: str) -> str:
        """Return the stable short code for ``source_name``."""
        if source_name in cls.ABBREVIATIONS:
            return cls.ABBREVIATIONS[source_name]
        words = source_name.split()
        # Lowercase connectors ("of", "and") do not contribute initials
        initials = "".join(word[0] for word in words if word[0].isupper())
        return initials or "".join(word[0] for word in words)

    def normalize(self, source: RawSource) -> NormalizedSource:
        metadata = source.specific_data if isinstance(source.specific_data, dict) else None
        if source.specific_data is not None and metadata is None:
            self.logger.warning(
                "Ignoring non-object specificData for source '%s' (%s)",
                source.source_name,
                type(source.specific_data).__name__,
            )

        return NormalizedSource(
            name=source.source_name,
            abbreviation=self.abbreviate(source.source_name),
            url=source.source_url,
            reference_id=source.external_reference_id,
            fetch_date=source.fetch_date,
            metadata=metadata,
        )

    def normalize_all(self, sources: list[RawSource]) -> list[NormalizedSource]:
        return [self.normalize(source) for source in sources]
