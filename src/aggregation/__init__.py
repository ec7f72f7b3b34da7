"""Multi-source aggregation and consensus-impact engine."""

from src.aggregation.combined_analysis import CombinedAnalysisComposer
from src.aggregation.impact_aggregator import (
    DEFAULT_UNIVERSITY_IMPACT_AREAS,
    ImpactAreaAccumulator,
    ImpactAreaAggregator,
    consensus_rating,
)
from src.aggregation.institution_guidance import InstitutionGuidanceGenerator, relevance_score
from src.aggregation.models import (
    ActionItem,
    CombinedAnalysis,
    ConsensusImpact,
    ImpactRating,
    ImplementationReference,
    InstitutionGuidance,
    NormalizedSource,
    Perspective,
    PolicyDocument,
    RawSource,
    SourceInsights,
    SourceReferences,
)
from src.aggregation.reference_extractor import ReferenceExtractor
from src.aggregation.source_insights import SourceInsightsComposer
from src.aggregation.source_normalizer import SourceNormalizer

__all__ = [
    # Components
    "SourceNormalizer",
    "ReferenceExtractor",
    "ImpactAreaAggregator",
    "ImpactAreaAccumulator",
    "InstitutionGuidanceGenerator",
    "CombinedAnalysisComposer",
    "SourceInsightsComposer",
    "consensus_rating",
    "relevance_score",
    "DEFAULT_UNIVERSITY_IMPACT_AREAS",
    # Models
    "ActionItem",
    "CombinedAnalysis",
    "ConsensusImpact",
    "ImpactRating",
    "ImplementationReference",
    "InstitutionGuidance",
    "NormalizedSource",
    "Perspective",
    "PolicyDocument",
    "RawSource",
    "SourceInsights",
    "SourceReferences",
]
