"""
Root pytest configuration.

Shared fixtures: one executive order with two sources (COGR and NIH) whose
payloads overlap on impact areas and action items, plus its differentiated
impacts by institution type.
"""

import copy

import pytest

from src.aggregation.models import PolicyDocument
from src.aggregation.reference_extractor import ReferenceExtractor
from src.aggregation.source_normalizer import SourceNormalizer

COGR_SOURCE = {
    "source_name": "COGR Executive Order Tracker",
    "source_url": "https://www.cogr.edu/cogr-resources",
    "external_reference_id": "EO-14110",
    "fetch_date": "2024-02-15",
    "specificData": {
        "implementation_references": [
            {
                "title": "AI Safety Guidelines for Research",
                "url": "https://www.cogr.edu/ai-safety",
                "context": (
                    "COGR's analysis of this executive order reveals significant impacts on "
                    "research universities, particularly around security reviews for AI projects."
                ),
                "impact_areas": {
                    "Research Funding": {
                        "impact": "Positive",
                        "description": "COGR assessment shows positive impact on research funding",
                    }
                },
                "institution_specific_guidance": {
                    "R1 Research Universities": "R1 institutions should prioritize compliance with new AI safety protocols.",
                    "R2 Research Universities": "R2 institutions should focus on documentation requirements.",
                },
                "action_items": [
                    {
                        "title": "Update AI research protocols",
                        "description": "Implement new security measures for AI research",
                        "deadline": "2024-06-30",
                    }
                ],
            }
        ]
    },
}

NIH_SOURCE = {
    "source_name": "NIH Policy Notices",
    "source_url": "https://grants.nih.gov/policy/index.htm",
    "external_reference_id": "NOT-OD-24-086",
    "fetch_date": "2024-02-20",
    "specificData": {
        "implementation_references": [
            {
                "title": "NIH Implementation of EO 14110",
                "url": "https://grants.nih.gov/notice/NOT-OD-24-086",
                "context": "NIH has developed the following implementation guidelines for grantees.",
                "impact_areas": {
                    "Research Funding": {
                        "impact": "Positive",
                        "description": "NIH expects expanded AI research solicitations",
                    },
                    "Regulatory Compliance": {
                        "impact": "Negative",
                        "description": "Additional documentation burdens expected",
                    },
                },
                "exemptions": ["Community Colleges"],
                "action_items": [
                    {
                        "title": "update AI  research protocols",
                        "description": "Ensure ethical AI use in NIH-funded research",
                        "deadline": "2024-07-15",
                    },
                    {
                        "title": "Register AI models with NIH",
                        "description": "R1 institutions register covered models",
                        "institution_type": "R1 Research Universities",
                    },
                ],
            }
        ]
    },
}

DIFFERENTIATED_IMPACTS = {
    "R1 Research Universities": {
        "Research Operations": {"score": 8, "description": "Major impact on AI research operations"},
        "Regulatory Compliance": {"score": 6, "description": "Significant compliance requirements"},
    },
    "R2 Research Universities": {
        "Research Operations": {"score": 6, "description": "Moderate impact on research activities"},
    },
    "Community Colleges": {
        "Academic Programs": {"score": 3, "description": "Minor impact on curriculum"},
    },
}


@pytest.fixture
def order_data() -> dict:
    """Raw executive order record as produced by the storage collaborator."""
    return {
        "id": 1,
        "order_number": "EO 14110",
        "title": "Addressing the Risks and Harnessing the Benefits of Artificial Intelligence",
        "signing_date": "2025-01-30",
        "president": "Sanders",
        "summary": "Establishes new standards for AI safety and security in academic institutions.",
        "impact_level": "High",
        "comprehensive_analysis": "This executive order establishes comprehensive guidelines for AI development.",
        "categories": ["Technology", "Research & Science Policy"],
        "differentiated_impacts": copy.deepcopy(DIFFERENTIATED_IMPACTS),
        "sources": [copy.deepcopy(COGR_SOURCE), copy.deepcopy(NIH_SOURCE)],
    }


@pytest.fixture
def document(order_data: dict) -> PolicyDocument:
    return PolicyDocument.from_dict(order_data)


@pytest.fixture
def extracted(document: PolicyDocument) -> list:
    """Sources of ``document`` normalized and paired with their references."""
    normalized = SourceNormalizer().normalize_all(document.sources)
    return ReferenceExtractor().extract_all(normalized)
