"""
Main-content detection for HTML documents.
"""

from .detector import ContentDetector, DetectionResult
from .models import ContentElement, Document, NotFound, PageAnalysis
from .page import PageAnalyzer
from .protocols import DetectionStrategy
from .scoring import CandidateFeatures, extract_features, score_candidate

__all__ = [
    "CandidateFeatures",
    "ContentDetector",
    "ContentElement",
    "DetectionResult",
    "DetectionStrategy",
    "Document",
    "NotFound",
    "PageAnalysis",
    "PageAnalyzer",
    "extract_features",
    "score_candidate",
]
