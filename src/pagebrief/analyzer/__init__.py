"""
Content cleaning, validation and AI preparation.
"""

from .analyzer import AnalysisOutcome, ContentAnalyzer
from .models import (
    AnalysisError,
    AnalysisErrorKind,
    AnalysisResult,
    ContentMetadata,
    ValidationMetrics,
    ValidationReport,
)
from .text import clean_text, prepare_for_ai, validate_text

__all__ = [
    "AnalysisError",
    "AnalysisErrorKind",
    "AnalysisOutcome",
    "AnalysisResult",
    "ContentAnalyzer",
    "ContentMetadata",
    "ValidationMetrics",
    "ValidationReport",
    "clean_text",
    "prepare_for_ai",
    "validate_text",
]
