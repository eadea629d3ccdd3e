"""
Data models for content analysis results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


class AnalysisErrorKind(str, Enum):
    """Which quality gate rejected the content."""

    CONTENT_TOO_SHORT = "content_too_short"
    REPETITIVE = "repetitive"
    STRUCTURE_INSUFFICIENT = "structure_insufficient"


@dataclass(frozen=True)
class ValidationMetrics:
    """Measurements the validation gates are evaluated on."""

    word_count: int = 0
    avg_word_length: float = 0.0
    unique_word_ratio: float = 0.0
    sentence_count: int = 0
    avg_sentence_length: float = 0.0


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of the content quality gates."""

    is_valid: bool
    issues: Tuple[str, ...]
    metrics: ValidationMetrics
    failure: Optional[AnalysisErrorKind] = None
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ContentMetadata:
    """Descriptive statistics about cleaned content."""

    word_count: int
    sentence_count: int
    character_count: int
    avg_words_per_sentence: float
    avg_chars_per_word: float
    readability_score: int
    content_type: str
    has_headings: bool
    has_lists: bool
    has_blockquotes: bool
    domain: str = ""
    url: Optional[str] = None


@dataclass(frozen=True)
class AnalysisResult:
    """Cleaned, validated, AI-ready content extracted from one element."""

    raw_text: str
    cleaned_text: str
    processed_content: str
    metadata: ContentMetadata
    validation: ValidationReport
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def summary(self) -> str:
        """Human-readable one-screen report of the analysis."""
        lines = [
            "Content Analysis Summary:",
            f"- Original: {len(self.raw_text)} chars",
            f"- Cleaned: {len(self.cleaned_text)} chars",
            f"- Processed: {len(self.processed_content)} chars",
            f"- Words: {self.metadata.word_count}",
            f"- Sentences: {self.metadata.sentence_count}",
            f"- Readability: {self.metadata.readability_score}/100",
            f"- Type: {self.metadata.content_type}",
            f"- Valid: {'yes' if self.validation.is_valid else 'no'}",
        ]
        for issue in self.validation.issues:
            lines.append(f"- Issue: {issue}")
        for warning in self.validation.warnings:
            lines.append(f"- Warning: {warning}")
        return "\n".join(lines)


@dataclass(frozen=True)
class AnalysisError:
    """Content that failed validation."""

    kind: AnalysisErrorKind
    validation: ValidationReport
    raw_text: str = ""

    @property
    def message(self) -> str:
        if self.validation.issues:
            return "; ".join(self.validation.issues)
        return self.kind.value.replace("_", " ")
