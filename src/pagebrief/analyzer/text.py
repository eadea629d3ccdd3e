"""
Text cleaning, validation and AI preparation.

Every function here is pure: text in, text or report out.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..config.config import AnalysisConfig
from .models import AnalysisErrorKind, ValidationMetrics, ValidationReport

ELLIPSIS = "..."
PARAGRAPH_BREAK = "\n\n"

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_WHITESPACE = re.compile(r"\s+")
_BRACKETED = re.compile(r"\[.*?\]")
_BRACED = re.compile(r"\{.*?\}")
_TABLE_RESIDUE = re.compile(r"\|\s*\|")
_URL = re.compile(r"https?://\S+")
_EMAIL = re.compile(r"\S+@\S+\.\S+")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")

_TRANSLATIONS = str.maketrans(
    {
        "“": '"',
        "”": '"',
        "‘": "'",
        "’": "'",
    }
)


def _clean_paragraph(paragraph: str) -> str:
    cleaned = _WHITESPACE.sub(" ", paragraph)
    cleaned = _BRACKETED.sub("", cleaned)
    cleaned = _BRACED.sub("", cleaned)
    cleaned = _TABLE_RESIDUE.sub("", cleaned)
    cleaned = cleaned.translate(_TRANSLATIONS).replace("…", ELLIPSIS)
    cleaned = _URL.sub("", cleaned)
    cleaned = _EMAIL.sub("", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def clean_text(raw_text: str) -> str:
    """
    Normalize extracted text.

    Whitespace runs collapse to one space within a paragraph while blank
    lines between paragraphs survive as a single paragraph break. Bracketed
    and braced artifacts, table residue, URLs and e-mail addresses are
    removed; typographic quotes and ellipses become ASCII.
    """
    paragraphs = (_clean_paragraph(part) for part in _PARAGRAPH_SPLIT.split(raw_text))
    return PARAGRAPH_BREAK.join(part for part in paragraphs if part)


def split_sentences(text: str, min_length: int = 10) -> List[str]:
    return [part for part in _SENTENCE_SPLIT.split(text) if len(part.strip()) > min_length]


def validate_text(text: str, config: Optional[AnalysisConfig] = None) -> ValidationReport:
    """Evaluate the quality gates on cleaned text."""
    config = config or AnalysisConfig()
    issues: List[str] = []
    warnings: List[str] = []
    failure: Optional[AnalysisErrorKind] = None

    if len(text) < config.min_content_length:
        issues.append(f"Content too short ({len(text)} < {config.min_content_length} chars)")
        failure = AnalysisErrorKind.CONTENT_TOO_SHORT

    if len(text) > config.max_content_length * 2:
        warnings.append(f"Content very long ({len(text)} chars) - will be truncated")

    words = [word for word in text.split() if len(word) > 2]
    word_count = len(words)
    avg_word_length = sum(len(word) for word in words) / word_count if word_count else 0.0
    if word_count < config.min_word_count:
        issues.append(f"Insufficient word count ({word_count} < {config.min_word_count} words)")
        failure = failure or AnalysisErrorKind.CONTENT_TOO_SHORT

    unique_ratio = len({word.lower() for word in words}) / word_count if word_count else 0.0
    if word_count and unique_ratio < config.min_unique_ratio:
        issues.append(f"Content appears repetitive ({round(unique_ratio * 100)}% unique words)")
        failure = failure or AnalysisErrorKind.REPETITIVE

    sentences = split_sentences(text)
    sentence_count = len(sentences)
    avg_sentence_length = len(text) / sentence_count if sentence_count else 0.0
    if sentence_count < config.min_sentence_count:
        issues.append(f"Too few sentences ({sentence_count} < {config.min_sentence_count})")
        failure = failure or AnalysisErrorKind.STRUCTURE_INSUFFICIENT

    return ValidationReport(
        is_valid=not issues,
        issues=tuple(issues),
        metrics=ValidationMetrics(
            word_count=word_count,
            avg_word_length=avg_word_length,
            unique_word_ratio=unique_ratio,
            sentence_count=sentence_count,
            avg_sentence_length=avg_sentence_length,
        ),
        failure=failure,
        warnings=tuple(warnings),
    )


def truncate_text(text: str, max_length: int, boundary_ratio: float = 0.8) -> str:
    """
    Cut ``text`` to at most ``max_length`` characters.

    Prefers the last sentence end or paragraph break before the cap when it
    lies beyond ``boundary_ratio`` of the cap; otherwise hard-cuts and
    appends an ellipsis.
    """
    if len(text) <= max_length:
        return text

    last_sentence = text.rfind(".", 0, max_length)
    last_paragraph = text.rfind(PARAGRAPH_BREAK, 0, max_length)
    cut_point = max(last_sentence, last_paragraph)

    if cut_point > max_length * boundary_ratio:
        return text[: cut_point + 1].rstrip()
    return text[:max_length] + ELLIPSIS


def add_structure_markers(text: str) -> str:
    """Tag each paragraph as intro, heading, content or conclusion."""
    paragraphs = [part.strip() for part in text.split(PARAGRAPH_BREAK) if part.strip()]
    if len(paragraphs) <= 1:
        return text

    last = len(paragraphs) - 1
    marked = []
    for index, paragraph in enumerate(paragraphs):
        if len(paragraph) < 100 and "." not in paragraph and index < last:
            marked.append(f"[HEADING] {paragraph}")
        elif index == 0:
            marked.append(f"[INTRO] {paragraph}")
        elif index == last:
            marked.append(f"[CONCLUSION] {paragraph}")
        else:
            marked.append(f"[CONTENT] {paragraph}")
    return PARAGRAPH_BREAK.join(marked)


def prepare_for_ai(text: str, max_length: int = 15000, boundary_ratio: float = 0.8) -> str:
    """
    Truncate and annotate ``text`` for the summarization provider.

    The cap bounds the truncated text; markers are added afterwards, so text
    already within the cap reaches the provider whole.
    """
    return add_structure_markers(truncate_text(text, max_length, boundary_ratio))
