"""
ContentAnalyzer: turns a detected content element into validated,
AI-ready text with descriptive metadata.
"""

from __future__ import annotations

import copy
from typing import Callable, Optional, Sequence, Union

import structlog
from bs4 import BeautifulSoup, Tag
from bs4.element import Comment

from ..config.config import AnalysisConfig
from ..detector.models import ContentElement, element_text
from ..detector.strategies import collect_blocks
from ..observability.metrics import METRICS
from .models import AnalysisError, AnalysisErrorKind, AnalysisResult
from .readability import build_metadata
from .text import PARAGRAPH_BREAK, clean_text, prepare_for_ai, validate_text

logger = structlog.get_logger(__name__)

REMOVE_SELECTORS = [
    "script",
    "style",
    "noscript",
    "iframe",
    "object",
    "embed",
    "nav",
    "header",
    "footer",
    "aside",
    ".ads",
    ".advertisement",
    ".social-share",
    ".comments",
    ".sidebar",
    ".menu",
]

TEXT_BLOCKS = "p, h1, h2, h3, h4, h5, h6, li, blockquote"

AnalysisOutcome = Union[AnalysisResult, AnalysisError]
Extraction = Callable[[Tag], str]


def strip_boilerplate(tag: Tag) -> Tag:
    """Return a copy of ``tag`` without scripts, chrome, ads or comments."""
    clone = copy.copy(tag)
    for selector in REMOVE_SELECTORS:
        for element in clone.select(selector):
            # Nested matches are already gone with their ancestor.
            if not element.decomposed:
                element.decompose()
    for comment in clone.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return clone


class ContentAnalyzer:
    """
    Extracts, cleans, validates and prepares content for summarization.

    The analyzed element is never modified; all removal happens on a copy.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None) -> None:
        self.config = config or AnalysisConfig()
        self.logger = logger.bind(component="ContentAnalyzer")
        self.extractions: Sequence[Extraction] = [self._structured_text, self._full_text]

    def _structured_text(self, tag: Tag) -> str:
        blocks, _ = collect_blocks(tag.select(TEXT_BLOCKS), min_chars=self.config.min_block_chars)
        return PARAGRAPH_BREAK.join(element_text(block) for block in blocks)

    def _full_text(self, tag: Tag) -> str:
        return element_text(tag)

    def extract_raw_text(self, tag: Tag) -> str:
        clone = strip_boilerplate(tag)
        for extraction in self.extractions:
            text = extraction(clone)
            if text:
                return text
        return ""

    def analyze(self, element: Union[ContentElement, Tag], url: Optional[str] = None) -> AnalysisOutcome:
        """
        Analyze a content element.

        Args:
            element: Detected content element, or a bare tag
            url: Source URL, used for content-type and domain metadata

        Returns:
            AnalysisResult when the content passes validation, otherwise
            AnalysisError naming the failed gate
        """
        tag = element.tag if isinstance(element, ContentElement) else element

        raw_text = self.extract_raw_text(tag)
        cleaned_text = clean_text(raw_text)
        validation = validate_text(cleaned_text, self.config)

        if not validation.is_valid:
            kind = validation.failure or AnalysisErrorKind.CONTENT_TOO_SHORT
            METRICS["analysis_total"].labels(outcome=kind.value).inc()
            self.logger.info(
                "Content failed validation",
                url=url,
                kind=kind.value,
                issues=validation.issues,
                cleaned_length=len(cleaned_text),
            )
            return AnalysisError(kind=kind, validation=validation, raw_text=raw_text)

        processed = prepare_for_ai(cleaned_text, self.config.max_content_length, self.config.boundary_ratio)
        metadata = build_metadata(tag, cleaned_text, url)

        METRICS["analysis_total"].labels(outcome="valid").inc()
        self.logger.info(
            "Content analysis completed",
            url=url,
            original_length=len(raw_text),
            cleaned_length=len(cleaned_text),
            processed_length=len(processed),
            readability_score=metadata.readability_score,
            content_type=metadata.content_type,
        )
        for warning in validation.warnings:
            self.logger.warning("Content validation warning", url=url, warning=warning)

        return AnalysisResult(
            raw_text=raw_text,
            cleaned_text=cleaned_text,
            processed_content=processed,
            metadata=metadata,
            validation=validation,
        )

    def analyze_text(self, text: str, url: Optional[str] = None) -> AnalysisOutcome:
        """Analyze plain text that did not come from a document."""
        holder = BeautifulSoup("<div></div>", "html.parser")
        container = holder.div
        assert container is not None
        for paragraph in text.split(PARAGRAPH_BREAK):
            block = holder.new_tag("p")
            block.string = paragraph
            container.append(block)
        return self.analyze(container, url=url)

