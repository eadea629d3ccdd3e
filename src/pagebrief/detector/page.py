"""
Article classification and byline metadata for a whole page.
"""

from __future__ import annotations

from typing import Optional

import structlog

from ..config.config import DetectionConfig
from .detector import ContentDetector
from .models import ContentElement, Document, NotFound, PageAnalysis, element_text

logger = structlog.get_logger(__name__)

AUTHOR_SELECTORS = [
    '[rel="author"]',
    ".author",
    ".byline",
    ".writer",
    '[itemprop="author"]',
    ".post-author",
    ".article-author",
]

DATE_SELECTORS = [
    "time[datetime]",
    ".date",
    ".published",
    ".publish-date",
    '[itemprop="datePublished"]',
    ".post-date",
    ".article-date",
]

DATE_MARKERS = 'time, .date, [itemprop="datePublished"]'
AUTHOR_MARKERS = '[rel="author"], .author, .byline'

MIN_ARTICLE_WORDS = 100
MIN_ARTICLE_CONFIDENCE = 0.6


def extract_title(document: Document, content: Optional[ContentElement] = None) -> str:
    if content is not None:
        heading = content.tag.find("h1")
        if heading is not None and element_text(heading):
            return element_text(heading)
    heading = document.soup.find("h1")
    if heading is not None and element_text(heading):
        return element_text(heading)
    if document.title:
        return document.title
    return document.meta_content(prop="og:title") or "Untitled Article"


def extract_author(document: Document) -> str:
    for selector in AUTHOR_SELECTORS:
        element = document.select_one(selector)
        if element is not None:
            return element_text(element)
    return document.meta_content(name="author")


def extract_publish_date(document: Document) -> str:
    for selector in DATE_SELECTORS:
        element = document.select_one(selector)
        if element is not None:
            stamp = element.get("datetime")
            if isinstance(stamp, str) and stamp.strip():
                return stamp.strip()
            return element_text(element)
    return document.meta_content(prop="article:published_time")


def article_confidence(document: Document, content: ContentElement) -> float:
    """Confidence in [0, 1] that ``content`` is the body of an article."""
    confidence = 0.0

    if content.word_count > 500:
        confidence += 0.3
    elif content.word_count > 200:
        confidence += 0.2
    elif content.word_count > 100:
        confidence += 0.1

    paragraphs = len(content.tag.find_all("p"))
    if paragraphs > 5:
        confidence += 0.2
    elif paragraphs > 2:
        confidence += 0.1

    if content.tag_name == "article":
        confidence += 0.2
    if content.tag.find(["h1", "h2", "h3"]) is not None:
        confidence += 0.1

    if len(content.text) / max(content.markup_length, 1) > 0.5:
        confidence += 0.2

    if document.select_one(DATE_MARKERS) is not None:
        confidence += 0.1
    if document.select_one(AUTHOR_MARKERS) is not None:
        confidence += 0.1

    return round(min(confidence, 1.0), 2)


class PageAnalyzer:
    """Decides whether a page is an article and collects its byline."""

    def __init__(self, config: Optional[DetectionConfig] = None, detector: Optional[ContentDetector] = None) -> None:
        self.config = config or DetectionConfig()
        self.detector = detector or ContentDetector(self.config)

    def analyze(self, document: Document) -> PageAnalysis:
        result = self.detector.detect(document)
        if isinstance(result, NotFound):
            return PageAnalysis(
                is_article=False,
                title=extract_title(document),
                author=extract_author(document),
                publish_date=extract_publish_date(document),
                word_count=0,
                confidence=0.0,
                main_content=None,
                source_url=document.url,
            )

        confidence = article_confidence(document, result)
        is_article = result.word_count >= MIN_ARTICLE_WORDS and confidence > MIN_ARTICLE_CONFIDENCE
        analysis = PageAnalysis(
            is_article=is_article,
            title=extract_title(document, result),
            author=extract_author(document),
            publish_date=extract_publish_date(document),
            word_count=result.word_count,
            confidence=confidence,
            main_content=result,
            source_url=document.url,
            strategy=result.strategy,
        )
        logger.info(
            "Page analyzed",
            url=document.url,
            is_article=is_article,
            confidence=confidence,
            word_count=result.word_count,
            strategy=result.strategy,
        )
        return analysis
