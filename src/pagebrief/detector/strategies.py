"""
Main-content detection strategies, from most to least specific.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Optional, Sequence

from bs4 import Tag

from ..config.config import DetectionConfig
from .models import ContentElement, Document, count_words, element_text
from .scoring import extract_features, score_candidate

# Publishing-platform paragraph and story markers. Generic structural
# selectors such as "article p" are left to the semantic strategy.
PLATFORM_SELECTORS = [
    "article div[data-selectable-paragraph]",
    "div[data-selectable-paragraph]",
    'div[data-testid="storyContent"]',
    'section[data-testid="storyContent"]',
    ".postArticle-content",
    ".section-content",
    "article .postField",
    ".graf",
    '[data-testid="storyContent"] p',
    '[data-testid="storyContent"] div',
]

CONTENT_SELECTORS = [
    # CMS
    ".article-content",
    ".post-content",
    ".entry-content",
    ".content",
    ".main-content",
    ".article-body",
    ".post-body",
    ".entry-body",
    ".story-body",
    ".article-text",
    # Publishing platforms
    ".postArticle-content",
    ".postField",
    ".section-content",
    ".graf",
    # News
    ".article-wrap",
    ".article-container",
    ".content-wrap",
    ".post-wrap",
    ".entry-wrap",
    ".main-article",
    ".primary-content",
    # WordPress
    ".hentry",
    ".post",
    ".entry",
    ".single-post",
    ".content-area",
    # Generic
    "#article",
    "#content",
    "#main-content",
    "#post-content",
    "#story",
    '[role="main"]',
    '[role="article"]',
    ".container .content",
    # Documentation
    ".markdown-body",
    ".readme",
    ".wiki-content",
    ".doc-content",
    # Blogs
    ".blog-post",
    ".content-body",
]

HEURISTIC_CANDIDATES = 'div, section, article, main, [role="main"]'
EMERGENCY_CANDIDATES = "p, div, span, section, article"
SIGNIFICANT_STRUCTURE = "p, div[data-selectable-paragraph], h1, h2, h3"

NAV_CLASS_PATTERN = re.compile(r"nav|menu|header|footer|sidebar|\bads?\b")
JUNK_CLASS_PATTERN = re.compile(
    r"nav|menu|header|footer|sidebar|\bads?\b|advertisement|social|share|comment|popup|modal"
)


def class_string(tag: Tag) -> str:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        return classes.lower()
    return " ".join(classes).lower()


def has_significant_text(tag: Tag) -> bool:
    """Whether ``tag`` carries enough text or structure to be an article body."""
    text = element_text(tag)
    words = count_words(text)
    if len(text) > 100 and words > 20:
        return True
    if len(tag.select(SIGNIFICANT_STRUCTURE)) > 2 and words > 10:
        return True
    return len(tag.select("div[data-selectable-paragraph]")) > 3


def collect_blocks(elements: Iterable[Tag], min_chars: int) -> tuple[List[Tag], int]:
    """
    Keep elements with more than ``min_chars`` of text, skipping any whose
    ancestor was already kept.

    Returns the kept elements and their total text length.
    """
    kept: List[Tag] = []
    kept_ids: set[int] = set()
    total = 0
    for element in elements:
        if any(id(parent) in kept_ids for parent in element.parents):
            continue
        text = element_text(element)
        if len(text) > min_chars:
            kept.append(element)
            kept_ids.add(id(element))
            total += len(text)
    return kept, total


def first_result(attempts: Sequence[Callable[[], Optional[ContentElement]]]) -> Optional[ContentElement]:
    for attempt in attempts:
        result = attempt()
        if result is not None:
            return result
    return None


class SiteSpecificStrategy:
    """Collects platform paragraph markers into one container."""

    name = "site_specific"

    def __init__(self, config: DetectionConfig, selectors: Optional[List[str]] = None) -> None:
        self.config = config
        self.selectors = selectors or PLATFORM_SELECTORS

    def try_detect(self, document: Document) -> Optional[ContentElement]:
        for selector in self.selectors:
            elements = document.select(selector)
            if not elements:
                continue
            blocks, total_length = collect_blocks(elements, min_chars=10)
            if blocks and total_length > 100:
                container = document.new_container(blocks)
                return ContentElement.from_tag(container, self.name, synthetic=True)
        return None


class SemanticStrategy:
    """First ``<article>``, then first ``<main>``."""

    name = "semantic"

    def __init__(self, config: DetectionConfig) -> None:
        self.config = config

    def try_detect(self, document: Document) -> Optional[ContentElement]:
        for tag_name in ("article", "main"):
            element = document.soup.find(tag_name)
            if element is not None and has_significant_text(element):
                return ContentElement.from_tag(element, self.name)
        return None


class CommonSelectorStrategy:
    """Well-known CMS, blog, news and documentation containers."""

    name = "common_selectors"

    def __init__(self, config: DetectionConfig, selectors: Optional[List[str]] = None) -> None:
        self.config = config
        self.selectors = selectors or CONTENT_SELECTORS

    def try_detect(self, document: Document) -> Optional[ContentElement]:
        for selector in self.selectors:
            element = document.select_one(selector)
            if element is not None and has_significant_text(element):
                return ContentElement.from_tag(element, self.name)
        return None


class HeuristicStrategy:
    """Highest-scoring block container above the configured threshold."""

    name = "heuristic"

    def __init__(self, config: DetectionConfig) -> None:
        self.config = config

    def try_detect(self, document: Document) -> Optional[ContentElement]:
        best: Optional[Tag] = None
        best_score = 0.0
        for candidate in document.select(HEURISTIC_CANDIDATES):
            score = score_candidate(extract_features(candidate, document), self.config.viewport_chars)
            if score > best_score and score > self.config.heuristic_threshold:
                best, best_score = candidate, score
        if best is None:
            return None
        return ContentElement.from_tag(best, self.name)


class AggressivePlatformStrategy:
    """Looser extraction for hosts known to hide their article structure."""

    name = "aggressive"

    STORY_SELECTORS = [
        '[data-testid*="story"]',
        '[data-testid*="content"]',
        '[class*="story"]',
        '[class*="content"]',
        '[class*="article"]',
        '[class*="post"]',
        "main",
        '[role="main"]',
    ]
    PARAGRAPH_LIKE = 'p, div[role="paragraph"], [data-testid*="paragraph"], [data-testid*="content"]'

    def __init__(self, config: DetectionConfig) -> None:
        self.config = config

    def applies_to(self, document: Document) -> bool:
        host = document.host
        return any(host == domain or host.endswith(f".{domain}") for domain in self.config.platform_domains)

    def try_detect(self, document: Document) -> Optional[ContentElement]:
        if not self.applies_to(document):
            return None
        return first_result(
            [
                lambda: self._long_article(document),
                lambda: self._paragraph_collection(document),
                lambda: self._story_container(document),
                lambda: self._largest_block(document),
            ]
        )

    def _long_article(self, document: Document) -> Optional[ContentElement]:
        for article in document.select("article"):
            if len(element_text(article)) > 500:
                return ContentElement.from_tag(article, self.name)
        return None

    def _paragraph_collection(self, document: Document) -> Optional[ContentElement]:
        elements = document.select(self.PARAGRAPH_LIKE)
        if len(elements) <= 5:
            return None
        blocks, total_length = collect_blocks(elements, min_chars=30)
        if total_length > 300:
            return ContentElement.from_tag(document.new_container(blocks), self.name, synthetic=True)
        return None

    def _story_container(self, document: Document) -> Optional[ContentElement]:
        for selector in self.STORY_SELECTORS:
            for element in document.select(selector):
                if len(element_text(element)) > 500:
                    return ContentElement.from_tag(element, self.name)
        return None

    def _largest_block(self, document: Document) -> Optional[ContentElement]:
        best: Optional[Tag] = None
        best_length = 200
        for element in document.select("div, section, article, main"):
            length = len(element_text(element))
            if length > best_length and not NAV_CLASS_PATTERN.search(class_string(element)):
                best, best_length = element, length
        if best is None:
            return None
        return ContentElement.from_tag(best, self.name)


class EmergencyStrategy:
    """Gathers the wordiest readable blocks of the page as a last resort."""

    name = "emergency"

    def __init__(self, config: DetectionConfig) -> None:
        self.config = config

    def try_detect(self, document: Document) -> Optional[ContentElement]:
        scored: List[tuple[int, Tag]] = []
        for element in document.select(EMERGENCY_CANDIDATES):
            text = element_text(element)
            if len(text) < 50:
                continue
            if JUNK_CLASS_PATTERN.search(class_string(element)):
                continue
            words = count_words(text)
            links = len(element.find_all("a"))
            if links > 0 and words / links < 10:
                continue
            if words > 10:
                scored.append((words, element))

        if not scored:
            return None

        scored.sort(key=lambda item: item[0], reverse=True)
        chosen: List[Tag] = []
        chosen_ids: set[int] = set()
        total_words = 0
        for words, element in scored:
            if len(chosen) >= self.config.emergency_max_blocks:
                break
            if any(id(parent) in chosen_ids for parent in element.parents):
                continue
            chosen.append(element)
            chosen_ids.add(id(element))
            total_words += words

        if total_words <= 50:
            return None
        return ContentElement.from_tag(document.new_container(chosen), self.name, synthetic=True)


STRATEGY_TYPES = {
    SiteSpecificStrategy.name: SiteSpecificStrategy,
    SemanticStrategy.name: SemanticStrategy,
    CommonSelectorStrategy.name: CommonSelectorStrategy,
    HeuristicStrategy.name: HeuristicStrategy,
    AggressivePlatformStrategy.name: AggressivePlatformStrategy,
    EmergencyStrategy.name: EmergencyStrategy,
}
