"""
Unit tests for article classification and byline extraction.
"""

from __future__ import annotations

import pytest

from pagebrief.detector import ContentDetector, Document, PageAnalysis, PageAnalyzer
from pagebrief.detector.page import article_confidence, extract_author, extract_publish_date, extract_title
from tests.helpers import long_article_html, paragraph, short_page_html


@pytest.mark.unit
class TestPageAnalyzer:
    def test_long_article_is_classified_as_article(self):
        document = Document.from_html(long_article_html(), url="https://news.example.com/news/kelp")

        page = PageAnalyzer().analyze(document)

        assert page.is_article is True
        assert page.confidence > 0.6
        assert page.word_count >= 850
        assert page.strategy == "semantic"
        assert page.title == "Kelp Forests and Carbon"
        assert page.author == "Dana Reyes"
        assert page.publish_date == "2024-03-05T09:00:00Z"
        assert page.source_url == "https://news.example.com/news/kelp"

    def test_page_without_content(self):
        page = PageAnalyzer().analyze(Document.from_html(short_page_html()))

        assert page.is_article is False
        assert page.main_content is None
        assert page.confidence == 0.0
        assert page.word_count == 0

    def test_short_post_is_not_an_article(self):
        html = f"<html><body><div class='post-content'><p>{paragraph(0, 4)}</p></div></body></html>"
        page = PageAnalyzer().analyze(Document.from_html(html))

        assert page.main_content is not None
        assert page.word_count < 100
        assert page.is_article is False

    def test_to_dict_is_json_friendly(self):
        page = PageAnalyzer().analyze(Document.from_html(long_article_html()))
        data = page.to_dict()
        assert data["is_article"] is True
        assert isinstance(data["timestamp"], str)
        assert "main_content" not in data


@pytest.mark.unit
class TestPageAnalysisInvariants:
    def test_article_requires_words_and_confidence(self):
        with pytest.raises(ValueError):
            PageAnalysis(
                is_article=True,
                title="t",
                author="",
                publish_date="",
                word_count=99,
                confidence=0.9,
                main_content=None,
                source_url=None,
            )
        with pytest.raises(ValueError):
            PageAnalysis(
                is_article=True,
                title="t",
                author="",
                publish_date="",
                word_count=500,
                confidence=0.6,
                main_content=None,
                source_url=None,
            )

    def test_confidence_range(self):
        with pytest.raises(ValueError):
            PageAnalysis(
                is_article=False,
                title="t",
                author="",
                publish_date="",
                word_count=0,
                confidence=1.5,
                main_content=None,
                source_url=None,
            )


@pytest.mark.unit
class TestBylineExtraction:
    def test_title_fallbacks(self):
        assert extract_title(Document.from_html("<title>Page Title</title><p>x</p>")) == "Page Title"
        og = '<meta property="og:title" content="Social Title">'
        assert extract_title(Document.from_html(f"<head>{og}</head>")) == "Social Title"
        assert extract_title(Document.from_html("<p>nothing</p>")) == "Untitled Article"

    def test_author_from_meta(self):
        html = '<head><meta name="author" content=" Sam Lee "></head><body></body>'
        assert extract_author(Document.from_html(html)) == "Sam Lee"

    def test_date_prefers_datetime_attribute(self):
        html = '<span class="date">Yesterday</span><time datetime="2024-01-01">Jan 1</time>'
        assert extract_publish_date(Document.from_html(html)) == "2024-01-01"

    def test_date_falls_back_to_text(self):
        assert extract_publish_date(Document.from_html('<span class="date">Yesterday</span>')) == "Yesterday"

    def test_confidence_is_capped(self):
        document = Document.from_html(long_article_html())
        content = ContentDetector().detect(document)
        assert article_confidence(document, content) == 1.0
