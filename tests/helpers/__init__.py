from .fakes import CANNED_RESPONSES, FakeProvider, RecordingPresenter, StaticSettings
from .metric_delta import get_histogram_count, histogram_observes, metric_delta
from .pages import article_html, long_article_html, paragraph, short_page_html, words_in

__all__ = [
    "CANNED_RESPONSES",
    "FakeProvider",
    "RecordingPresenter",
    "StaticSettings",
    "article_html",
    "get_histogram_count",
    "histogram_observes",
    "long_article_html",
    "metric_delta",
    "paragraph",
    "short_page_html",
    "words_in",
]
