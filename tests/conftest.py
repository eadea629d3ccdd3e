"""
Test configuration for PageBrief.

Provides fixtures for sample pages, configuration isolated to a temporary
directory, and fakes for the summarization provider and presenter.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator, List
from unittest.mock import patch

import pytest
import pytest_asyncio
import structlog
from pydantic import SecretStr

from pagebrief.analyzer import AnalysisResult, ContentAnalyzer
from pagebrief.cache import CacheStore
from pagebrief.config import Config
from pagebrief.config.config import CacheConfig, ProviderConfig, RateLimitConfig
from pagebrief.detector import ContentDetector, Document
from pagebrief.summarizer import RequestRateLimiter
from tests.helpers import FakeProvider, RecordingPresenter, StaticSettings, article_html, long_article_html

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


# ============================================================================
# Environment and configuration
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, temp_dir: Path) -> None:
    """Keep tests away from the user's real cache, config files and credentials."""
    for name in list(os.environ):
        if name.upper().startswith("PAGEBRIEF_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PAGEBRIEF_CACHE__DB_PATH", str(temp_dir / "env-cache.db"))
    monkeypatch.chdir(temp_dir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Configuration with the cache in a temporary directory and no request spacing."""
    return Config(
        provider=ProviderConfig(api_key=SecretStr("test-key")),
        rate_limit=RateLimitConfig(max_requests_per_hour=100, min_interval_seconds=0.0),
        cache=CacheConfig(db_path=temp_dir / "cache.db"),
    )


# ============================================================================
# Sample content
# ============================================================================


@pytest.fixture
def sample_article_html() -> str:
    return article_html()


@pytest.fixture
def long_article() -> str:
    return long_article_html()


@pytest.fixture
def analysis_result(sample_article_html: str) -> AnalysisResult:
    """A valid analysis of the sample article."""
    document = Document.from_html(sample_article_html, url="https://news.example.com/news/kelp")
    element = ContentDetector().detect(document)
    outcome = ContentAnalyzer().analyze(element, url=document.url)
    assert isinstance(outcome, AnalysisResult)
    return outcome


@pytest_asyncio.fixture
async def cache_store(temp_dir: Path) -> AsyncGenerator[CacheStore, None]:
    store = CacheStore(temp_dir / "cache.db")
    yield store
    await store.close()


# ============================================================================
# Fakes
# ============================================================================


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def static_settings() -> StaticSettings:
    return StaticSettings()


@pytest.fixture
def recording_presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def recorded_sleeps() -> List[float]:
    return []


@pytest.fixture
def fake_sleep(recorded_sleeps: List[float]):
    """Sleep replacement that records delays and returns immediately."""

    async def _sleep(delay: float) -> None:
        recorded_sleeps.append(delay)

    return _sleep


@pytest.fixture
def deterministic_jitter():
    """Make backoff jitter deterministic for testing."""
    with patch("pagebrief.summarizer.orchestrator.random.uniform", return_value=1.0):
        yield


@pytest.fixture
def no_wait_limiter(fake_sleep) -> RequestRateLimiter:
    return RequestRateLimiter(max_requests=1000, min_interval=0.0, sleep=fake_sleep)


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Undo configure_logging so handlers bound to a test's streams do not leak."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
