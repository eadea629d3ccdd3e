"""
Unit tests for the command-line interface.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from pagebrief import __version__
from pagebrief.cli import cli
from pagebrief.summarizer.prompts import HIGHLIGHTS
from tests.helpers import FakeProvider, article_html, long_article_html, short_page_html
from tests.helpers.pages import SENTENCES

pytestmark = pytest.mark.usefixtures("restore_logging")

URL = "https://news.example.com/news/kelp"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def configured_env(monkeypatch):
    monkeypatch.setenv("PAGEBRIEF_PROVIDER__API_KEY", "test-key")
    monkeypatch.setenv("PAGEBRIEF_RATE_LIMIT__MIN_INTERVAL_SECONDS", "0")


@pytest.fixture
def article_file(temp_dir: Path) -> Path:
    path = temp_dir / "article.html"
    path.write_text(article_html(), encoding="utf-8")
    return path


def invoke(runner: CliRunner, *args: str, **kwargs):
    return runner.invoke(cli, ["--log-level", "ERROR", *args], obj={}, **kwargs)


@pytest.mark.unit
class TestInspectionCommands:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"], obj={})
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_detect_json(self, runner, temp_dir):
        path = temp_dir / "long.html"
        path.write_text(long_article_html(), encoding="utf-8")

        result = invoke(runner, "detect", str(path), "--url", URL, "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["is_article"] is True
        assert data["title"] == "Kelp Forests and Carbon"
        assert data["source_url"] == URL

    def test_detect_table(self, runner, article_file):
        result = invoke(runner, "detect", str(article_file))

        assert result.exit_code == 0, result.output
        assert "Page Analysis" in result.output
        assert "Dana Reyes" in result.output

    def test_detect_from_stdin(self, runner):
        result = invoke(runner, "detect", "-", "--json", input=short_page_html())

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["is_article"] is False

    def test_empty_input(self, runner):
        result = invoke(runner, "detect", "-", input="   ")

        assert result.exit_code == 1
        assert "input is empty" in result.output

    def test_analyze(self, runner, article_file):
        result = invoke(runner, "analyze", str(article_file), "--url", URL)

        assert result.exit_code == 0, result.output
        assert "Content Analysis" in result.output
        assert "Valid: yes" in result.output

    def test_analyze_without_content(self, runner):
        result = invoke(runner, "analyze", "-", input=short_page_html())

        assert result.exit_code == 1
        assert "No main content found" in result.output


@pytest.mark.unit
class TestSummarizeCommand:
    def test_summarize_json(self, runner, article_file, configured_env):
        provider = FakeProvider()
        with patch("pagebrief.pipeline.create_provider", return_value=provider):
            result = invoke(runner, "summarize", str(article_file), "--url", URL, "--json", "--no-concepts")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["status"] == "completed"
        assert data["summary"]["difficulty_level"] == "Beginner"
        assert data["summary"]["concepts"] == []
        assert provider.calls == 6
        assert provider.closed is True

    def test_summarize_renders_panels(self, runner, article_file, configured_env):
        with patch("pagebrief.pipeline.create_provider", return_value=FakeProvider()):
            result = invoke(runner, "summarize", str(article_file), "--length", "short")

        assert result.exit_code == 0, result.output
        assert "Quick Summary" in result.output
        assert "Key Points" in result.output
        assert "completed" in result.output

    def test_summarize_uses_cache(self, runner, article_file, configured_env):
        first = FakeProvider()
        second = FakeProvider()
        with patch("pagebrief.pipeline.create_provider", side_effect=[first, second, FakeProvider()]):
            invoke(runner, "summarize", str(article_file), "--json")
            invoke(runner, "summarize", str(article_file), "--json")
            forced = invoke(runner, "summarize", str(article_file), "--json", "--force")

        assert first.calls == 7
        assert second.calls == 0
        assert forced.exit_code == 0, forced.output

    def test_summarize_without_key(self, runner, article_file):
        with patch("pagebrief.pipeline.create_provider", return_value=FakeProvider()):
            result = invoke(runner, "summarize", str(article_file))

        assert result.exit_code == 1
        assert "not_configured" in result.output

    def test_summarize_page_without_content(self, runner, configured_env):
        with patch("pagebrief.pipeline.create_provider", return_value=FakeProvider()):
            result = invoke(runner, "summarize", "-", input=short_page_html())

        assert result.exit_code == 1
        assert "no_content" in result.output

    def test_highlight(self, runner, article_file, configured_env):
        response = json.dumps({"high": [SENTENCES[0]], "medium": [], "low": []})
        with patch("pagebrief.pipeline.create_provider", return_value=FakeProvider(responses={HIGHLIGHTS: response})):
            result = invoke(runner, "highlight", str(article_file))

        assert result.exit_code == 0, result.output
        assert "High importance" in result.output
        assert "(none)" in result.output

    def test_config_file(self, runner, article_file, temp_dir):
        config_path = temp_dir / "pagebrief.yaml"
        config_path.write_text(
            yaml.safe_dump(
                {
                    "provider": {"api_key": "from-file"},
                    "rate_limit": {"min_interval_seconds": 0},
                    "cache": {"db_path": str(temp_dir / "file-cache.db")},
                }
            ),
            encoding="utf-8",
        )
        with patch("pagebrief.pipeline.create_provider", return_value=FakeProvider()):
            result = invoke(runner, "--config", str(config_path), "summarize", str(article_file), "--json")

        assert result.exit_code == 0, result.output
        assert (temp_dir / "file-cache.db").exists()


@pytest.mark.unit
class TestCacheCommands:
    def test_stats_and_clear(self, runner, article_file, configured_env):
        with patch("pagebrief.pipeline.create_provider", return_value=FakeProvider()):
            invoke(runner, "summarize", str(article_file), "--json")

        stats = invoke(runner, "cache", "stats")
        assert stats.exit_code == 0, stats.output
        assert "Summary Cache" in stats.output
        assert "capacity" in stats.output

        cleared = invoke(runner, "cache", "clear")
        assert cleared.exit_code == 0, cleared.output
        assert "Removed 1 cached summaries" in cleared.output
