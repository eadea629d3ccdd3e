"""Command-line interface for PageBrief."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import IO, Any, Optional

import click
import structlog
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pagebrief import __version__
from pagebrief.analyzer import AnalysisError
from pagebrief.cache import CacheStore
from pagebrief.config import Config, find_config_file
from pagebrief.observability import configure_logging, start_metrics_server
from pagebrief.pipeline import PipelineResult, SummaryPipeline
from pagebrief.summarizer import ConsolePresenter

console = Console()
logger = structlog.get_logger(__name__)


def load_config(ctx: click.Context) -> Config:
    """Build the configuration once per invocation and set up logging."""
    if "config" in ctx.obj:
        return ctx.obj["config"]

    config_path: Optional[Path] = ctx.obj.get("config_path") or find_config_file()
    config = Config.from_yaml(config_path) if config_path else Config()
    log_level = ctx.obj.get("log_level")
    if log_level:
        config.monitoring.log_level = log_level

    configure_logging(config.monitoring)
    if config.monitoring.prometheus_port:
        start_metrics_server(config.monitoring.prometheus_port)

    ctx.obj["config"] = config
    return config


def read_html(source: IO[str]) -> str:
    html = source.read()
    if not html.strip():
        console.print("[red]Error: input is empty[/red]")
        sys.exit(1)
    return html


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """PageBrief - find the article in a web page and summarize it."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else None
    ctx.obj["log_level"] = log_level


@cli.command()
@click.argument("file", type=click.File("r"))
@click.option("--url", help="URL the page was fetched from")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def detect(ctx: click.Context, file: IO[str], url: Optional[str], as_json: bool) -> None:
    """Decide whether FILE is an article and locate its main content."""
    config = load_config(ctx)
    pipeline = SummaryPipeline(config)
    page = pipeline.inspect(read_html(file), url)

    if as_json:
        click.echo(json.dumps(page.to_dict(), indent=2))
        return

    table = Table(title="Page Analysis")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Article", "yes" if page.is_article else "no")
    table.add_row("Title", page.title or "-")
    table.add_row("Author", page.author or "-")
    table.add_row("Published", page.publish_date or "-")
    table.add_row("Words", str(page.word_count))
    table.add_row("Confidence", f"{page.confidence:.2f}")
    table.add_row("Strategy", page.strategy or "-")
    console.print(table)


@cli.command()
@click.argument("file", type=click.File("r"))
@click.option("--url", help="URL the page was fetched from")
@click.pass_context
def analyze(ctx: click.Context, file: IO[str], url: Optional[str]) -> None:
    """Clean and validate the main content of FILE."""
    config = load_config(ctx)
    pipeline = SummaryPipeline(config)
    _, outcome = pipeline.prepare(read_html(file), url)

    if outcome is None:
        console.print("[yellow]No main content found on this page[/yellow]")
        sys.exit(1)
    if isinstance(outcome, AnalysisError):
        console.print(f"[red]Content not suitable for summarization: {outcome.message}[/red]")
        sys.exit(1)

    console.print(Panel(outcome.summary(), title="Content Analysis", border_style="cyan"))


def _report_failure(result: PipelineResult) -> None:
    style = "yellow" if result.status.value in ("no_content", "invalid_content") else "red"
    console.print(f"[{style}]{result.status.value}: {result.message}[/{style}]")
    sys.exit(1)


@cli.command()
@click.argument("file", type=click.File("r"))
@click.option("--url", help="URL the page was fetched from")
@click.option("--length", type=click.Choice(["short", "medium", "long"]), help="Summary length")
@click.option("--force", is_flag=True, help="Ignore the cache and generate a fresh summary")
@click.option("--no-key-points", is_flag=True, help="Skip key points")
@click.option("--no-action-items", is_flag=True, help="Skip action items")
@click.option("--no-concepts", is_flag=True, help="Skip concept explanations")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def summarize(
    ctx: click.Context,
    file: IO[str],
    url: Optional[str],
    length: Optional[str],
    force: bool,
    no_key_points: bool,
    no_action_items: bool,
    no_concepts: bool,
    as_json: bool,
) -> None:
    """Summarize the main content of FILE."""
    config = load_config(ctx)
    html = read_html(file)

    async def run_summary() -> PipelineResult:
        presenter = None if as_json else ConsolePresenter(console)
        async with SummaryPipeline(config, presenter=presenter) as pipeline:
            defaults = pipeline.default_options()
            options = defaults.model_copy(
                update={
                    "max_length": length,
                    "force_regenerate": force,
                    "include_key_points": defaults.include_key_points and not no_key_points,
                    "include_action_items": defaults.include_action_items and not no_action_items,
                    "include_concepts": defaults.include_concepts and not no_concepts,
                }
            )
            result = await pipeline.summarize(html, url, options)
            if presenter is not None and result.summary is not None and result.analysis is not None:
                pipeline.orchestrator.show(result.summary, pipeline.orchestrator.fingerprint(result.analysis, options))
            return result

    result = asyncio.run(run_summary())
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    if not result.ok:
        _report_failure(result)


@cli.command()
@click.argument("file", type=click.File("r"))
@click.option("--url", help="URL the page was fetched from")
@click.pass_context
def highlight(ctx: click.Context, file: IO[str], url: Optional[str]) -> None:
    """Pick the sentences of FILE worth highlighting."""
    config = load_config(ctx)
    html = read_html(file)

    async def run_highlight() -> PipelineResult:
        async with SummaryPipeline(config) as pipeline:
            return await pipeline.highlight(html, url)

    result = asyncio.run(run_highlight())
    if not result.ok or result.highlights is None:
        _report_failure(result)

    for tier, style in (("high", "bold green"), ("medium", "yellow"), ("low", "dim")):
        spans = getattr(result.highlights, tier)
        body = "\n".join(f"- {span}" for span in spans) or "(none)"
        console.print(Panel(body, title=f"{tier.capitalize()} importance", border_style=style))


@cli.group()
def cache() -> None:
    """Manage the summary cache."""


@cache.command("clear")
@click.pass_context
def cache_clear(ctx: click.Context) -> None:
    """Delete every cached summary."""
    config = load_config(ctx)

    async def run_clear() -> int:
        async with CacheStore.from_config(config.cache) as store:
            return await store.clear()

    deleted = asyncio.run(run_clear())
    console.print(f"[green]Removed {deleted} cached summaries[/green]")


@cache.command("stats")
@click.pass_context
def cache_stats(ctx: click.Context) -> None:
    """Show cache occupancy."""
    config = load_config(ctx)

    async def run_stats() -> dict[str, Any]:
        async with CacheStore.from_config(config.cache) as store:
            await store.evict_expired()
            return await store.get_stats()

    stats = asyncio.run(run_stats())
    table = Table(title="Summary Cache")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")
    for name in ("entries", "capacity", "ttl_seconds", "db_path"):
        table.add_row(name, str(stats[name]))
    console.print(table)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
