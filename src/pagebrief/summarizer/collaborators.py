"""
Interfaces the orchestrator uses to reach user settings and the display.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

import structlog
from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..config.config import Config
from .models import SummaryData, SummaryLength

logger = structlog.get_logger(__name__)

STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"
STATUS_READY = "ready"


@dataclass(frozen=True)
class UserSettings:
    """User preferences read once per request."""

    api_key: Optional[str] = None
    preferred_length: SummaryLength = "medium"
    auto_summarize: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@runtime_checkable
class SettingsProvider(Protocol):
    def load(self) -> UserSettings: ...


@runtime_checkable
class Presenter(Protocol):
    """Displays summaries and request status to the user."""

    @property
    def is_showing(self) -> bool: ...

    @property
    def displayed_key(self) -> Optional[str]: ...

    def show(self, summary: SummaryData, key: str) -> None: ...

    def set_status(self, status: str, detail: str = "") -> None: ...

    def hide(self) -> None: ...


class ConfigSettingsProvider:
    """Reads user settings from the application configuration."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def load(self) -> UserSettings:
        api_key = self.config.provider.api_key
        return UserSettings(
            api_key=api_key.get_secret_value() if api_key is not None else None,
            preferred_length=self.config.summary.preferred_length,
            auto_summarize=self.config.summary.auto_summarize,
        )


STATUS_STYLES = {
    STATUS_PROCESSING: "yellow",
    STATUS_COMPLETED: "green",
    STATUS_ERROR: "bold red",
    STATUS_READY: "cyan",
}


class ConsolePresenter:
    """Renders summaries to a terminal with rich."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self._displayed_key: Optional[str] = None
        self.last_status: Optional[str] = None

    @property
    def is_showing(self) -> bool:
        return self._displayed_key is not None

    @property
    def displayed_key(self) -> Optional[str]:
        return self._displayed_key

    def set_status(self, status: str, detail: str = "") -> None:
        self.last_status = status
        style = STATUS_STYLES.get(status, "white")
        message = f"[{style}]{status}[/{style}]"
        if detail:
            message += f" {detail}"
        self.console.print(message)

    def show(self, summary: SummaryData, key: str) -> None:
        self._displayed_key = key
        self.console.print(self.render(summary))

    def hide(self) -> None:
        self._displayed_key = None

    @staticmethod
    def render(summary: SummaryData) -> Group:
        panels = []
        if summary.quick_summary:
            panels.append(Panel(summary.quick_summary, title="Quick Summary", border_style="cyan"))
        if summary.detailed_summary:
            panels.append(Panel(Markdown(summary.detailed_summary), title="Detailed Summary"))
        if summary.key_points:
            panels.append(Panel("\n".join(f"- {p}" for p in summary.key_points), title="Key Points"))
        if summary.action_items:
            panels.append(Panel("\n".join(f"- {a}" for a in summary.action_items), title="Action Items"))
        if summary.eli_summary:
            panels.append(Panel(summary.eli_summary, title="Explained Simply"))
        if summary.concepts:
            table = Table(show_header=True, header_style="bold")
            table.add_column("Term", style="cyan")
            table.add_column("Definition")
            table.add_column("Analogy", style="dim")
            for concept in summary.concepts:
                table.add_row(concept.term, concept.definition, concept.analogy)
            panels.append(Panel(table, title="Concepts"))
        panels.append(
            Panel(
                f"Difficulty: {summary.difficulty_level} | Type: {summary.content_type} | "
                f"Words: {summary.original_word_count}",
                border_style="dim",
            )
        )
        return Group(*panels)
