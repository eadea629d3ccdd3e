"""
Configuration management for PageBrief using Pydantic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

SummaryLength = Literal["short", "medium", "long"]

# --- Nested Configuration Models ---


class DetectionConfig(BaseModel):
    """Main-content detection configuration."""

    parser: str = Field(default="html.parser", description="BeautifulSoup parser backend.")
    cascade_order: List[str] = Field(
        default=["site_specific", "semantic", "common_selectors", "heuristic", "aggressive", "emergency"],
        description="Order in which detection strategies are tried.",
    )
    min_total_words: int = Field(default=50, description="Minimum words a detected element must carry.")
    heuristic_threshold: float = Field(default=20.0, description="Score a heuristic candidate must exceed.")
    viewport_chars: int = Field(
        default=3000,
        description="Characters of document text treated as the initial viewport.",
    )
    emergency_max_blocks: int = Field(default=20, description="Blocks kept by the emergency fallback.")
    platform_domains: List[str] = Field(
        default=["medium.com"],
        description="Hosts for which the aggressive platform fallback runs.",
    )

    @field_validator("cascade_order")
    @classmethod
    def validate_cascade_order(cls, v: List[str]) -> List[str]:
        """Ensure cascade order is not empty."""
        if not v:
            raise ValueError("cascade_order must contain at least one strategy")
        return v


class AnalysisConfig(BaseModel):
    """Text cleaning and validation thresholds."""

    max_content_length: int = Field(default=15000, description="Character cap for AI-ready content.")
    min_content_length: int = Field(default=100, description="Minimum cleaned length in characters.")
    min_word_count: int = Field(default=20, description="Minimum number of words longer than two characters.")
    min_unique_ratio: float = Field(default=0.3, ge=0, le=1, description="Minimum unique-word ratio.")
    min_sentence_count: int = Field(default=3, description="Minimum number of sentences.")
    boundary_ratio: float = Field(
        default=0.8,
        ge=0,
        le=1,
        description="Fraction of the cap a sentence boundary must reach to be used as cut point.",
    )
    min_block_chars: int = Field(default=10, description="Minimum length of a text block kept during extraction.")


class ProviderConfig(BaseModel):
    """Generative provider configuration."""

    name: Literal["anthropic"] = "anthropic"
    api_key: Optional[SecretStr] = Field(default=None, description="Provider API key.")
    base_url: str = Field(default="https://api.anthropic.com/v1/messages", description="Messages endpoint.")
    api_version: str = Field(default="2023-06-01", description="Value of the anthropic-version header.")
    model: str = Field(default="claude-3-5-sonnet-20241022", description="Model identifier.")
    timeout_seconds: float = Field(default=60.0, description="Per-request timeout in seconds.")
    max_retries: int = Field(default=3, description="Retry attempts after the first request.")
    backoff_base_seconds: float = Field(default=1.0, description="Base delay of the exponential backoff.")
    max_tokens: Dict[str, int] = Field(
        default_factory=lambda: {"short": 512, "medium": 1024, "long": 2048},
        description="Output token bound per summary length.",
    )
    temperature: float = Field(default=0.3, ge=0, le=1, description="Sampling temperature for generation.")

    @field_validator("max_tokens")
    @classmethod
    def validate_max_tokens(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Ensure every summary length has a token bound."""
        missing = {"short", "medium", "long"} - set(v)
        if missing:
            raise ValueError(f"max_tokens is missing lengths: {sorted(missing)}")
        return v


class RateLimitConfig(BaseModel):
    """Local request rate limiting."""

    max_requests_per_hour: int = Field(default=100, description="Requests allowed in a rolling hour.")
    min_interval_seconds: float = Field(default=1.0, description="Minimum delay between two requests.")
    max_throttle_wait_seconds: float = Field(
        default=0.0,
        description="Longest wait accepted when the hourly window is full. Longer waits are rejected.",
    )


class CacheConfig(BaseModel):
    """Summary cache configuration."""

    db_path: Path = Field(
        default_factory=lambda: Path.home() / ".pagebrief" / "cache.db",
        description="SQLite database file path",
    )
    capacity: int = Field(default=10, ge=1, description="Maximum number of live entries.")
    ttl_hours: float = Field(default=24.0, gt=0, description="Entry lifetime in hours.")
    wal_mode: bool = Field(default=True, description="Enable Write-Ahead Logging.")

    @field_validator("db_path", mode="before")
    @classmethod
    def ensure_db_directory(cls, v: Any) -> Path:
        """Ensure database directory exists."""
        path = Path(v) if not isinstance(v, Path) else v
        path.parent.mkdir(parents=True, exist_ok=True)
        return path


class SummaryConfig(BaseModel):
    """User-level summary preferences."""

    preferred_length: SummaryLength = Field(default="medium", description="Length used when a request names none.")
    auto_summarize: bool = Field(default=False, description="Summarize detected articles without being asked.")
    include_key_points: bool = True
    include_quick_summary: bool = True
    include_detailed_summary: bool = True
    include_action_items: bool = True
    include_concepts: bool = True


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(
        default=None,
        description="Path to log file. If None, logs to console.",
    )
    prometheus_port: int | None = Field(
        default=None,
        description="Port for Prometheus metrics exporter. None to disable.",
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "PageBrief"
    version: str = "0.1.0"
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="PAGEBRIEF_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "pagebrief.yaml", current_dir / "pagebrief.yml"):
        if path.exists():
            return path
    return None
