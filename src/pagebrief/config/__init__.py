"""
Configuration package for PageBrief.
"""

from __future__ import annotations

from .config import (
    AnalysisConfig,
    CacheConfig,
    Config,
    DetectionConfig,
    MonitoringConfig,
    ProviderConfig,
    RateLimitConfig,
    SummaryConfig,
    find_config_file,
)

__all__ = [
    "AnalysisConfig",
    "CacheConfig",
    "Config",
    "DetectionConfig",
    "MonitoringConfig",
    "ProviderConfig",
    "RateLimitConfig",
    "SummaryConfig",
    "find_config_file",
]
