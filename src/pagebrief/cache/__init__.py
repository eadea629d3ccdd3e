"""
Durable, bounded, time-expiring summary cache.
"""

from .store import CacheStore

__all__ = ["CacheStore"]
