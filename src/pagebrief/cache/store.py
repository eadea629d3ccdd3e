"""
SQLite-backed summary cache.

Bounded, time-expiring key/value store for generated summaries:
- At most ``capacity`` live entries; inserting beyond it evicts the
  entries with the earliest ``created_at``
- Entries older than their TTL are a miss even while still stored
- Last writer wins on the same key
- Schema: summary_cache(key TEXT PRIMARY KEY, payload TEXT, created_at REAL, ttl REAL)
"""

from __future__ import annotations

import asyncio
import sqlite3
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable, List, Optional

import aiosqlite
import structlog
from pydantic import ValidationError

from ..config.config import CacheConfig
from ..observability.metrics import METRICS
from ..summarizer.models import SummaryData

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]


class CacheStore:
    """
    Durable summary cache.

    Features:
    - WAL mode for concurrent readers
    - Async operations with aiosqlite
    - Connection pooling and proper cleanup
    - Injectable clock for expiry
    """

    def __init__(
        self,
        db_path: Path,
        *,
        capacity: int = 10,
        ttl_seconds: float = 24 * 3600,
        wal_mode: bool = True,
        clock: Clock = time.time,
    ) -> None:
        """
        Initialize the cache.

        Args:
            db_path: Path to SQLite database file
            capacity: Maximum number of entries kept
            ttl_seconds: Lifetime of an entry
            wal_mode: Enable Write-Ahead Logging mode
            clock: Returns the current time in seconds
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")

        self.db_path = Path(db_path)
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self.wal_mode = wal_mode
        self.clock = clock

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection_pool: List[aiosqlite.Connection] = []
        self._pool_size = 2
        self._pool_lock = asyncio.Lock()
        # Serializes put() so capacity eviction sees its own insert.
        self._write_lock = asyncio.Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

        self._init_database()

    @classmethod
    def from_config(cls, config: CacheConfig, clock: Clock = time.time) -> CacheStore:
        return cls(
            config.db_path,
            capacity=config.capacity,
            ttl_seconds=config.ttl_hours * 3600,
            wal_mode=config.wal_mode,
            clock=clock,
        )

    def _init_database(self) -> None:
        """Initialize database schema synchronously."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                if self.wal_mode:
                    conn.execute("PRAGMA journal_mode=WAL")
                conn.execute("PRAGMA synchronous=NORMAL")
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS summary_cache (
                        key TEXT PRIMARY KEY,
                        payload TEXT NOT NULL,
                        created_at REAL NOT NULL,
                        ttl REAL NOT NULL
                    )
                    """
                )
                conn.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_summary_cache_created_at
                    ON summary_cache(created_at)
                    """
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error("Failed to initialize summary cache", db_path=str(self.db_path), error=str(e))
            raise
        logger.debug("Initialized summary cache", db_path=str(self.db_path))

    @asynccontextmanager
    async def _get_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Get a connection from the pool or create a new one."""
        async with self._pool_lock:
            if self._connection_pool:
                conn = self._connection_pool.pop()
            else:
                conn = await aiosqlite.connect(self.db_path)
                if self.wal_mode:
                    await conn.execute("PRAGMA journal_mode=WAL")
                await conn.execute("PRAGMA synchronous=NORMAL")

        try:
            yield conn
        finally:
            async with self._pool_lock:
                if len(self._connection_pool) < self._pool_size:
                    self._connection_pool.append(conn)
                else:
                    await conn.close()

    async def get(self, key: str) -> Optional[SummaryData]:
        """
        Look up a cached summary.

        Returns:
            The stored SummaryData, or None when absent or expired
        """
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT payload, created_at, ttl FROM summary_cache WHERE key = ?", (key,))
            row = await cursor.fetchone()

        if row is None:
            return self._miss(key, "absent")

        payload, created_at, ttl = row
        if self.clock() - created_at >= ttl:
            return self._miss(key, "expired")

        try:
            value = SummaryData.model_validate_json(payload)
        except ValidationError as e:
            logger.warning("Discarding unreadable cache entry", key=key[:16], error=str(e))
            await self.delete(key)
            return self._miss(key, "corrupt")

        self._hits += 1
        METRICS["cache_lookups_total"].labels(result="hit").inc()
        logger.debug("Cache hit", key=key[:16])
        return value

    def _miss(self, key: str, reason: str) -> None:
        self._misses += 1
        METRICS["cache_lookups_total"].labels(result="miss").inc()
        logger.debug("Cache miss", key=key[:16], reason=reason)
        return None

    async def contains(self, key: str) -> bool:
        """Whether a live entry exists for ``key``."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT 1 FROM summary_cache WHERE key = ? AND ? - created_at < ttl", (key, self.clock())
            )
            return await cursor.fetchone() is not None

    async def put(self, key: str, value: SummaryData) -> None:
        """Store ``value`` under ``key`` and enforce the capacity bound."""
        payload = value.model_dump_json()
        async with self._write_lock:
            async with self._get_connection() as conn:
                await conn.execute(
                    "INSERT OR REPLACE INTO summary_cache (key, payload, created_at, ttl) VALUES (?, ?, ?, ?)",
                    (key, payload, self.clock(), self.ttl_seconds),
                )
                cursor = await conn.execute(
                    """
                    DELETE FROM summary_cache WHERE key IN (
                        SELECT key FROM summary_cache
                        ORDER BY created_at DESC, rowid DESC
                        LIMIT -1 OFFSET ?
                    )
                    """,
                    (self.capacity,),
                )
                await conn.commit()
                evicted = max(cursor.rowcount, 0)

        self._evictions += evicted
        logger.debug("Cached summary", key=key[:16], evicted=evicted)

    async def delete(self, key: str) -> bool:
        async with self._get_connection() as conn:
            cursor = await conn.execute("DELETE FROM summary_cache WHERE key = ?", (key,))
            await conn.commit()
            return cursor.rowcount > 0

    async def evict_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries deleted
        """
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "DELETE FROM summary_cache WHERE ? - created_at >= ttl",
                (self.clock(),),
            )
            await conn.commit()
            deleted = cursor.rowcount

        if deleted:
            logger.info("Evicted expired summaries", count=deleted)
        return deleted

    async def clear(self) -> int:
        async with self._get_connection() as conn:
            cursor = await conn.execute("DELETE FROM summary_cache")
            await conn.commit()
            deleted = cursor.rowcount
        logger.info("Summary cache cleared", count=deleted)
        return deleted

    async def size(self) -> int:
        """Number of stored entries, expired ones included."""
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM summary_cache")
            row = await cursor.fetchone()
        return row[0] if row else 0

    async def get_stats(self) -> dict:
        """Get cache statistics."""
        lookups = self._hits + self._misses
        return {
            "entries": await self.size(),
            "capacity": self.capacity,
            "ttl_seconds": self.ttl_seconds,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / lookups if lookups else 0.0,
            "evictions": self._evictions,
            "db_path": str(self.db_path),
        }

    async def close(self) -> None:
        """Close all database connections."""
        async with self._pool_lock:
            for conn in self._connection_pool:
                await conn.close()
            self._connection_pool.clear()
        logger.debug("Summary cache connections closed")

    async def __aenter__(self) -> CacheStore:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
