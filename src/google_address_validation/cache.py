"""Expiring key/value stores for validateAddress payloads.

Two backends share one async interface:

- ``MemoryCache`` keeps entries in a dict for the lifetime of the process.
- ``SqlCache`` persists entries to SQLite (~/.google-address-validation/cache.db
  by default) through SQLAlchemy's async engine, so cached lookups survive
  restarts. WAL mode is enabled so the purge scheduler can delete rows while
  lookups read.

Values are decoded JSON payloads. A TTL of 0 means the entry never expires.
"""

from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Optional, Protocol

from sqlalchemy import delete, event
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .core.clients.address_validation import ResponseCache
from .core.request import CACHE_KEY_PREFIX
from .sqlmodels import Base, CachedValidation

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.path.expanduser("~/.google-address-validation")


class ManagedCache(ResponseCache, Protocol):
    """A cache backend with a lifecycle and expiry housekeeping."""

    async def init(self) -> None: ...

    async def close(self) -> None: ...

    async def purge_expired(self) -> int: ...


# Far-future timestamp (9999-12-31) for entries stored with a TTL of 0.
NEVER_EXPIRES = 253402300799.0


def _expiry(ttl: int) -> float:
    return time.time() + ttl if ttl > 0 else NEVER_EXPIRES


class MemoryCache:
    """In-process cache. Not shared between processes."""

    def __init__(self):
        self._entries: dict[str, tuple[float, dict[str, Any]]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def init(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= time.time():
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        self._entries[key] = (_expiry(ttl), value)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    async def purge_expired(self) -> int:
        now = time.time()
        stale = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in stale:
            del self._entries[key]
        return len(stale)


def get_data_dir() -> Path:
    """Get the data directory, creating it if needed."""
    data_dir = Path(os.environ.get("DATA_DIR", DEFAULT_DATA_DIR))
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def default_db_url() -> str:
    return f"sqlite+aiosqlite:///{get_data_dir() / 'cache.db'}"


def _set_wal_mode(dbapi_connection, connection_record):
    """Enable WAL mode for concurrent reads during writes."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


class SqlCache:
    """SQLite-backed cache. Call ``init()`` before use and ``close()`` after."""

    def __init__(self, db_url: Optional[str] = None):
        self.db_url = db_url or default_db_url()
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    def _sessions(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._engine = create_async_engine(self.db_url, echo=False)
            event.listen(self._engine.sync_engine, "connect", _set_wal_mode)
            self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)
        return self._session_factory

    async def init(self) -> None:
        """Create the cache table if it doesn't exist."""
        self._sessions()
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Validation cache initialized at %s", self.db_url)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        async with self._sessions()() as session:
            row = await session.get(CachedValidation, key)
        if row is None or row.expires_at <= time.time():
            return None
        try:
            return json.loads(row.payload)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable cache entry %s", key)
            await self.delete(key)
            return None

    async def set(self, key: str, value: dict[str, Any], ttl: int) -> None:
        stmt = sqlite_insert(CachedValidation).values(
            key=key,
            payload=json.dumps(value),
            expires_at=_expiry(ttl),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[CachedValidation.key],
            set_={"payload": stmt.excluded.payload, "expires_at": stmt.excluded.expires_at},
        )
        async with self._sessions()() as session:
            await session.execute(stmt)
            await session.commit()

    async def delete(self, key: str) -> bool:
        async with self._sessions()() as session:
            result = await session.execute(delete(CachedValidation).where(CachedValidation.key == key))
            await session.commit()
        return result.rowcount > 0

    async def clear(self) -> int:
        async with self._sessions()() as session:
            result = await session.execute(
                delete(CachedValidation).where(CachedValidation.key.startswith(CACHE_KEY_PREFIX, autoescape=True))
            )
            await session.commit()
        return result.rowcount

    async def purge_expired(self) -> int:
        async with self._sessions()() as session:
            result = await session.execute(
                delete(CachedValidation).where(CachedValidation.expires_at <= time.time())
            )
            await session.commit()
        return result.rowcount


def create_cache(backend: str) -> ManagedCache:
    """Build the cache backend named in the client config."""
    if backend == "sqlite":
        return SqlCache()
    return MemoryCache()
