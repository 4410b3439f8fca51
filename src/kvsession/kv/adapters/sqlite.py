# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""SQLite-backed key-value store with per-key TTL.

Runs on SQLAlchemy's asyncio extension with the ``aiosqlite`` driver. All
values live in one table; a row whose ``expires_at`` has passed is treated as
absent by every read and is removed by later writes or :meth:`purge_expired`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import Column, Float, MetaData, String, Table, Text, delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from kvsession.kernel.exceptions import KeyNotFoundError, StoreClosedError, StoreException, StoreOpenError
from kvsession.kv.ports.outbound import MEMORY, SetOptions

_logger = logging.getLogger(__name__)

metadata = MetaData()

kv_entries = Table(
    "kv_entries",
    metadata,
    Column("key", String, primary_key=True),
    Column("value", Text, nullable=False),
    # UNIX epoch seconds; NULL never expires
    Column("expires_at", Float, nullable=True),
)


class SqliteReadTransaction:
    """Read-only transaction over one SQLite connection."""

    def __init__(self, conn: AsyncConnection, clock: Callable[[], float]) -> None:
        self._conn = conn
        self._clock = clock

    async def get(self, key: str) -> str:
        """Return the live value for *key* or raise ``KeyNotFoundError``."""
        row = await self._live_row(key)
        if row is None:
            raise KeyNotFoundError(key)
        return str(row.value)

    async def _live_row(self, key: str) -> Any | None:
        result = await self._conn.execute(
            select(kv_entries.c.value, kv_entries.c.expires_at).where(kv_entries.c.key == key)
        )
        row = result.first()
        if row is None:
            return None
        if row.expires_at is not None and row.expires_at <= self._clock():
            return None
        return row


class SqliteWriteTransaction(SqliteReadTransaction):
    """Read-write transaction; committed or rolled back by the store."""

    async def set(self, key: str, value: str, options: SetOptions | None = None) -> str | None:
        """Upsert *value* under *key*, replacing any expired row."""
        previous = await self._live_row(key)

        expires_at: float | None = None
        if options is not None and options.expires:
            expires_at = self._clock() + options.ttl.total_seconds()

        stmt = sqlite_insert(kv_entries).values(key=key, value=value, expires_at=expires_at)
        stmt = stmt.on_conflict_do_update(
            index_elements=[kv_entries.c.key],
            set_={"value": stmt.excluded.value, "expires_at": stmt.excluded.expires_at},
        )
        await self._conn.execute(stmt)
        return str(previous.value) if previous is not None else None

    async def delete(self, key: str) -> str:
        """Remove *key*; an expired row counts as missing."""
        row = await self._live_row(key)
        if row is None:
            raise KeyNotFoundError(key)
        await self._conn.execute(delete(kv_entries).where(kv_entries.c.key == key))
        return str(row.value)

    async def delete_expired(self) -> int:
        """Remove every expired row. Returns the number of rows removed."""
        result = await self._conn.execute(
            delete(kv_entries).where(
                kv_entries.c.expires_at.is_not(None),
                kv_entries.c.expires_at <= self._clock(),
            )
        )
        return int(result.rowcount or 0)


class SqliteKeyValueStore:
    """Embedded key-value store on SQLite.

    Transactions on one store instance are serialized by an ``asyncio.Lock``:
    SQLite has a single writer, and the in-memory mode shares one connection.

    Use :meth:`open` rather than the constructor::

        store = await SqliteKeyValueStore.open(":memory:")
        async with store.update() as tx:
            await tx.set("k", "v", SetOptions(expires=True, ttl=timedelta(seconds=30)))
    """

    def __init__(self, engine: AsyncEngine, *, location: str = MEMORY, clock: Callable[[], float] = time.time) -> None:
        self._engine = engine
        self._location = location
        self._clock = clock
        self._lock = asyncio.Lock()
        self._closed = False

    @classmethod
    async def open(
        cls,
        path: str | Path = MEMORY,
        *,
        echo: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> SqliteKeyValueStore:
        """Open (creating if needed) the store at *path*, or in memory for ``":memory:"``.

        Raises:
            StoreOpenError: The database cannot be opened or initialized.
        """
        location = str(path)
        if location == MEMORY:
            engine = create_async_engine(
                "sqlite+aiosqlite://",
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=echo,
            )
        else:
            engine = create_async_engine(f"sqlite+aiosqlite:///{location}", echo=echo)

        try:
            async with engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except (SQLAlchemyError, OSError) as exc:
            await engine.dispose()
            raise StoreOpenError(location, str(exc)) from exc

        _logger.debug("Opened key-value store at '%s'", location)
        return cls(engine, location=location, clock=clock)

    @property
    def location(self) -> str:
        return self._location

    @property
    def closed(self) -> bool:
        return self._closed

    @asynccontextmanager
    async def view(self) -> AsyncIterator[SqliteReadTransaction]:
        """Read-only transaction."""
        async with self._begin() as conn:
            yield SqliteReadTransaction(conn, self._clock)

    @asynccontextmanager
    async def update(self) -> AsyncIterator[SqliteWriteTransaction]:
        """Read-write transaction; commits on normal exit, rolls back on error."""
        async with self._begin() as conn:
            yield SqliteWriteTransaction(conn, self._clock)

    @asynccontextmanager
    async def _begin(self) -> AsyncIterator[AsyncConnection]:
        async with self._lock:
            if self._closed:
                raise StoreClosedError()
            try:
                async with self._engine.begin() as conn:
                    yield conn
            except SQLAlchemyError as exc:
                raise StoreException(
                    f"Key-value transaction failed: {exc}",
                    context={"location": self._location},
                ) from exc

    async def purge_expired(self) -> int:
        """Physically remove expired rows. Returns the number removed."""
        async with self.update() as tx:
            removed = await tx.delete_expired()
        if removed:
            _logger.debug("Purged %d expired key(s) from '%s'", removed, self._location)
        return removed

    async def close(self) -> None:
        """Dispose of the engine. Safe to call more than once."""
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            await self._engine.dispose()
        _logger.debug("Closed key-value store at '%s'", self._location)
