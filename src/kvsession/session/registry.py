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
"""SessionRegistry: maps session lifecycle operations onto key-value transactions."""

from __future__ import annotations

import logging
from datetime import timedelta
from types import TracebackType
from typing import Any

from kvsession.kernel.exceptions import KeyNotFoundError
from kvsession.kernel.lifecycle import Lifecycle
from kvsession.kv.ports.outbound import KeyValueStore, SetOptions
from kvsession.session.codec import JsonCodec, SessionCodec, decode_values
from kvsession.session.handle import SessionHandle, short_id

_logger = logging.getLogger(__name__)

DEFAULT_TTL = 1800


class SessionRegistry:
    """Session persistence over an embedded key-value store.

    Each session is one record: key = session id, value = the encoded
    attribute mapping (empty string for no attributes), with a TTL refreshed
    on every save, update, and refresh.

    Every store access is a single transaction, but the read-then-write
    sequences in :meth:`update` and :meth:`refresh` are not: concurrent
    writers to the same id race and the last write wins.
    """

    def __init__(
        self,
        store: KeyValueStore,
        codec: SessionCodec | None = None,
        *,
        default_ttl: int = DEFAULT_TTL,
        sweeper: Lifecycle | None = None,
    ) -> None:
        self._store = store
        self._codec: SessionCodec = codec if codec is not None else JsonCodec()
        self._default_ttl = default_ttl
        self._sweeper = sweeper

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def codec(self) -> SessionCodec:
        return self._codec

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    # === Lookup ===

    async def exists(self, session_id: str) -> bool:
        """Whether a record exists for *session_id*, including an empty one."""
        async with self._store.view() as tx:
            try:
                await tx.get(session_id)
            except KeyNotFoundError:
                return False
        return True

    async def check(self, context: Any, session_id: str) -> bool:
        """Framework-facing alias of :meth:`exists`; *context* is not used."""
        return await self.exists(session_id)

    async def _get_value(self, session_id: str) -> str:
        """Stored value for *session_id*, or ``""`` if there is none."""
        async with self._store.view() as tx:
            try:
                return await tx.get(session_id)
            except KeyNotFoundError:
                return ""

    # === Lifecycle operations ===

    async def create(self, context: Any, session_id: str, ttl: int | None = None) -> SessionHandle:
        """New empty session. Nothing is written until the handle is saved."""
        return self._new_handle(context, session_id, ttl)

    async def update(self, context: Any, session_id: str, ttl: int | None = None) -> SessionHandle:
        """Load a session and push its expiry out by *ttl* seconds.

        A missing, expired, or empty record yields a fresh empty session
        instead of an error; no record is written in that case.
        """
        ttl = self._resolve_ttl(ttl)
        value = await self._get_value(session_id)
        if not value:
            _logger.debug("No stored session '%s', starting empty", short_id(session_id))
            return self._new_handle(context, session_id, ttl)

        values = decode_values(self._codec, value)

        async with self._store.update() as tx:
            await tx.set(session_id, value, self._expiry(ttl))

        _logger.debug("Touched session '%s' (ttl=%ds)", short_id(session_id), ttl)
        return self._new_handle(context, session_id, ttl, values)

    async def delete(self, context: Any, session_id: str) -> None:
        """Remove a session. Deleting a missing session is not an error."""
        async with self._store.update() as tx:
            try:
                await tx.delete(session_id)
            except KeyNotFoundError:
                _logger.debug("Session '%s' already absent", short_id(session_id))
                return
        _logger.debug("Deleted session '%s'", short_id(session_id))

    async def refresh(
        self,
        context: Any,
        old_session_id: str,
        session_id: str,
        ttl: int | None = None,
    ) -> SessionHandle:
        """Move a session's attributes from *old_session_id* to *session_id*.

        The new record is written and the old one removed in one
        transaction: both happen or neither does. A missing or empty old
        record, or one deleted before the rotation commits, yields a fresh
        empty session under the new id.
        """
        ttl = self._resolve_ttl(ttl)
        if old_session_id == session_id:
            return await self.update(context, session_id, ttl)

        value = await self._get_value(old_session_id)
        if not value:
            _logger.debug("No stored session '%s' to rotate, starting empty", short_id(old_session_id))
            return self._new_handle(context, session_id, ttl)

        values = decode_values(self._codec, value)

        try:
            async with self._store.update() as tx:
                await tx.set(session_id, value, self._expiry(ttl))
                await tx.delete(old_session_id)
        except KeyNotFoundError:
            # deleted or expired since the read; the new key is rolled back
            _logger.debug("Session '%s' gone during rotation, starting empty", short_id(old_session_id))
            return self._new_handle(context, session_id, ttl)

        _logger.debug("Rotated session '%s' -> '%s'", short_id(old_session_id), short_id(session_id))
        return self._new_handle(context, session_id, ttl, values)

    # === Resource management ===

    async def start(self) -> None:
        """Start the expiry sweeper, if one was configured."""
        if self._sweeper is not None:
            await self._sweeper.start()

    async def close(self) -> None:
        """Stop the sweeper and close the store. Safe to call more than once."""
        if self._sweeper is not None:
            await self._sweeper.stop()
        await self._store.close()

    async def __aenter__(self) -> SessionRegistry:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # === Helpers ===

    def _resolve_ttl(self, ttl: int | None) -> int:
        return self._default_ttl if ttl is None else ttl

    @staticmethod
    def _expiry(ttl: int) -> SetOptions:
        return SetOptions(expires=True, ttl=timedelta(seconds=ttl))

    def _new_handle(
        self,
        context: Any,
        session_id: str,
        ttl: int | None,
        values: dict[str, Any] | None = None,
    ) -> SessionHandle:
        return SessionHandle(
            self._store,
            self._codec,
            context,
            session_id,
            self._resolve_ttl(ttl),
            values,
        )
