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
"""SessionHandle: live, mutable view of one stored session."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from kvsession.kv.ports.outbound import KeyValueStore, SetOptions
from kvsession.session.codec import SessionCodec, encode_values
from kvsession.session.rwlock import ReadWriteLock

_logger = logging.getLogger(__name__)

_MISSING = object()


def short_id(session_id: str) -> str:
    """Session id truncated to 8 characters for log output."""
    return session_id[:8] + "..."


class SessionHandle:
    """In-memory attributes of one session, persisted on :meth:`save`.

    ``set``/``get``/``delete`` only touch the in-memory mapping and are safe
    to call from several threads. Each call is atomic on its own; a ``get``
    followed by a ``set`` is not.

    Attributes:
        session_id: Key of the session record in the store.
        context: Request-scoped object supplied by the caller, returned as-is.
        ttl: Seconds the record lives after each save.
    """

    def __init__(
        self,
        store: KeyValueStore,
        codec: SessionCodec,
        context: Any,
        session_id: str,
        ttl: int,
        values: dict[str, Any] | None = None,
    ) -> None:
        self._store = store
        self._codec = codec
        self._context = context
        self._session_id = session_id
        self._ttl = ttl
        self._values: dict[str, Any] = values if values is not None else {}
        self._lock = ReadWriteLock()

    @property
    def context(self) -> Any:
        return self._context

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def ttl(self) -> int:
        return self._ttl

    def set(self, key: str, value: Any) -> None:
        """Insert or overwrite an attribute."""
        with self._lock.write_locked():
            self._values[key] = value

    def get(self, key: str) -> tuple[Any, bool]:
        """Return ``(value, True)``, or ``(None, False)`` when *key* is absent."""
        with self._lock.read_locked():
            value = self._values.get(key, _MISSING)
        if value is _MISSING:
            return None, False
        return value, True

    def delete(self, key: str) -> Any:
        """Remove an attribute and return its prior value (``None`` if absent)."""
        with self._lock.read_locked():
            value = self._values.get(key, _MISSING)
        if value is _MISSING:
            return None
        with self._lock.write_locked():
            self._values.pop(key, None)
        return value

    def values(self) -> dict[str, Any]:
        """Shallow copy of the current attributes."""
        with self._lock.read_locked():
            return dict(self._values)

    async def flush(self) -> None:
        """Drop every attribute and persist the now-empty session immediately."""
        with self._lock.write_locked():
            self._values = {}
        await self.save()

    async def save(self) -> None:
        """Write the attributes under :attr:`session_id` with a fresh TTL.

        Overwrites whatever is stored under the id. Encoding errors raise
        ``SerializationException`` before the store is touched.
        """
        with self._lock.read_locked():
            payload = encode_values(self._codec, self._values)
            count = len(self._values)

        async with self._store.update() as tx:
            await tx.set(self._session_id, payload, SetOptions(expires=True, ttl=timedelta(seconds=self._ttl)))

        _logger.debug("Saved session '%s' (%d keys, ttl=%ds)", short_id(self._session_id), count, self._ttl)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._values)

    def __contains__(self, key: object) -> bool:
        with self._lock.read_locked():
            return key in self._values

    def __repr__(self) -> str:
        return f"<SessionHandle id={short_id(self._session_id)} keys={len(self)} ttl={self._ttl}>"
