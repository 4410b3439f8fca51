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
"""Key-value store protocol.

The contract the session registry needs from an embedded, ordered key-value
database: read-only and read-write transactions, per-key TTL expiration and
a distinguished not-found signal (:class:`~kvsession.kernel.exceptions.KeyNotFoundError`).
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol, runtime_checkable

MEMORY = ":memory:"
"""Reserved path selecting an in-memory database."""


@dataclass(frozen=True)
class SetOptions:
    """Options for :meth:`WriteTransaction.set`.

    When ``expires`` is true the value becomes invisible ``ttl`` after the
    write. A zero or negative ``ttl`` expires the value immediately.
    """

    expires: bool = False
    ttl: timedelta = timedelta(0)


@runtime_checkable
class ReadTransaction(Protocol):
    """Read-only view of the store, valid inside ``KeyValueStore.view()``."""

    async def get(self, key: str) -> str:
        """Return the live value for *key* or raise ``KeyNotFoundError``."""
        ...


@runtime_checkable
class WriteTransaction(ReadTransaction, Protocol):
    """Read-write view of the store, valid inside ``KeyValueStore.update()``."""

    async def set(self, key: str, value: str, options: SetOptions | None = None) -> str | None:
        """Write *value* under *key*. Returns the previous live value, if any."""
        ...

    async def delete(self, key: str) -> str:
        """Remove *key*. Returns the removed value or raises ``KeyNotFoundError``."""
        ...


@runtime_checkable
class KeyValueStore(Protocol):
    """Abstract embedded key-value store.

    ``update()`` commits when its block exits normally and rolls back when
    the block raises, so every write inside one block is all-or-nothing.
    """

    def view(self) -> AbstractAsyncContextManager[ReadTransaction]: ...

    def update(self) -> AbstractAsyncContextManager[WriteTransaction]: ...

    async def purge_expired(self) -> int: ...

    async def close(self) -> None: ...
