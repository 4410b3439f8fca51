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
"""Session-store protocols expected by the web session framework."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SessionStore(Protocol):
    """One session's attributes, as handed to request handlers."""

    @property
    def context(self) -> Any: ...

    @property
    def session_id(self) -> str: ...

    def set(self, key: str, value: Any) -> None: ...

    def get(self, key: str) -> tuple[Any, bool]: ...

    def delete(self, key: str) -> Any: ...

    async def flush(self) -> None: ...

    async def save(self) -> None: ...


@runtime_checkable
class ManagerStore(Protocol):
    """Manager-level session persistence.

    The framework generates session ids and passes them in; the store never
    invents one.
    """

    async def check(self, context: Any, session_id: str) -> bool: ...

    async def create(self, context: Any, session_id: str, ttl: int) -> SessionStore: ...

    async def update(self, context: Any, session_id: str, ttl: int) -> SessionStore: ...

    async def delete(self, context: Any, session_id: str) -> None: ...

    async def refresh(self, context: Any, old_session_id: str, session_id: str, ttl: int) -> SessionStore: ...

    async def close(self) -> None: ...
