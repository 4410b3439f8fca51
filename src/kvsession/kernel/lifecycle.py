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
"""Lifecycle protocol for components that own background work.

The expiry sweeper implements it; the session registry drives it.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Lifecycle(Protocol):
    """Standard start/stop lifecycle.

    ``start()`` is called once the owning store is open. ``stop()`` is called
    before the store is closed and must be safe to call more than once.
    """

    async def start(self) -> None:
        """Begin background work. Raise if the component cannot run."""
        ...

    async def stop(self) -> None:
        """Stop background work and wait for it to finish."""
        ...
