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
"""Background purge of expired key-value records."""

from __future__ import annotations

import asyncio
import logging

from kvsession.kernel.exceptions import StoreClosedError, StoreException
from kvsession.kv.ports.outbound import KeyValueStore

_logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Periodically calls ``purge_expired()`` on a store.

    Reads never return expired values, so the sweeper only reclaims space.
    Implements the :class:`~kvsession.kernel.lifecycle.Lifecycle` protocol.
    """

    def __init__(self, store: KeyValueStore, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"Sweep interval must be positive, got {interval}")
        self._store = store
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the sweep loop. No-op if already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._sweep_loop(), name="kvsession-expiry-sweeper")

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to exit."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def sweep(self) -> int:
        """Run one purge pass. Returns the number of records removed."""
        return await self._store.purge_expired()

    async def _sweep_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self._interval)
                try:
                    await self.sweep()
                except StoreClosedError:
                    _logger.debug("Store closed, expiry sweeper exiting")
                    return
                except StoreException:
                    _logger.warning("Expired-record purge failed", exc_info=True)
        except asyncio.CancelledError:
            _logger.debug("Expiry sweeper stopped")
        except Exception:
            _logger.exception("Expiry sweeper stopped on unexpected error")
