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
"""Registry construction: in-memory, file-backed, or from configuration."""

from __future__ import annotations

import logging
from pathlib import Path

from kvsession.config.properties.session import SessionStoreProperties
from kvsession.core.config import Config
from kvsession.kernel.exceptions import ConfigurationException
from kvsession.kv.adapters.sqlite import SqliteKeyValueStore
from kvsession.kv.ports.outbound import MEMORY
from kvsession.kv.sweeper import ExpirySweeper
from kvsession.session.codec import SessionCodec, resolve_codec
from kvsession.session.registry import SessionRegistry

_logger = logging.getLogger(__name__)


async def open_memory_registry(codec: SessionCodec | None = None) -> SessionRegistry:
    """Registry over an in-memory database. Sessions are lost on close."""
    store = await SqliteKeyValueStore.open(MEMORY)
    return SessionRegistry(store, codec)


async def open_file_registry(path: str | Path, codec: SessionCodec | None = None) -> SessionRegistry:
    """Registry over a SQLite file at *path*, created if missing.

    Raises:
        StoreOpenError: The file cannot be opened; the caller decides whether
            that is fatal.
    """
    store = await SqliteKeyValueStore.open(path)
    return SessionRegistry(store, codec)


async def registry_from_config(config: Config | None = None) -> SessionRegistry:
    """Build and start a registry from ``kvsession.store.*`` settings."""
    config = config if config is not None else Config.defaults()
    props = config.bind(SessionStoreProperties)

    if props.sweep_interval < 0:
        raise ConfigurationException(
            "kvsession.store.sweep-interval must be >= 0",
            context={"sweep_interval": props.sweep_interval},
        )
    if props.default_ttl < 0:
        raise ConfigurationException(
            "kvsession.store.default-ttl must be >= 0",
            context={"default_ttl": props.default_ttl},
        )
    codec = resolve_codec(props.codec)

    store = await SqliteKeyValueStore.open(props.path)
    sweeper = ExpirySweeper(store, props.sweep_interval) if props.sweep_interval > 0 else None
    registry = SessionRegistry(store, codec, default_ttl=props.default_ttl, sweeper=sweeper)
    await registry.start()

    _logger.info(
        "Session registry ready (path=%s, codec=%s, sweep_interval=%ds)",
        props.path,
        props.codec,
        props.sweep_interval,
    )
    return registry
