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
"""Tests for registry construction."""

from __future__ import annotations

import pytest

from kvsession.core.config import Config
from kvsession.kernel.exceptions import ConfigurationException, StoreOpenError
from kvsession.kv.sweeper import ExpirySweeper
from kvsession.session.codec import JsonCodec
from kvsession.session.factory import open_file_registry, open_memory_registry, registry_from_config
from kvsession.session.registry import DEFAULT_TTL, SessionRegistry


def _store_config(**store) -> Config:
    return Config({"kvsession": {"store": store}})


class TestOpenMemoryRegistry:
    @pytest.mark.asyncio
    async def test_round_trip(self):
        registry = await open_memory_registry()
        try:
            handle = await registry.create(None, "sid", 60)
            handle.set("a", 1)
            await handle.save()
            loaded = await registry.update(None, "sid", 60)
            assert loaded.get("a") == (1, True)
        finally:
            await registry.close()

    @pytest.mark.asyncio
    async def test_custom_codec(self):
        codec = JsonCodec(sort_keys=True)
        registry = await open_memory_registry(codec)
        try:
            assert registry.codec is codec
        finally:
            await registry.close()


class TestOpenFileRegistry:
    @pytest.mark.asyncio
    async def test_sessions_survive_reopen(self, tmp_path):
        path = tmp_path / "sessions.db"
        registry = await open_file_registry(path)
        handle = await registry.create(None, "sid", 600)
        handle.set("user", "ana")
        await handle.save()
        await registry.close()

        reopened = await open_file_registry(str(path))
        try:
            loaded = await reopened.update(None, "sid", 600)
            assert loaded.get("user") == ("ana", True)
        finally:
            await reopened.close()

    @pytest.mark.asyncio
    async def test_unopenable_path_raises(self, tmp_path):
        with pytest.raises(StoreOpenError):
            await open_file_registry(tmp_path / "missing" / "sessions.db")


class TestRegistryFromConfig:
    @pytest.mark.asyncio
    async def test_package_defaults(self):
        registry = await registry_from_config()
        try:
            assert isinstance(registry, SessionRegistry)
            assert registry.default_ttl == DEFAULT_TTL
            assert isinstance(registry._sweeper, ExpirySweeper)
            assert registry._sweeper.running
        finally:
            await registry.close()
        assert not registry._sweeper.running

    @pytest.mark.asyncio
    async def test_file_store_from_config(self, tmp_path):
        path = tmp_path / "sessions.db"
        registry = await registry_from_config(_store_config(path=str(path), **{"default-ttl": 90}))
        try:
            assert registry.default_ttl == 90
            handle = await registry.create(None, "sid")
            assert handle.ttl == 90
            await handle.save()
        finally:
            await registry.close()
        assert path.exists()

    @pytest.mark.asyncio
    async def test_zero_interval_disables_sweeper(self):
        registry = await registry_from_config(_store_config(**{"sweep-interval": 0}))
        try:
            assert registry._sweeper is None
        finally:
            await registry.close()

    @pytest.mark.asyncio
    async def test_env_override(self, monkeypatch):
        monkeypatch.setenv("KVSESSION_STORE_DEFAULT_TTL", "15")
        registry = await registry_from_config(_store_config(**{"sweep-interval": 0}))
        try:
            assert registry.default_ttl == 15
        finally:
            await registry.close()

    @pytest.mark.asyncio
    async def test_malformed_env_value_rejected(self, monkeypatch):
        monkeypatch.setenv("KVSESSION_STORE_SWEEP_INTERVAL", "often")
        with pytest.raises(ConfigurationException, match="sweep_interval") as exc_info:
            await registry_from_config(Config({}))
        assert exc_info.value.context["value"] == "often"

    @pytest.mark.asyncio
    async def test_negative_interval_rejected(self):
        with pytest.raises(ConfigurationException, match="sweep-interval"):
            await registry_from_config(_store_config(**{"sweep-interval": -1}))

    @pytest.mark.asyncio
    async def test_negative_ttl_rejected(self):
        with pytest.raises(ConfigurationException, match="default-ttl"):
            await registry_from_config(_store_config(**{"default-ttl": -5}))

    @pytest.mark.asyncio
    async def test_unknown_codec_rejected(self):
        with pytest.raises(ConfigurationException, match="Unknown session codec"):
            await registry_from_config(_store_config(codec="pickle"))

    @pytest.mark.asyncio
    async def test_bad_path_raises_store_open_error(self, tmp_path):
        with pytest.raises(StoreOpenError):
            await registry_from_config(_store_config(path=str(tmp_path / "missing" / "s.db")))
