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
"""Tests for the SQLite key-value store."""

from __future__ import annotations

from datetime import timedelta

import pytest

from kvsession.kernel.exceptions import KeyNotFoundError, StoreClosedError, StoreException, StoreOpenError
from kvsession.kv.adapters.sqlite import SqliteKeyValueStore
from kvsession.kv.ports.outbound import MEMORY, KeyValueStore, ReadTransaction, SetOptions, WriteTransaction


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _ttl(seconds: float) -> SetOptions:
    return SetOptions(expires=True, ttl=timedelta(seconds=seconds))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def store(clock):
    s = await SqliteKeyValueStore.open(MEMORY, clock=clock)
    yield s
    await s.close()


class TestProtocolConformance:
    @pytest.mark.asyncio
    async def test_store_is_key_value_store(self, store):
        assert isinstance(store, KeyValueStore)

    @pytest.mark.asyncio
    async def test_transactions_conform(self, store):
        async with store.view() as tx:
            assert isinstance(tx, ReadTransaction)
        async with store.update() as tx:
            assert isinstance(tx, WriteTransaction)


class TestReadWrite:
    @pytest.mark.asyncio
    async def test_set_then_get(self, store):
        async with store.update() as tx:
            assert await tx.set("a", "1") is None
        async with store.view() as tx:
            assert await tx.get("a") == "1"

    @pytest.mark.asyncio
    async def test_get_missing_raises_key_not_found(self, store):
        async with store.view() as tx:
            with pytest.raises(KeyNotFoundError) as exc_info:
                await tx.get("missing")
        assert exc_info.value.key == "missing"

    @pytest.mark.asyncio
    async def test_set_returns_previous_value(self, store):
        async with store.update() as tx:
            await tx.set("a", "1")
            assert await tx.set("a", "2") == "1"
        async with store.view() as tx:
            assert await tx.get("a") == "2"

    @pytest.mark.asyncio
    async def test_empty_string_value_is_stored(self, store):
        async with store.update() as tx:
            await tx.set("a", "")
        async with store.view() as tx:
            assert await tx.get("a") == ""

    @pytest.mark.asyncio
    async def test_delete_returns_value(self, store):
        async with store.update() as tx:
            await tx.set("a", "1")
        async with store.update() as tx:
            assert await tx.delete("a") == "1"
        async with store.view() as tx:
            with pytest.raises(KeyNotFoundError):
                await tx.get("a")

    @pytest.mark.asyncio
    async def test_delete_missing_raises_key_not_found(self, store):
        with pytest.raises(KeyNotFoundError):
            async with store.update() as tx:
                await tx.delete("missing")

    @pytest.mark.asyncio
    async def test_writes_visible_within_same_transaction(self, store):
        async with store.update() as tx:
            await tx.set("a", "1")
            assert await tx.get("a") == "1"


class TestExpiry:
    @pytest.mark.asyncio
    async def test_value_visible_before_ttl(self, store, clock):
        async with store.update() as tx:
            await tx.set("a", "1", _ttl(10))
        clock.advance(9)
        async with store.view() as tx:
            assert await tx.get("a") == "1"

    @pytest.mark.asyncio
    async def test_value_gone_after_ttl(self, store, clock):
        async with store.update() as tx:
            await tx.set("a", "1", _ttl(10))
        clock.advance(10)
        async with store.view() as tx:
            with pytest.raises(KeyNotFoundError):
                await tx.get("a")

    @pytest.mark.asyncio
    async def test_zero_ttl_expires_immediately(self, store):
        async with store.update() as tx:
            await tx.set("a", "1", _ttl(0))
        async with store.view() as tx:
            with pytest.raises(KeyNotFoundError):
                await tx.get("a")

    @pytest.mark.asyncio
    async def test_options_without_expires_never_expire(self, store, clock):
        async with store.update() as tx:
            await tx.set("a", "1", SetOptions(expires=False, ttl=timedelta(seconds=1)))
        clock.advance(1_000_000)
        async with store.view() as tx:
            assert await tx.get("a") == "1"

    @pytest.mark.asyncio
    async def test_rewrite_extends_ttl(self, store, clock):
        async with store.update() as tx:
            await tx.set("a", "1", _ttl(10))
        clock.advance(8)
        async with store.update() as tx:
            await tx.set("a", "2", _ttl(10))
        clock.advance(8)
        async with store.view() as tx:
            assert await tx.get("a") == "2"

    @pytest.mark.asyncio
    async def test_set_over_expired_returns_none(self, store, clock):
        async with store.update() as tx:
            await tx.set("a", "1", _ttl(1))
        clock.advance(2)
        async with store.update() as tx:
            assert await tx.set("a", "2") is None

    @pytest.mark.asyncio
    async def test_delete_expired_key_raises_key_not_found(self, store, clock):
        async with store.update() as tx:
            await tx.set("a", "1", _ttl(1))
        clock.advance(2)
        with pytest.raises(KeyNotFoundError):
            async with store.update() as tx:
                await tx.delete("a")

    @pytest.mark.asyncio
    async def test_purge_expired_removes_only_expired(self, store, clock):
        async with store.update() as tx:
            await tx.set("old", "1", _ttl(1))
            await tx.set("young", "2", _ttl(100))
            await tx.set("forever", "3")
        clock.advance(5)
        assert await store.purge_expired() == 1
        assert await store.purge_expired() == 0
        async with store.view() as tx:
            assert await tx.get("young") == "2"
            assert await tx.get("forever") == "3"


class TestTransactions:
    @pytest.mark.asyncio
    async def test_error_rolls_back_all_writes(self, store):
        async with store.update() as tx:
            await tx.set("a", "1")

        with pytest.raises(RuntimeError):
            async with store.update() as tx:
                await tx.set("a", "changed")
                await tx.set("b", "2")
                raise RuntimeError("boom")

        async with store.view() as tx:
            assert await tx.get("a") == "1"
            with pytest.raises(KeyNotFoundError):
                await tx.get("b")

    @pytest.mark.asyncio
    async def test_key_not_found_rolls_back(self, store):
        with pytest.raises(KeyNotFoundError):
            async with store.update() as tx:
                await tx.set("new", "1")
                await tx.delete("missing")

        async with store.view() as tx:
            with pytest.raises(KeyNotFoundError):
                await tx.get("new")


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_location(self, store):
        assert store.location == MEMORY

    @pytest.mark.asyncio
    async def test_closed_store_rejects_transactions(self):
        s = await SqliteKeyValueStore.open()
        await s.close()
        assert s.closed
        with pytest.raises(StoreClosedError):
            async with s.view():
                pass
        with pytest.raises(StoreClosedError):
            async with s.update():
                pass

    @pytest.mark.asyncio
    async def test_closed_error_is_store_exception(self):
        s = await SqliteKeyValueStore.open()
        await s.close()
        with pytest.raises(StoreException) as exc_info:
            await s.purge_expired()
        assert exc_info.value.code == "STORE_CLOSED"

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        s = await SqliteKeyValueStore.open()
        await s.close()
        await s.close()
        assert s.closed

    @pytest.mark.asyncio
    async def test_memory_stores_are_independent(self):
        first = await SqliteKeyValueStore.open()
        second = await SqliteKeyValueStore.open()
        try:
            async with first.update() as tx:
                await tx.set("a", "1")
            async with second.view() as tx:
                with pytest.raises(KeyNotFoundError):
                    await tx.get("a")
        finally:
            await first.close()
            await second.close()


class TestFileStore:
    @pytest.mark.asyncio
    async def test_data_survives_reopen(self, tmp_path):
        path = tmp_path / "sessions.db"
        s = await SqliteKeyValueStore.open(path)
        async with s.update() as tx:
            await tx.set("a", "1")
        await s.close()
        assert path.exists()

        reopened = await SqliteKeyValueStore.open(str(path))
        try:
            assert reopened.location == str(path)
            async with reopened.view() as tx:
                assert await tx.get("a") == "1"
        finally:
            await reopened.close()

    @pytest.mark.asyncio
    async def test_open_in_missing_directory_fails(self, tmp_path):
        path = tmp_path / "no-such-dir" / "sessions.db"
        with pytest.raises(StoreOpenError) as exc_info:
            await SqliteKeyValueStore.open(path)
        assert exc_info.value.code == "STORE_OPEN_FAILED"
        assert exc_info.value.context["path"] == str(path)
