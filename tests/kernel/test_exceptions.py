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
"""Tests for the kvsession exception hierarchy."""

from kvsession.kernel.exceptions import (
    ConfigurationException,
    KeyNotFoundError,
    KVSessionException,
    SerializationException,
    StoreClosedError,
    StoreException,
    StoreOpenError,
)


class TestKVSessionException:
    def test_basic_creation(self):
        exc = KVSessionException("something went wrong")
        assert str(exc) == "something went wrong"
        assert exc.code is None
        assert exc.context == {}

    def test_with_code_and_context(self):
        exc = KVSessionException("bad", code="X_001", context={"k": "v"})
        assert exc.code == "X_001"
        assert exc.context["k"] == "v"

    def test_context_defaults_to_empty_dict(self):
        exc = KVSessionException("test")
        exc.context["key"] = "value"
        exc2 = KVSessionException("test2")
        assert exc2.context == {}


class TestStoreExceptions:
    def test_key_not_found_carries_key(self):
        exc = KeyNotFoundError("abc")
        assert exc.key == "abc"
        assert exc.code == "KEY_NOT_FOUND"
        assert exc.context == {"key": "abc"}
        assert "abc" in str(exc)

    def test_key_not_found_is_not_a_store_failure(self):
        assert not issubclass(KeyNotFoundError, StoreException)

    def test_store_exception_default_code(self):
        assert StoreException("disk full").code == "STORE_FAILURE"

    def test_open_error(self):
        exc = StoreOpenError("/nope/db", "unable to open database file")
        assert isinstance(exc, StoreException)
        assert exc.code == "STORE_OPEN_FAILED"
        assert exc.context["path"] == "/nope/db"
        assert "/nope/db" in str(exc)

    def test_closed_error(self):
        exc = StoreClosedError()
        assert isinstance(exc, StoreException)
        assert exc.code == "STORE_CLOSED"


class TestExceptionHierarchy:
    def test_all_derive_from_base(self):
        for cls in (
            KeyNotFoundError,
            StoreException,
            StoreOpenError,
            StoreClosedError,
            SerializationException,
            ConfigurationException,
        ):
            assert issubclass(cls, KVSessionException)

    def test_serialization_code(self):
        assert SerializationException("bad json").code == "SERIALIZATION_FAILURE"

    def test_configuration_code(self):
        assert ConfigurationException("bad codec").code == "CONFIG_INVALID"
