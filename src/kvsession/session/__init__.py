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
"""kvsession session: server-side session persistence on a key-value store.

    from kvsession.session import open_file_registry

    registry = await open_file_registry("sessions.db")
    handle = await registry.update(request, session_id, ttl=1800)
    handle.set("user_id", 42)
    await handle.save()
"""

from kvsession.session.codec import JsonCodec, SessionCodec, resolve_codec
from kvsession.session.factory import open_file_registry, open_memory_registry, registry_from_config
from kvsession.session.handle import SessionHandle
from kvsession.session.ports.outbound import ManagerStore, SessionStore
from kvsession.session.registry import SessionRegistry

__all__ = [
    "JsonCodec",
    "ManagerStore",
    "SessionCodec",
    "SessionHandle",
    "SessionRegistry",
    "SessionStore",
    "open_file_registry",
    "open_memory_registry",
    "registry_from_config",
    "resolve_codec",
]
