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
"""kvsession: server-side session storage on an embedded key-value store."""

from kvsession.kernel.exceptions import (
    KeyNotFoundError,
    KVSessionException,
    SerializationException,
    StoreException,
)
from kvsession.session import (
    SessionHandle,
    SessionRegistry,
    open_file_registry,
    open_memory_registry,
    registry_from_config,
)

__version__ = "0.1.0"

__all__ = [
    "KVSessionException",
    "KeyNotFoundError",
    "SerializationException",
    "SessionHandle",
    "SessionRegistry",
    "StoreException",
    "__version__",
    "open_file_registry",
    "open_memory_registry",
    "registry_from_config",
]
