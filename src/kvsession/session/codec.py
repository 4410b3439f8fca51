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
"""Session payload codecs.

A codec turns the string-keyed attribute mapping of a session into the
single string value stored under the session id, and back.
"""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

from kvsession.kernel.exceptions import ConfigurationException, SerializationException


@runtime_checkable
class SessionCodec(Protocol):
    """Encodes and decodes session attribute mappings."""

    def encode(self, values: dict[str, Any]) -> str: ...

    def decode(self, raw: str) -> dict[str, Any]: ...


class JsonCodec:
    """Compact JSON codec; the default.

    Values must be JSON-representable (str, int, float, bool, None, and
    lists/dicts of those). Tuples come back as lists.
    """

    def __init__(self, *, sort_keys: bool = False) -> None:
        self._sort_keys = sort_keys

    def encode(self, values: dict[str, Any]) -> str:
        try:
            return json.dumps(values, separators=(",", ":"), ensure_ascii=False, sort_keys=self._sort_keys)
        except (TypeError, ValueError) as exc:
            raise SerializationException(f"Cannot encode session payload: {exc}") from exc

    def decode(self, raw: str) -> dict[str, Any]:
        try:
            decoded = json.loads(raw)
        except ValueError as exc:
            raise SerializationException(f"Cannot decode session payload: {exc}") from exc
        if not isinstance(decoded, dict):
            raise SerializationException(
                "Session payload is not a JSON object",
                context={"type": type(decoded).__name__},
            )
        return decoded


_CODECS: dict[str, type[JsonCodec]] = {
    "json": JsonCodec,
}


def resolve_codec(name: str) -> SessionCodec:
    """Return a codec instance for a configured codec name."""
    codec_cls = _CODECS.get(name.lower())
    if codec_cls is None:
        raise ConfigurationException(
            f"Unknown session codec '{name}'",
            context={"available": sorted(_CODECS)},
        )
    return codec_cls()


def encode_values(codec: SessionCodec, values: dict[str, Any]) -> str:
    """Encode *values*; an empty mapping is stored as the empty string."""
    if not values:
        return ""
    return codec.encode(values)


def decode_values(codec: SessionCodec, raw: str) -> dict[str, Any]:
    """Decode *raw*; the empty string means no attributes."""
    if not raw:
        return {}
    return codec.decode(raw)
