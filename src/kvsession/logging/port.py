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
"""Logging configuration seam.

kvsession modules log through the standard ``logging`` module; an
implementation of this protocol decides how those records are rendered.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from kvsession.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Applies the ``kvsession.logging`` settings and hands out loggers."""

    def configure(self, config: Config) -> None:
        """Set root and per-module levels and the output format from *config*."""
        ...

    def get_logger(self, name: str) -> Any:
        """Logger bound to *name*."""
        ...

    def set_level(self, name: str, level: str) -> None:
        """Change the level of one logger, e.g. ``set_level("kvsession.kv", "DEBUG")``."""
        ...
