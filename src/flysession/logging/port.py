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
"""LoggingPort — how the session subsystem sets up and obtains its loggers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from flysession.core.config import config_properties

LOG_FORMATS = ("console", "json")
LOG_STREAMS = ("stdout", "stderr")


@config_properties(prefix="flysession.logging")
@dataclass
class LoggingProperties:
    """Bound from ``flysession.logging``.

    ``loggers`` maps logger names to levels and may be nested
    (``flysession: {session: DEBUG}``) or dotted (``flysession.session: DEBUG``).
    """

    level: str = "INFO"
    format: str = "console"
    stream: str = "stdout"
    loggers: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class LoggingPort(Protocol):
    def configure(self, properties: LoggingProperties) -> None: ...
    def get_logger(self, name: str) -> Any: ...
    def set_level(self, name: str, level: str) -> None: ...
