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
"""StructlogAdapter — structlog-backed logging for the session subsystem."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from flysession.core.config import Config
from flysession.logging.port import LOG_FORMATS, LOG_STREAMS, LoggingPort, LoggingProperties


class StructlogAdapter:
    """Routes structlog through stdlib logging with console or JSON rendering."""

    def __init__(self) -> None:
        self._properties = LoggingProperties()

    @property
    def properties(self) -> LoggingProperties:
        return self._properties

    def configure(self, properties: LoggingProperties) -> None:
        """Apply *properties* globally.

        Raises:
            ValueError: On an unknown level, format or stream.
        """
        root_level = _level(properties.level)
        log_format = properties.format.lower()
        if log_format not in LOG_FORMATS:
            raise ValueError(f"unknown log format {properties.format!r}; expected one of {LOG_FORMATS}")
        stream = properties.stream.lower()
        if stream not in LOG_STREAMS:
            raise ValueError(f"unknown log stream {properties.stream!r}; expected one of {LOG_STREAMS}")
        logger_levels = {name: _level(level) for name, level in _flatten(properties.loggers).items()}

        renderer: structlog.types.Processor = (
            structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer()
        )
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                renderer,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stderr if stream == "stderr" else sys.stdout,
            level=root_level,
            force=True,
        )
        for name, level in logger_levels.items():
            logging.getLogger(name).setLevel(level)
        self._properties = properties

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(_level(level))


def configure_logging(config: Config, adapter: LoggingPort | None = None) -> LoggingPort | None:
    """Configure logging from ``flysession.logging`` if that section exists.

    Returns ``None`` and leaves the host application's logging alone when
    the section is absent.
    """
    if not config.get_section("flysession.logging"):
        return None
    adapter = adapter if adapter is not None else StructlogAdapter()
    adapter.configure(config.bind(LoggingProperties))
    return adapter


def _level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {name!r}")
    return level


def _flatten(section: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in section.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{name}."))
        else:
            flat[name] = value
    return flat
