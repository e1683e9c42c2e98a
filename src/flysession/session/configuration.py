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
"""Build the session subsystem from configuration.

Reads ``flysession.session.*`` keys (see :class:`SessionProperties`)::

    flysession:
      session:
        cookie-name: APP_SESSION
        lifetime: 86400
        idle-timeout: 1800
        store: redis
        redis-url: redis://cache:6379/0
"""

from __future__ import annotations

import importlib.util
from typing import Any

import structlog
from starlette.middleware import Middleware

from flysession.core.config import Config
from flysession.logging.structlog_adapter import configure_logging
from flysession.session.manager import SessionManager
from flysession.session.middleware import SessionMiddleware
from flysession.session.ports.outbound import SessionStore
from flysession.session.settings import ErrorHandler, SessionProperties

logger = structlog.get_logger("flysession.session")


def _is_available(module: str) -> bool:
    try:
        return importlib.util.find_spec(module) is not None
    except ModuleNotFoundError:
        return False


def session_store_from_config(config: Config) -> SessionStore:
    """Create the configured store, falling back to memory when Redis is not installed."""
    properties = config.bind(SessionProperties)
    store_type = properties.store.lower()

    if store_type == "redis":
        if _is_available("redis.asyncio"):
            import redis.asyncio as aioredis

            from flysession.session.adapters.redis import RedisSessionStore

            client: Any = aioredis.from_url(properties.redis_url)  # type: ignore[no-untyped-call,unused-ignore]
            return RedisSessionStore(client=client)
        logger.warning("redis_unavailable", fallback="memory")
    elif store_type != "memory":
        raise ValueError(f"unknown session store type: {properties.store!r}")

    from flysession.session.adapters.memory import InMemorySessionStore

    return InMemorySessionStore()


def session_manager_from_config(
    config: Config,
    store: SessionStore | None = None,
    error_handler: ErrorHandler | None = None,
) -> SessionManager:
    properties = config.bind(SessionProperties)
    return SessionManager(
        store if store is not None else session_store_from_config(config),
        options=properties.to_options(error_handler),
        settings=properties.to_settings(),
    )


def session_middleware(
    config: Config,
    store: SessionStore | None = None,
    error_handler: ErrorHandler | None = None,
) -> list[Middleware]:
    """Return the Starlette middleware list for the session subsystem.

    Empty when ``flysession.session.enabled`` is false, so the result can
    be spliced into an application's middleware list unconditionally.
    Logging is set up from ``flysession.logging`` when that section exists.
    """
    configure_logging(config)
    properties = config.bind(SessionProperties)
    if not properties.enabled:
        return []
    manager = session_manager_from_config(config, store=store, error_handler=error_handler)
    return [
        Middleware(
            SessionMiddleware,
            manager=manager,
            exclude_patterns=properties.exclude_patterns,
        )
    ]
