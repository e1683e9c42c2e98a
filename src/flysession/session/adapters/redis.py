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
"""Redis-backed session store."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

_logger = logging.getLogger(__name__)

_KEY_PREFIX = "flysession:session:"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RedisSessionStore:
    """Session store backed by ``redis.asyncio``.

    Records are stored as raw bytes under ``flysession:session:<token>``
    with a millisecond TTL derived from the record expiry, so Redis itself
    evicts expired sessions.
    """

    def __init__(
        self,
        client: Any,
        prefix: str = _KEY_PREFIX,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._prefix = prefix
        self._clock = clock

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    async def find(self, token: str) -> bytes | None:
        raw = await self._client.get(self._key(token))
        if raw is None:
            return None
        return raw.encode("utf-8") if isinstance(raw, str) else bytes(raw)

    async def save(self, token: str, data: bytes, expiry: datetime | None) -> None:
        if expiry is None:
            await self._client.set(self._key(token), data)
            return

        ttl_ms = math.ceil((expiry - self._clock()).total_seconds() * 1000)
        if ttl_ms <= 0:
            _logger.debug("Session expiry already passed; deleting instead of saving")
            await self._client.delete(self._key(token))
            return
        await self._client.set(self._key(token), data, px=ttl_ms)

    async def delete(self, token: str) -> None:
        await self._client.delete(self._key(token))
