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
"""In-memory session store with expiry."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InMemorySessionStore:
    """Session store kept in a process-local dict, guarded by an ``asyncio.Lock``.

    Expired records are dropped lazily on :meth:`find`; call
    :meth:`purge_expired` periodically to reclaim memory from records that
    are never read again. Suitable for development, testing, and
    single-process applications.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._records: dict[str, tuple[bytes, datetime | None]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    def _expired(self, expiry: datetime | None) -> bool:
        return expiry is not None and self._clock() >= expiry

    async def find(self, token: str) -> bytes | None:
        async with self._lock:
            entry = self._records.get(token)
            if entry is None:
                return None

            data, expiry = entry
            if self._expired(expiry):
                del self._records[token]
                return None

            return data

    async def save(self, token: str, data: bytes, expiry: datetime | None) -> None:
        async with self._lock:
            self._records[token] = (data, expiry)

    async def delete(self, token: str) -> None:
        async with self._lock:
            self._records.pop(token, None)

    async def purge_expired(self) -> int:
        """Remove every expired record and return how many were dropped."""
        async with self._lock:
            expired = [token for token, (_, expiry) in self._records.items() if self._expired(expiry)]
            for token in expired:
                del self._records[token]
        if expired:
            _logger.debug("Purged %d expired session(s)", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._records)
