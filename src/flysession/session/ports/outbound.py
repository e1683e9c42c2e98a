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
"""Session store protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class SessionStore(Protocol):
    """Token-keyed persistence for serialized session records.

    All session backends (in-memory, Redis, etc.) must implement this protocol.
    """

    async def find(self, token: str) -> bytes | None:
        """Return the record for *token*, or ``None`` if absent or expired."""
        ...

    async def save(self, token: str, data: bytes, expiry: datetime | None) -> None:
        """Insert or replace the record. ``expiry`` of ``None`` means no expiry."""
        ...

    async def delete(self, token: str) -> None:
        """Remove the record. Deleting an absent token is not an error."""
        ...
