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
"""SessionManager — loads sessions on request entry and commits them on response."""

from __future__ import annotations

import inspect
import math
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

import structlog
from starlette.responses import Response

from flysession.kernel.exceptions import SessionStoreException
from flysession.session.codec import RecordDecodeError, SessionRecord, decode_record, encode_record
from flysession.session.cookies import render_cookie, render_expired_cookie
from flysession.session.ports.outbound import SessionStore
from flysession.session.session import Session, SessionState
from flysession.session.settings import SessionOptions, SessionSettings
from flysession.session.tokens import generate_token

logger = structlog.get_logger("flysession.session")

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionManager:
    """Framework-agnostic load/commit orchestration around a :class:`SessionStore`.

    Args:
        store: Backend holding serialized session records.
        options: Cookie attributes and expiry policy.
        settings: Cookie name and request context key.
        clock: Source of the current UTC time.
    """

    def __init__(
        self,
        store: SessionStore,
        options: SessionOptions | None = None,
        settings: SessionSettings | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._options = options or SessionOptions()
        self._settings = settings or SessionSettings()
        self._clock = clock

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def options(self) -> SessionOptions:
        return self._options

    @property
    def settings(self) -> SessionSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Request entry
    # ------------------------------------------------------------------

    async def load(self, request: Any) -> Session:
        """Return the session named by the request cookie, or a fresh one.

        A missing, expired or unreadable record yields a new empty session
        under a newly generated token.

        Raises:
            SessionStoreException: If the store fails.
        """
        token = request.cookies.get(self._settings.cookie_name)
        if token:
            data = await self._call_store("find", self._store.find(token))
            session = self._restore(token, data) if data is not None else None
            if session is not None:
                return session

        now = self._clock()
        deadline = now + self._options.lifetime if self._options.lifetime > timedelta(0) else None
        return Session(generate_token(), is_new=True, deadline=deadline)

    def _restore(self, token: str, data: bytes) -> Session | None:
        try:
            record = decode_record(data)
        except RecordDecodeError as exc:
            logger.warning("session_record_invalid", error=str(exc))
            return None
        if record.deadline is not None and self._clock() >= record.deadline:
            return None
        return Session(token, record.values, deadline=record.deadline)

    # ------------------------------------------------------------------
    # Response side
    # ------------------------------------------------------------------

    async def commit(self, session: Session) -> str | None:
        """Flush *session*, persist or delete it, and return the ``Set-Cookie`` value.

        Returns ``None`` when no cookie needs to be sent.

        Raises:
            AlreadyWrittenException: If the session was already committed.
            SessionStoreException: If the store fails.
        """
        result = session.flush()
        now = self._clock()

        if result.state is SessionState.DESTROYED:
            if result.previous_token:
                await self._call_store("delete", self._store.delete(result.previous_token))
            if not result.is_new:
                await self._call_store("delete", self._store.delete(result.token))
            logger.debug("session_destroyed")
            return render_expired_cookie(self._settings.cookie_name, self._options)

        sliding = result.state is SessionState.CLEAN and not result.is_new and self._idle_enabled
        if result.state is not SessionState.MODIFIED and not sliding:
            return None

        if result.previous_token:
            await self._call_store("delete", self._store.delete(result.previous_token))
            logger.debug("session_token_renewed")

        expiry = self._expiry(result.deadline, now)
        data = encode_record(SessionRecord(deadline=result.deadline, values=result.values))
        await self._call_store("save", self._store.save(result.token, data, expiry))
        return self._cookie(result.token, expiry, now)

    @property
    def _idle_enabled(self) -> bool:
        return self._options.idle_timeout > timedelta(0)

    def _expiry(self, deadline: datetime | None, now: datetime) -> datetime | None:
        """Earliest of the absolute deadline and the idle cut-off."""
        candidates = [deadline] if deadline is not None else []
        if self._idle_enabled:
            candidates.append(now + self._options.idle_timeout)
        return min(candidates, default=None)

    def _cookie(self, token: str, expiry: datetime | None, now: datetime) -> str:
        options = self._options
        timed = options.lifetime > timedelta(0) or options.persist
        if not timed or expiry is None:
            return render_cookie(self._settings.cookie_name, token, options)

        max_age = max(math.ceil((expiry - now).total_seconds()), 0)
        return render_cookie(
            self._settings.cookie_name,
            token,
            options,
            max_age=max_age,
            expires=now + timedelta(seconds=max_age),
        )

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    async def handle_error(self, request: Any, exc: Exception) -> Response:
        """Build the response for a store failure via the configured error handler."""
        result = self._options.error_handler(request, exc)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _call_store(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except Exception as exc:
            raise SessionStoreException(
                f"session store {operation} failed: {exc}",
                code="SESSION_STORE_ERROR",
                context={"operation": operation},
            ) from exc
