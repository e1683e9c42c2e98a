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
"""SessionMiddleware — pure ASGI middleware that manages the session cookie."""

from __future__ import annotations

from collections.abc import Sequence
from fnmatch import fnmatch
from typing import Any

import structlog
from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from flysession.kernel.exceptions import SessionStoreException
from flysession.session.context import attach
from flysession.session.manager import SessionManager
from flysession.session.ports.outbound import SessionStore
from flysession.session.settings import SessionOptions, SessionSettings

logger = structlog.get_logger("flysession.session")


class SessionMiddleware:
    """Loads the session before the app runs and commits it when the response starts.

    The session is attached to ``request.state`` under the configured
    context key. On ``http.response.start`` the session is flushed, saved
    or deleted, and the ``Set-Cookie`` header is added before any body
    bytes leave the server. Store failures are answered by the options'
    ``error_handler`` instead of the app's response.

    Uses raw ASGI rather than ``BaseHTTPMiddleware`` so streaming
    responses are not buffered.

    Args:
        app: The downstream ASGI application.
        store: Session store; ignored when *manager* is given.
        options: Cookie and expiry options.
        settings: Cookie name and context key.
        manager: A preconfigured :class:`SessionManager`.
        exclude_patterns: Glob patterns of paths that bypass sessions.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: SessionStore | None = None,
        *,
        options: SessionOptions | None = None,
        settings: SessionSettings | None = None,
        manager: SessionManager | None = None,
        exclude_patterns: Sequence[str] = (),
    ) -> None:
        if manager is None:
            if store is None:
                raise ValueError("SessionMiddleware requires a store or a manager")
            manager = SessionManager(store, options=options, settings=settings)
        self.app = app
        self._manager = manager
        self._exclude_patterns = list(exclude_patterns)

    @property
    def manager(self) -> SessionManager:
        return self._manager

    def should_not_filter(self, scope: Scope) -> bool:
        path: str = scope.get("path", "")
        return any(fnmatch(path, p) for p in self._exclude_patterns)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or self.should_not_filter(scope):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        try:
            session = await self._manager.load(request)
        except SessionStoreException as exc:
            await self._send_error(request, exc, "session_load_failed", send)
            return

        attach(request, session, self._manager.settings.context_key)

        replaced = False

        async def _send(message: Message) -> None:
            nonlocal replaced
            if replaced:
                return
            if message["type"] == "http.response.start":
                try:
                    cookie = await self._manager.commit(session)
                except SessionStoreException as exc:
                    replaced = True
                    await self._send_error(request, exc, "session_save_failed", send)
                    return
                if cookie is not None:
                    _add_cookie(message, cookie)
            await send(message)

        await self.app(scope, receive, _send)

    async def _send_error(self, request: Request, exc: Exception, event: str, send: Send) -> None:
        logger.error(event, path=request.url.path, error=str(exc), error_type=type(exc).__name__)
        response = await self._manager.handle_error(request, exc)
        await response(request.scope, request.receive, send)


def _add_cookie(message: Any, cookie: str) -> None:
    message.setdefault("headers", [])
    headers = MutableHeaders(scope=message)
    headers.append("set-cookie", cookie)
    headers.add_vary_header("Cookie")
    if "cache-control" not in headers:
        headers["cache-control"] = 'no-cache="Set-Cookie"'
