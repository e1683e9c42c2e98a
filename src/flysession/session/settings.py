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
"""Session settings, per-middleware options, and bindable properties."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Literal

from starlette.responses import PlainTextResponse, Response

from flysession.core.config import config_properties

DEFAULT_COOKIE_NAME = "FLYSESSION"
DEFAULT_CONTEXT_KEY = "flysession_session"

ErrorHandler = Callable[[Any, Exception], Response | Awaitable[Response]]
"""``(request, exc) -> Response`` invoked when the session store fails."""

SameSite = Literal["lax", "strict", "none"]


def default_error_handler(request: Any, exc: Exception) -> Response:
    """Answer with HTTP 500 and the error message as a plain-text body."""
    return PlainTextResponse(f"{exc}\n", status_code=500)


@dataclass(frozen=True)
class SessionSettings:
    """Process-wide names: set once before serving traffic."""

    cookie_name: str = DEFAULT_COOKIE_NAME
    context_key: str = DEFAULT_CONTEXT_KEY


@dataclass(frozen=True)
class SessionOptions:
    """Cookie attributes and expiry policy for one session manager.

    Attributes:
        path: Cookie ``Path``.
        domain: Cookie ``Domain``; omitted when ``None``.
        secure: Emit the ``Secure`` flag.
        http_only: Emit the ``HttpOnly`` flag.
        same_site: Cookie ``SameSite``; omitted when ``None``.
        lifetime: Absolute session duration from creation; zero disables.
        idle_timeout: Maximum gap between requests; zero disables.
        persist: Give the cookie a ``Max-Age``/``Expires`` even when
            ``lifetime`` is zero, so browsers keep it across restarts.
        error_handler: Builds the response when the session store fails.
    """

    path: str = "/"
    domain: str | None = None
    secure: bool = False
    http_only: bool = True
    same_site: SameSite | None = "lax"
    lifetime: timedelta = timedelta(0)
    idle_timeout: timedelta = timedelta(0)
    persist: bool = False
    error_handler: ErrorHandler = field(default=default_error_handler)

    def __post_init__(self) -> None:
        if self.lifetime < timedelta(0) or self.idle_timeout < timedelta(0):
            raise ValueError("lifetime and idle_timeout must not be negative")


@config_properties(prefix="flysession.session")
@dataclass
class SessionProperties:
    """``flysession.session.*`` configuration keys. Durations are in seconds."""

    enabled: bool = True
    cookie_name: str = DEFAULT_COOKIE_NAME
    context_key: str = DEFAULT_CONTEXT_KEY
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    http_only: bool = True
    same_site: str = "lax"
    lifetime: float = 0
    idle_timeout: float = 0
    persist: bool = False
    store: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    exclude_patterns: list[str] = field(default_factory=list)

    def to_settings(self) -> SessionSettings:
        return SessionSettings(cookie_name=self.cookie_name, context_key=self.context_key)

    def to_options(self, error_handler: ErrorHandler | None = None) -> SessionOptions:
        same_site = self.same_site.lower() if self.same_site else None
        if same_site not in (None, "", "lax", "strict", "none"):
            raise ValueError(f"invalid same_site value: {self.same_site!r}")
        return SessionOptions(
            path=self.path,
            domain=self.domain or None,
            secure=self.secure,
            http_only=self.http_only,
            same_site=same_site or None,  # type: ignore[arg-type]
            lifetime=timedelta(seconds=float(self.lifetime)),
            idle_timeout=timedelta(seconds=float(self.idle_timeout)),
            persist=self.persist,
            error_handler=error_handler or default_error_handler,
        )
