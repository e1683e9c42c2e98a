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
"""Set-Cookie rendering for the session cookie."""

from __future__ import annotations

import http.cookies
from datetime import UTC, datetime
from email.utils import format_datetime

from flysession.session.settings import SessionOptions

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def render_cookie(
    name: str,
    value: str,
    options: SessionOptions,
    *,
    max_age: int | None = None,
    expires: datetime | None = None,
) -> str:
    """Return the value of a ``Set-Cookie`` header for the session token."""
    cookie: http.cookies.BaseCookie[str] = http.cookies.SimpleCookie()
    cookie[name] = value
    morsel = cookie[name]
    if max_age is not None:
        morsel["max-age"] = str(max_age)
    if expires is not None:
        morsel["expires"] = format_datetime(expires.astimezone(UTC), usegmt=True)
    morsel["path"] = options.path
    if options.domain:
        morsel["domain"] = options.domain
    if options.secure:
        morsel["secure"] = True
    if options.http_only:
        morsel["httponly"] = True
    if options.same_site:
        morsel["samesite"] = options.same_site
    return cookie.output(header="").strip()


def render_expired_cookie(name: str, options: SessionOptions) -> str:
    """Return a ``Set-Cookie`` value that tells the client to drop the cookie."""
    return render_cookie(name, "", options, max_age=0, expires=_EPOCH)
