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
"""Attach and resolve the session on a request.

The session lives on ``request.state`` under the configured context key.
The key itself is recorded in the ASGI scope, which Starlette shares with
every ``Request`` built for the same call, so route handlers find the
session without knowing how the middleware was configured.
"""

from __future__ import annotations

from typing import Any

from flysession.kernel.exceptions import SessionNotAttachedException
from flysession.session.session import Session

SCOPE_CONTEXT_KEY = "flysession.context_key"


def attach(request: Any, session: Session, key: str) -> None:
    """Bind *session* to *request* under *key*."""
    request.scope[SCOPE_CONTEXT_KEY] = key
    setattr(request.state, key, session)


def resolve(request: Any) -> Session:
    """Return the session bound to *request*.

    Raises:
        SessionNotAttachedException: If no session middleware handled the request.
    """
    key = request.scope.get(SCOPE_CONTEXT_KEY)
    session = getattr(request.state, key, None) if key else None
    if not isinstance(session, Session):
        raise SessionNotAttachedException()
    return session
