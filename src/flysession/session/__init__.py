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
"""flysession.session — cookie-backed server-side sessions.

Install :class:`SessionMiddleware` and use the typed accessors in
:mod:`flysession.session.values` from route handlers::

    from flysession.session import values as session

    async def login(request):
        session.renew_token(request)
        session.put_int(request, "user_id", 42)

Import concrete store types from the adapter package::

    from flysession.session.adapters.memory import InMemorySessionStore
    from flysession.session.adapters.redis import RedisSessionStore
"""

from flysession.session.manager import SessionManager
from flysession.session.middleware import SessionMiddleware
from flysession.session.ports.outbound import SessionStore
from flysession.session.session import Session, SessionState, ValueKind
from flysession.session.settings import (
    SessionOptions,
    SessionProperties,
    SessionSettings,
    default_error_handler,
)

__all__ = [
    "Session",
    "SessionManager",
    "SessionMiddleware",
    "SessionOptions",
    "SessionProperties",
    "SessionSettings",
    "SessionState",
    "SessionStore",
    "ValueKind",
    "default_error_handler",
]
