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
"""Typed accessors for the session attached to a request.

Every function resolves the session from the request and raises
:class:`~flysession.kernel.exceptions.SessionNotAttachedException` when
the request did not pass through ``SessionMiddleware``.

Reads raise :class:`~flysession.kernel.exceptions.KeyNotFoundException`
for a missing key and
:class:`~flysession.kernel.exceptions.TypeAssertionException` for a value
of another type. Mutations raise
:class:`~flysession.kernel.exceptions.AlreadyWrittenException` once the
response has started.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from flysession.session.context import resolve
from flysession.session.session import ValueKind


# ---------------------------------------------------------------------------
# str
# ---------------------------------------------------------------------------
def get_string(request: Any, key: str) -> str:
    return resolve(request).get(key, ValueKind.STRING)


def put_string(request: Any, key: str, value: str) -> None:
    resolve(request).put(key, value, ValueKind.STRING)


def pop_string(request: Any, key: str) -> str:
    """Return the string under *key* and remove it; a type mismatch leaves it in place."""
    return resolve(request).pop(key, ValueKind.STRING)


# ---------------------------------------------------------------------------
# bool
# ---------------------------------------------------------------------------
def get_bool(request: Any, key: str) -> bool:
    return resolve(request).get(key, ValueKind.BOOL)


def put_bool(request: Any, key: str, value: bool) -> None:
    resolve(request).put(key, value, ValueKind.BOOL)


def pop_bool(request: Any, key: str) -> bool:
    return resolve(request).pop(key, ValueKind.BOOL)


# ---------------------------------------------------------------------------
# int
# ---------------------------------------------------------------------------
def get_int(request: Any, key: str) -> int:
    """Return the integer under *key*.

    Integers read back from the store arrive as ``Decimal``; integer
    numerals are converted, anything else (including ``2.0``) fails the
    type assertion.
    """
    return resolve(request).get(key, ValueKind.INT)


def put_int(request: Any, key: str, value: int) -> None:
    resolve(request).put(key, value, ValueKind.INT)


def pop_int(request: Any, key: str) -> int:
    return resolve(request).pop(key, ValueKind.INT)


# ---------------------------------------------------------------------------
# float
# ---------------------------------------------------------------------------
def get_float(request: Any, key: str) -> float:
    return resolve(request).get(key, ValueKind.FLOAT)


def put_float(request: Any, key: str, value: float) -> None:
    resolve(request).put(key, value, ValueKind.FLOAT)


def pop_float(request: Any, key: str) -> float:
    return resolve(request).pop(key, ValueKind.FLOAT)


# ---------------------------------------------------------------------------
# bytes
# ---------------------------------------------------------------------------
def get_bytes(request: Any, key: str) -> bytes:
    return resolve(request).get(key, ValueKind.BYTES)


def put_bytes(request: Any, key: str, value: bytes) -> None:
    resolve(request).put(key, value, ValueKind.BYTES)


def pop_bytes(request: Any, key: str) -> bytes:
    return resolve(request).pop(key, ValueKind.BYTES)


# ---------------------------------------------------------------------------
# datetime
# ---------------------------------------------------------------------------
def get_datetime(request: Any, key: str) -> datetime:
    return resolve(request).get(key, ValueKind.DATETIME)


def put_datetime(request: Any, key: str, value: datetime) -> None:
    resolve(request).put(key, value, ValueKind.DATETIME)


def pop_datetime(request: Any, key: str) -> datetime:
    return resolve(request).pop(key, ValueKind.DATETIME)


# ---------------------------------------------------------------------------
# Whole-session operations
# ---------------------------------------------------------------------------
def exists(request: Any, key: str) -> bool:
    return resolve(request).exists(key)


def keys(request: Any) -> list[str]:
    return resolve(request).keys()


def remove(request: Any, key: str) -> None:
    """Delete *key* from the session. A missing key is a no-op."""
    resolve(request).remove(key)


def clear(request: Any) -> None:
    resolve(request).clear()


def destroy(request: Any) -> None:
    """Invalidate the session: the record is deleted and the cookie expired."""
    resolve(request).destroy()


def renew_token(request: Any) -> None:
    """Keep the session data but move it to a new token (e.g. after login)."""
    resolve(request).renew_token()
