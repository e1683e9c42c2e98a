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
"""Session — per-request session state with a reader/writer lock."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any

from flysession.kernel.exceptions import (
    AlreadyWrittenException,
    KeyNotFoundException,
    TypeAssertionException,
)
from flysession.session.codec import is_integer_numeral
from flysession.session.lock import ReadWriteLock
from flysession.session.tokens import generate_token

SessionValue = str | bool | int | float | bytes | datetime | Decimal
"""Value types a session can hold. ``Decimal`` is how numbers come back from the store."""

SUPPORTED_TYPES: tuple[type, ...] = (str, bool, int, float, bytes, datetime, Decimal)


class ValueKind(StrEnum):
    """The type requested by a typed accessor."""

    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    BYTES = "bytes"
    DATETIME = "datetime"


def _as_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise TypeError


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise TypeError


def _as_int(value: Any) -> int:
    # bool is an int subclass but never a session integer
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, Decimal) and is_integer_numeral(value):
        return int(value)
    raise TypeError


def _as_float(value: Any) -> float:
    if isinstance(value, float):
        return value
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    raise TypeError


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    raise TypeError


_CONVERTERS: dict[ValueKind, Callable[[Any], Any]] = {
    ValueKind.STRING: _as_string,
    ValueKind.BOOL: _as_bool,
    ValueKind.INT: _as_int,
    ValueKind.FLOAT: _as_float,
    ValueKind.BYTES: _as_bytes,
    ValueKind.DATETIME: _as_datetime,
}


class SessionState(StrEnum):
    """Lifecycle of a session within one request.

    ``FLUSHED`` is terminal: once the manager has written the session to
    the response no further transition is allowed.
    """

    CLEAN = "clean"
    MODIFIED = "modified"
    DESTROYED = "destroyed"
    FLUSHED = "flushed"


@dataclass(frozen=True)
class FlushResult:
    """Snapshot taken when a session is flushed to the response."""

    state: SessionState
    token: str
    previous_token: str | None
    is_new: bool
    deadline: datetime | None
    values: dict[str, Any] = field(default_factory=dict)


class Session:
    """Key/value state for one visitor, scoped to a single request.

    Reads take the shared lock; every mutation takes the exclusive lock and
    fails with :class:`AlreadyWrittenException` after :meth:`flush`.

    Attributes:
        token: The token identifying the record in the session store.
        is_new: ``True`` if the session was created during this request.
        deadline: Absolute expiry set from the configured lifetime, if any.
    """

    def __init__(
        self,
        token: str,
        values: dict[str, Any] | None = None,
        *,
        is_new: bool = False,
        deadline: datetime | None = None,
    ) -> None:
        self._token = token
        self._previous_token: str | None = None
        self._values: dict[str, Any] = dict(values) if values else {}
        self._is_new = is_new
        self._deadline = deadline
        self._state = SessionState.CLEAN
        self._lock = ReadWriteLock()

    @property
    def token(self) -> str:
        with self._lock.read():
            return self._token

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def loaded(self) -> bool:
        return not self._is_new

    @property
    def deadline(self) -> datetime | None:
        return self._deadline

    @property
    def state(self) -> SessionState:
        with self._lock.read():
            return self._state

    @property
    def modified(self) -> bool:
        return self.state is SessionState.MODIFIED

    @property
    def destroyed(self) -> bool:
        return self.state is SessionState.DESTROYED

    @property
    def written(self) -> bool:
        return self.state is SessionState.FLUSHED

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: str, kind: ValueKind) -> Any:
        """Return the value under *key* converted to *kind*."""
        with self._lock.read():
            return self._convert(key, kind)

    def exists(self, key: str) -> bool:
        with self._lock.read():
            return key in self._values

    def keys(self) -> list[str]:
        """Return the stored keys in sorted order."""
        with self._lock.read():
            return sorted(self._values)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def put(self, key: str, value: Any, kind: ValueKind | None = None) -> None:
        """Store *value* under *key*, replacing any existing value.

        Raises:
            AlreadyWrittenException: If the session was already flushed.
            TypeError: If *value* is not a supported type, or not of *kind*.
        """
        with self._lock.write():
            self._check_writable()
            if not isinstance(value, SUPPORTED_TYPES):
                raise TypeError(f"unsupported session value type: {type(value).__name__}")
            if kind is not None:
                try:
                    _CONVERTERS[kind](value)
                except TypeError:
                    raise TypeError(f"expected a {kind.value} value, got {type(value).__name__}") from None
            self._mark_modified()
            self._values[key] = value

    def pop(self, key: str, kind: ValueKind) -> Any:
        """Return the value under *key* and remove it.

        On a type mismatch the value stays in the session.
        """
        with self._lock.write():
            self._check_writable()
            value = self._convert(key, kind)
            del self._values[key]
            self._mark_modified()
            return value

    def remove(self, key: str) -> None:
        """Delete *key* and mark the session modified, even if *key* was absent."""
        with self._lock.write():
            self._check_writable()
            self._values.pop(key, None)
            self._mark_modified_unless_destroyed()

    def clear(self) -> None:
        with self._lock.write():
            self._check_writable()
            self._values.clear()
            self._mark_modified_unless_destroyed()

    def destroy(self) -> None:
        """Drop all values and delete the stored record when the response is written."""
        with self._lock.write():
            self._transition(SessionState.DESTROYED)
            self._values.clear()

    def renew_token(self) -> None:
        """Move the session to a fresh token, retiring the current one.

        Call this after a privilege change such as login.
        """
        with self._lock.write():
            self._transition(SessionState.MODIFIED)
            self._rotate_token()

    def flush(self) -> FlushResult:
        """Snapshot the session and mark it written. Used by the manager only."""
        with self._lock.write():
            previous_state = self._state
            self._transition(SessionState.FLUSHED)
            return FlushResult(
                state=previous_state,
                token=self._token,
                previous_token=self._previous_token,
                is_new=self._is_new,
                deadline=self._deadline,
                values=dict(self._values),
            )

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _convert(self, key: str, kind: ValueKind) -> Any:
        try:
            value = self._values[key]
        except KeyError:
            raise KeyNotFoundException(key) from None
        try:
            return _CONVERTERS[kind](value)
        except TypeError:
            raise TypeAssertionException(key, kind.value, value) from None

    def _check_writable(self) -> None:
        if self._state is SessionState.FLUSHED:
            raise AlreadyWrittenException()

    def _mark_modified(self) -> None:
        if self._state is SessionState.DESTROYED:
            # Writing after destroy starts over under a new token.
            self._rotate_token()
        self._transition(SessionState.MODIFIED)

    def _mark_modified_unless_destroyed(self) -> None:
        if self._state is not SessionState.DESTROYED:
            self._transition(SessionState.MODIFIED)

    def _rotate_token(self) -> None:
        if self._previous_token is None and not self._is_new:
            self._previous_token = self._token
        self._token = generate_token()

    def _transition(self, target: SessionState) -> None:
        self._check_writable()
        self._state = target

    def __repr__(self) -> str:
        return f"Session(state={self._state.value!r}, is_new={self._is_new}, keys={len(self._values)})"
