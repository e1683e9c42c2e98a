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
"""Unified exception hierarchy for flysession.

All library exceptions inherit from FlySessionException so callers can
catch one base type or target a specific failure.

Categories:
- SessionException: errors about the data held in a session
- SessionNotAttachedException: accessor used outside a managed request
- InfrastructureException: session store failures
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class FlySessionException(Exception):
    """Base exception for all flysession errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SESSION_KEY_NOT_FOUND").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Session Data Exceptions
# =============================================================================


class SessionException(FlySessionException):
    """Recoverable errors raised by session value accessors."""


class KeyNotFoundException(SessionException):
    """The requested key is not present in the session values."""

    def __init__(self, key: str) -> None:
        super().__init__(
            "key not found in session values",
            code="SESSION_KEY_NOT_FOUND",
            context={"key": key},
        )
        self.key = key


class TypeAssertionException(SessionException):
    """The stored value cannot be returned as the requested type."""

    def __init__(self, key: str, expected: str, actual: object) -> None:
        super().__init__(
            "type assertion failed",
            code="SESSION_TYPE_ASSERTION",
            context={"key": key, "expected": expected, "actual": type(actual).__name__},
        )
        self.key = key


class AlreadyWrittenException(SessionException):
    """A mutation was attempted after the session was flushed to the response."""

    def __init__(self) -> None:
        super().__init__(
            "session has already been written to the response",
            code="SESSION_ALREADY_WRITTEN",
        )


class SessionNotAttachedException(FlySessionException):
    """No session is attached to the request.

    Raised when an accessor runs outside a request handled by
    ``SessionMiddleware``. This is a wiring defect, not a session state.
    """

    def __init__(self) -> None:
        super().__init__(
            "no session attached to the request; is SessionMiddleware installed?",
            code="SESSION_NOT_ATTACHED",
        )


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(FlySessionException):
    """Infrastructure failures: session store, network."""


class SessionStoreException(InfrastructureException):
    """The session store failed to find, save or delete a record."""
