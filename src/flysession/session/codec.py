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
"""Session record serialization.

A record is a UTF-8 JSON document::

    {"deadline": "2026-01-01T12:00:00+00:00", "values": {"user_id": 42}}

``bytes`` and ``datetime`` values are wrapped in single-key objects
(``{"$bytes": ...}``, ``{"$datetime": ...}``). Numbers are decoded as
:class:`~decimal.Decimal` so integer accessors can tell a stored integer
from an arbitrary float.
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

_BYTES_TAG = "$bytes"
_DATETIME_TAG = "$datetime"


def is_integer_numeral(value: Decimal) -> bool:
    """Return ``True`` if *value* was parsed from an integer literal.

    ``Decimal("42")`` has exponent 0; float literals such as ``2.0`` or
    ``1e+16`` never do.
    """
    return value.is_finite() and value.as_tuple().exponent == 0


class RecordDecodeError(ValueError):
    """Stored data is not a valid session record."""


@dataclass(frozen=True)
class SessionRecord:
    deadline: datetime | None = None
    values: dict[str, Any] = field(default_factory=dict)


def _encode_value(value: Any) -> Any:
    if isinstance(value, bytes):
        return {_BYTES_TAG: base64.b64encode(value).decode("ascii")}
    if isinstance(value, datetime):
        return {_DATETIME_TAG: value.isoformat()}
    if isinstance(value, Decimal):
        return int(value) if is_integer_numeral(value) else float(value)
    return value


def _decode_value(key: str, value: Any) -> Any:
    if isinstance(value, dict) and len(value) == 1:
        try:
            if _BYTES_TAG in value:
                return base64.b64decode(value[_BYTES_TAG], validate=True)
            if _DATETIME_TAG in value:
                return datetime.fromisoformat(value[_DATETIME_TAG])
        except (ValueError, TypeError) as exc:
            raise RecordDecodeError(f"invalid session record: bad value for {key!r}: {exc}") from exc
    return value


def encode_record(record: SessionRecord) -> bytes:
    payload = {
        "deadline": record.deadline.isoformat() if record.deadline else None,
        "values": {key: _encode_value(value) for key, value in record.values.items()},
    }
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def decode_record(data: bytes | str) -> SessionRecord:
    """Decode stored bytes into a :class:`SessionRecord`.

    Tags are only recognised on entry values, so keys such as ``$bytes``
    are ordinary session keys.

    Raises:
        RecordDecodeError: If *data* is not a well-formed record.
    """
    try:
        payload = json.loads(data, parse_int=Decimal, parse_float=Decimal)
    except (ValueError, TypeError) as exc:
        raise RecordDecodeError(f"invalid session record: {exc}") from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("values"), dict):
        raise RecordDecodeError("invalid session record: missing values object")

    deadline = payload.get("deadline")
    if deadline is not None:
        if not isinstance(deadline, str):
            raise RecordDecodeError("invalid session record: deadline must be a string")
        try:
            deadline = datetime.fromisoformat(deadline)
        except ValueError as exc:
            raise RecordDecodeError(f"invalid session record: {exc}") from exc

    values = {key: _decode_value(key, value) for key, value in payload["values"].items()}
    return SessionRecord(deadline=deadline, values=values)
