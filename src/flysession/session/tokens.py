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
"""Session token generation."""

from __future__ import annotations

import secrets

TOKEN_BYTES = 32
"""Random bytes per token (256 bits of entropy)."""


def generate_token() -> str:
    """Generate an unguessable session token.

    Returns:
        A URL-safe base64-encoded random string (43 characters).
    """
    return secrets.token_urlsafe(TOKEN_BYTES)
