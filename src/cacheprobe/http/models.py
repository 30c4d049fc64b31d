# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across CacheProbe."""

from __future__ import annotations

from dataclasses import dataclass, field

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    timeout: float | None = None
    allow_redirects: bool = True


@dataclass
class HttpResponse:
    """
    Normalized HTTP response.

    `raw_headers` holds the header block of every hop (status line, then `Name: value`
    lines, blank line between hops) so lookups that let the last occurrence win see the
    final response's headers. `headers` is the final hop only, keyed lowercase.
    """

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    raw_headers: str = ""
    text: str = ""
    content: bytes = b""
    url: str | None = None
    elapsed_ms: int = 0
    error_message: str | None = None
    error_type: str | None = None
    error_category: str | None = None

    @property
    def is_success(self) -> bool:
        return self.ok and self.status_code is not None and 200 <= self.status_code < 300
