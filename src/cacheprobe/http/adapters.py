# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process HttpClient implementations."""

from __future__ import annotations

import threading
from collections.abc import Callable

from .client import HttpClient
from .headers import headers_to_block, normalize_headers
from .models import HttpRequest, HttpResponse

Responder = Callable[[HttpRequest], HttpResponse]


def make_response(
    status_code: int = 200,
    *,
    headers: dict[str, str] | None = None,
    text: str = "",
    url: str | None = None,
    elapsed_ms: int = 0,
) -> HttpResponse:
    """Build a successful HttpResponse whose raw header block mirrors `headers`."""
    return HttpResponse(
        ok=True,
        status_code=status_code,
        headers=normalize_headers(headers),
        raw_headers=headers_to_block(headers, f"HTTP/1.1 {status_code}"),
        text=text,
        content=text.encode("utf-8"),
        url=url,
        elapsed_ms=elapsed_ms,
    )


def make_error(message: str, *, error_type: str = "ConnectError", url: str | None = None) -> HttpResponse:
    """Build a transport-failure HttpResponse."""
    return HttpResponse(ok=False, url=url, error_message=message, error_type=error_type)


class StubHttpClient(HttpClient):
    """
    Deterministic, programmable HttpClient for tests.

    Responses are looked up by `(METHOD, url)` first, then by `url`. A value may be an
    HttpResponse or a callable taking the HttpRequest.
    """

    def __init__(self, responses: dict[object, HttpResponse | Responder] | None = None):
        self._responses: dict[object, HttpResponse | Responder] = dict(responses or {})
        self._lock = threading.Lock()
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: HttpResponse | Responder, *, method: str | None = None) -> None:
        key: object = (method.upper(), url) if method else url
        self._responses[key] = response

    def request(self, request: HttpRequest) -> HttpResponse:
        with self._lock:
            self.requests.append(request)
        entry = self._responses.get((request.method.upper(), request.url))
        if entry is None:
            entry = self._responses.get(request.url)
        if entry is None:
            return HttpResponse(ok=False, status_code=None, url=request.url, error_message="No stubbed response configured")
        if callable(entry):
            return entry(request)
        return entry

    def close(self) -> None:
        self.closed = True


__all__ = ["StubHttpClient", "make_error", "make_response"]
