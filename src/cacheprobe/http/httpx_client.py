# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import logging
import time

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import categorize_exception
from .client import HttpClient
from .headers import format_header_block
from .models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


def _raw_header_block(resp: httpx.Response) -> str:
    blocks = []
    for hop in [*resp.history, resp]:
        status_line = f"{hop.http_version} {hop.status_code} {hop.reason_phrase}".strip()
        items = [(key.decode("latin-1"), value.decode("latin-1")) for key, value in hop.headers.raw]
        blocks.append(format_header_block(status_line, items))
    return "".join(blocks)


class HttpxClient(HttpClient):
    """Synchronous httpx client wrapper; one shared connection pool, safe across threads."""

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(
            follow_redirects=True,
            max_redirects=self.settings.max_redirects,
            timeout=httpx.Timeout(self.settings.timeout, connect=self.settings.connect_timeout),
            verify=self.settings.verify_ssl,
        )

    def _timeout(self, request: HttpRequest) -> httpx.Timeout:
        total = request.timeout if request.timeout is not None else self.settings.timeout
        return httpx.Timeout(total, connect=min(self.settings.connect_timeout, total))

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)
        method = request.method.upper()

        start = time.perf_counter()
        try:
            max_body_bytes = self.settings.max_body_bytes
            if max_body_bytes <= 0:
                max_body_bytes = 16 * 1024 * 1024

            with self._client.stream(
                method,
                request.url,
                headers=headers,
                timeout=self._timeout(request),
                follow_redirects=request.allow_redirects,
            ) as resp:
                content = bytearray()
                truncated = False
                if method != "HEAD":
                    for chunk in resp.iter_bytes():
                        if not chunk:
                            continue
                        remaining = max_body_bytes - len(content)
                        if remaining <= 0:
                            truncated = True
                            break
                        if len(chunk) > remaining:
                            content.extend(chunk[:remaining])
                            truncated = True
                            break
                        content.extend(chunk)

                encoding = resp.encoding or "utf-8"
                try:
                    text = bytes(content).decode(encoding, errors="replace")
                except LookupError:
                    text = bytes(content).decode("utf-8", errors="replace")

            if truncated:
                logger.warning("Response body truncated at %d bytes: %s", max_body_bytes, request.url)
            elapsed_ms = int(round((time.perf_counter() - start) * 1000))
            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                headers=dict(resp.headers),
                raw_headers=_raw_header_block(resp),
                text=text,
                content=bytes(content),
                url=str(resp.url),
                elapsed_ms=elapsed_ms,
            )
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                url=request.url,
                elapsed_ms=int(round((time.perf_counter() - start) * 1000)),
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                error_category=categorize_exception(exc).value,
            )

    def close(self) -> None:
        self._client.close()
