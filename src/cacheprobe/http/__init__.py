# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import StubHttpClient, make_error, make_response
from .client import HttpClient, create_default_http_client
from .headers import header_value, headers_to_block, iter_header_lines, normalize_headers, status_lines
from .httpx_client import HttpxClient
from .models import Headers, HttpRequest, HttpResponse
from .url import build_sitemap_candidates, same_site_host, url_host

__all__ = [
    "Headers",
    "HttpClient",
    "HttpxClient",
    "HttpRequest",
    "HttpResponse",
    "StubHttpClient",
    "build_sitemap_candidates",
    "create_default_http_client",
    "header_value",
    "headers_to_block",
    "iter_header_lines",
    "make_error",
    "make_response",
    "normalize_headers",
    "same_site_host",
    "status_lines",
    "url_host",
]
