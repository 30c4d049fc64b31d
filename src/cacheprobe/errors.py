# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from enum import Enum

import httpx


class CacheProbeError(Exception):
    """Base class for errors that abort a probing run."""


class ConfigError(CacheProbeError):
    """Invalid run configuration."""


class SitemapNotFound(CacheProbeError):
    """None of the sitemap candidates answered with a success status."""


class SitemapFetchFailed(CacheProbeError):
    """The top-level sitemap could not be downloaded."""


class SitemapParseFailed(CacheProbeError):
    """The top-level sitemap yielded no `<loc>` entries, even via the fallback scan."""


class NoUrlsDiscovered(CacheProbeError):
    """Discovery (or sampling) left nothing to probe."""


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


def _chain(exc: BaseException) -> list[BaseException]:
    seen: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in seen:
        seen.append(current)
        current = current.__cause__ or current.__context__
    return seen


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    httpx wraps the underlying socket/ssl errors, so the cause chain is inspected too.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, httpx.TooManyRedirects):
        return ErrorCategory.TOO_MANY_REDIRECTS

    for item in _chain(exc):
        if isinstance(item, (ssl.SSLError, ssl.CertificateError)):
            return ErrorCategory.SSL_ERROR
        if isinstance(item, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR

    message = str(exc).lower()
    if "certificate" in message or "ssl" in message:
        return ErrorCategory.SSL_ERROR
    if "name or service not known" in message or "nodename nor servname" in message or "getaddrinfo" in message:
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | str | None) -> str:
    """User-facing reason string; accepts the enum or its stored string value."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout during probe",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.TOO_MANY_REDIRECTS: "Redirect limit exceeded",
        ErrorCategory.UNKNOWN_ERROR: "Network error during probe",
        None: "",
    }
    return mapping.get(category, "Probe failed due to network error")


__all__ = [
    "CacheProbeError",
    "ConfigError",
    "ErrorCategory",
    "NoUrlsDiscovered",
    "SitemapFetchFailed",
    "SitemapNotFound",
    "SitemapParseFailed",
    "categorize_exception",
    "error_category_to_reason",
]
