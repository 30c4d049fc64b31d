# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
CacheProbe package entrypoint.

CacheProbe audits how a site's page cache behaves under repeated requests: it samples
URLs from the sitemap, probes each one several times per device profile, and classifies
the cache headers of every response. HTTP behavior is abstracted behind an injectable
client interface, and domain objects are modeled with typed dataclasses.
"""

from .classify import cache_status_from_headers, classify_headers, is_expected_no_cache, status_class
from .config import HttpSettings, RunConfig, load_http_settings
from .discovery import SitemapResolver, sample_urls
from .errors import (
    CacheProbeError,
    NoUrlsDiscovered,
    SitemapFetchFailed,
    SitemapNotFound,
    SitemapParseFailed,
)
from .http import HttpClient, HttpRequest, HttpResponse, HttpxClient, create_default_http_client
from .log import TraceLog, setup_logging
from .models import CacheClass, ProbeResult, ProbeTask, ScanReport, ScanSummary, Variant
from .runtime import CacheProbe
from .scan import ProbeScheduler, ScanEngine, aggregate_results, build_queue
from .version import __version__

__all__ = [
    "CacheClass",
    "CacheProbe",
    "CacheProbeError",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "NoUrlsDiscovered",
    "ProbeResult",
    "ProbeScheduler",
    "ProbeTask",
    "RunConfig",
    "ScanEngine",
    "ScanReport",
    "ScanSummary",
    "SitemapFetchFailed",
    "SitemapNotFound",
    "SitemapParseFailed",
    "SitemapResolver",
    "TraceLog",
    "Variant",
    "aggregate_results",
    "build_queue",
    "cache_status_from_headers",
    "classify_headers",
    "create_default_http_client",
    "is_expected_no_cache",
    "load_http_settings",
    "sample_urls",
    "setup_logging",
    "status_class",
    "__version__",
]
