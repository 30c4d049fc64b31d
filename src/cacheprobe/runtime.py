# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level CacheProbe facade."""

from __future__ import annotations

from contextlib import suppress

from .config import HttpSettings, RunConfig, load_http_settings
from .discovery.sitemap import SitemapDiscovery
from .http.client import HttpClient, create_default_http_client
from .log import TraceLog
from .models import ScanReport
from .scan.engine import ScanEngine
from .scan.progress import ProgressCallback


class CacheProbe:
    """
    Convenience wrapper that wires one HTTP client and one trace sink across a run.

    The client is shared by sitemap discovery and probing so both see the same TLS and
    redirect settings.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        settings: HttpSettings | None = None,
        trace: TraceLog | None = None,
        verbose: bool = False,
        trace_requests: bool = False,
        on_progress: ProgressCallback | None = None,
    ):
        self.http_settings = settings or load_http_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings)
        self.trace = trace or TraceLog()
        self.scan_engine = ScanEngine(
            self.http_client,
            settings=self.http_settings,
            trace=self.trace,
            verbose=verbose,
            trace_requests=trace_requests,
            on_progress=on_progress,
        )

    def discover(self, site: str) -> SitemapDiscovery:
        return self.scan_engine.resolver.resolve(site)

    def scan(self, config: RunConfig) -> ScanReport:
        return self.scan_engine.run(config)

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> CacheProbe:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
