# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Scan engine: sitemap discovery, sampling, probing and aggregation for one site."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable

from ..config import HttpSettings, RunConfig, load_http_settings
from ..discovery.sampling import default_seed, sample_urls
from ..discovery.sitemap import SitemapResolver
from ..errors import NoUrlsDiscovered
from ..http.client import HttpClient
from ..log import TraceLog
from ..models import ScanReport, select_variants
from .aggregate import aggregate_results
from .progress import ProgressCallback
from .queue import build_queue
from .scheduler import ProbeScheduler

logger = logging.getLogger(__name__)


class ScanEngine:
    """Runs one RunConfig end to end. Setup failures raise before any probe is sent."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        settings: HttpSettings | None = None,
        trace: TraceLog | None = None,
        verbose: bool = False,
        trace_requests: bool = False,
        on_progress: ProgressCallback | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.http_client = http_client
        self.settings = settings or load_http_settings()
        self.trace = trace or TraceLog()
        self.verbose = verbose
        self.trace_requests = trace_requests
        self.on_progress = on_progress
        self.rng = rng
        self.sleep = sleep
        self.resolver = SitemapResolver(http_client, settings=self.settings, trace=self.trace)

    def build_scheduler(self, config: RunConfig) -> ProbeScheduler:
        return ProbeScheduler(
            self.http_client,
            method=config.method,
            concurrency=config.concurrency,
            delay_ms=config.delay_ms,
            passes=config.passes,
            settings=self.settings,
            trace=self.trace,
            verbose=self.verbose,
            trace_requests=self.trace_requests,
            on_progress=self.on_progress,
            rng=self.rng,
            sleep=self.sleep,
        )

    def run(self, config: RunConfig) -> ScanReport:
        started_at = time.time()
        start = time.perf_counter()

        discovery = self.resolver.resolve(config.site)
        if not discovery.urls:
            raise NoUrlsDiscovered("No URLs found in sitemap.")

        if config.seed is None:
            config = config.with_seed(default_seed())
        sample = sample_urls(discovery.urls, config.limit, config.seed)
        if not sample:
            raise NoUrlsDiscovered("No URLs left after sampling.")

        variants = select_variants(config.variant)
        queue = build_queue(sample, variants, config.passes)
        self.trace.echo(
            f"URLs sampled: {len(sample)} (from sitemap: {len(discovery.urls)}). "
            f"Requests: {len(queue)} ({config.variant}, {config.passes} passes). Seed: {config.seed}",
            log=logger,
        )

        results = self.build_scheduler(config).run(queue)
        summary = aggregate_results(
            results,
            passes=config.passes,
            sample_urls=sample,
            expect_nocache=config.expect_nocache,
        )

        return ScanReport(
            config=config,
            sitemap_url=discovery.sitemap_url,
            discovered_count=len(discovery.urls),
            sample=sample,
            results=results,
            summary=summary,
            warnings=list(discovery.warnings),
            started_at=started_at,
            duration_seconds=time.perf_counter() - start,
        )
