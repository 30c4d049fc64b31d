# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded-concurrency probe scheduler.

Every task in the queue is dispatched exactly once and yields exactly one ProbeResult.
Transport failures are recorded on the result and never retried.

With `concurrency == 1` tasks run one at a time in queue order. Otherwise a sliding
window of at most `concurrency` requests runs on a thread pool: the window is seeded
with the first tasks, and every completion is immediately replaced by the next queued
task. Each dispatch is preceded by a jittered pause of
`delay_ms + randint(0, floor(delay_ms * 0.3))` milliseconds.

Results, progress and trace output are handled only on the dispatching thread.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from ..classify.cache_status import STATUS_ERROR, classify_headers
from ..config import HttpSettings, load_http_settings
from ..errors import categorize_exception
from ..http.client import HttpClient
from ..http.headers import iter_header_lines, status_lines
from ..http.models import HttpRequest, HttpResponse
from ..log import TraceLog
from ..models.probe import CacheClass, ProbeResult, ProbeTask
from .progress import ProgressCallback, ProgressTracker

logger = logging.getLogger(__name__)

JITTER_RATIO = 0.3
TRACE_HEADERS: tuple[str, ...] = (
    "server",
    "cf-cache-status",
    "x-litespeed-cache",
    "x-litespeed-cache-control",
    "cache-control",
    "vary",
    "age",
    "location",
    "content-type",
)


def _short(value: str, limit: int = 80) -> str:
    return value if len(value) <= limit else value[: limit - 3] + "..."


def trace_header_lines(raw_headers: str) -> list[str]:
    """Status lines plus the cache-relevant headers of a raw block, in wire order."""
    statuses = set(status_lines(raw_headers))
    lines: list[str] = []
    for line in (raw_headers or "").splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped in statuses:
            lines.append(stripped)
            continue
        for name, _value in iter_header_lines(stripped):
            if name in TRACE_HEADERS:
                lines.append(stripped)
    return lines


def build_result(task: ProbeTask, response: HttpResponse) -> ProbeResult:
    """Turn a transport response into the ProbeResult for `task`."""
    if not response.ok:
        return ProbeResult(
            url=task.url,
            variant=task.variant.name,
            pass_number=task.pass_number,
            task_index=task.index,
            http_status=response.status_code,
            elapsed_ms=response.elapsed_ms,
            cache_status=STATUS_ERROR,
            cache_class=CacheClass.NA,
            effective_url=response.url,
            error=response.error_message or response.error_type or "request failed",
            error_category=response.error_category,
        )

    classification = classify_headers(response.raw_headers)
    return ProbeResult(
        url=task.url,
        variant=task.variant.name,
        pass_number=task.pass_number,
        task_index=task.index,
        http_status=response.status_code,
        elapsed_ms=response.elapsed_ms,
        cache_status=classification.cache_status,
        cache_class=classification.cache_class,
        server=classification.server,
        cf_cache_status=classification.cf_cache_status,
        origin_unverifiable=classification.origin_unverifiable,
        vary=classification.vary,
        x_litespeed_cache_control=classification.x_litespeed_cache_control,
        cache_control=classification.cache_control,
        age=classification.age,
        effective_url=response.url,
    )


class ProbeScheduler:
    """Runs a probe queue against an HttpClient under a concurrency bound."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        method: str = "get",
        concurrency: int = 1,
        delay_ms: int = 500,
        passes: int | None = None,
        settings: HttpSettings | None = None,
        trace: TraceLog | None = None,
        verbose: bool = False,
        trace_requests: bool = False,
        on_progress: ProgressCallback | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.http_client = http_client
        self.method = method.lower()
        self.concurrency = max(1, concurrency)
        self.delay_ms = max(0, delay_ms)
        self.passes = passes
        self.settings = settings or load_http_settings()
        self.trace = trace or TraceLog()
        self.verbose = verbose
        self.trace_requests = trace_requests
        self.on_progress = on_progress
        self.rng = rng or random.Random()
        self.sleep = sleep
        self._progress = ProgressTracker(0)

    def build_request(self, task: ProbeTask) -> HttpRequest:
        return HttpRequest(
            url=task.url,
            method="HEAD" if self.method == "head" else "GET",
            headers={"Accept": "*/*", "User-Agent": task.variant.user_agent},
            timeout=self.settings.timeout,
            allow_redirects=True,
        )

    def pause(self) -> None:
        """Sleep for the jittered pre-dispatch delay (no-op when delay_ms is 0)."""
        if self.delay_ms <= 0:
            return
        jitter = self.rng.randint(0, int(self.delay_ms * JITTER_RATIO))
        self.sleep((self.delay_ms + jitter) / 1000)

    def execute(self, task: ProbeTask) -> tuple[ProbeResult, HttpResponse]:
        """Issue one request and classify it. Never raises for transport failures."""
        request = self.build_request(task)
        start = time.perf_counter()
        try:
            response = self.http_client.request(request)
        except Exception as exc:  # noqa: BLE001
            response = HttpResponse(
                ok=False,
                url=task.url,
                elapsed_ms=int(round((time.perf_counter() - start) * 1000)),
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                error_category=categorize_exception(exc).value,
            )
        return build_result(task, response), response

    def run(self, queue: Sequence[ProbeTask]) -> list[ProbeResult]:
        self._progress = ProgressTracker(len(queue))
        if not queue:
            return []
        if self.concurrency <= 1:
            return self._run_sequential(queue)
        return self._run_concurrent(queue)

    def _run_sequential(self, queue: Sequence[ProbeTask]) -> list[ProbeResult]:
        results: list[ProbeResult] = []
        for task in queue:
            self.pause()
            result, response = self.execute(task)
            self._complete(task, result, response, results)
        return results

    def _run_concurrent(self, queue: Sequence[ProbeTask]) -> list[ProbeResult]:
        results: list[ProbeResult] = []
        total = len(queue)
        in_flight: dict[Future[tuple[ProbeResult, HttpResponse]], ProbeTask] = {}
        next_index = 0

        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="cacheprobe") as executor:

            def launch() -> None:
                nonlocal next_index
                task = queue[next_index]
                next_index += 1
                self.pause()
                in_flight[executor.submit(self.execute, task)] = task

            while next_index < min(self.concurrency, total):
                launch()

            while in_flight:
                done, _pending = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    task = in_flight.pop(future)
                    result, response = future.result()
                    self._complete(task, result, response, results)
                    if next_index < total:
                        launch()

        return results

    def _complete(self, task: ProbeTask, result: ProbeResult, response: HttpResponse, results: list[ProbeResult]) -> None:
        results.append(result)

        pct = self._progress.advance()
        if pct is not None:
            processed, total = self._progress.processed, self._progress.total
            self.trace.echo(f"Progress: {processed}/{total} ({pct}%)", log=logger)
            if self.on_progress is not None:
                self.on_progress(processed, total, pct)

        if self.verbose:
            self.trace.echo(self._summary_line(task, result), log=logger)

        if self.trace_requests:
            self.trace.echo(
                f'>> {self.method.upper()} {task.url} [{task.variant.name.upper()}] UA="{_short(task.variant.user_agent)}"',
                log=logger,
            )
            if result.effective_url and result.effective_url != task.url:
                self.trace.echo(f"<< Effective-URL: {result.effective_url}", log=logger)
            for line in trace_header_lines(response.raw_headers):
                self.trace.echo(f"<< {line}", log=logger)

    def _summary_line(self, task: ProbeTask, result: ProbeResult) -> str:
        passes = self.passes if self.passes is not None else task.pass_number
        http = result.http_status if result.http_status is not None else "-"
        cf_note = " [CF-HIT: origin unverifiable]" if result.origin_unverifiable else ""
        return (
            f"[{task.variant.name.upper()}] Pass {task.pass_number}/{passes}: {task.url} | HTTP {http} | "
            f"{result.cache_status} | {result.elapsed_ms}ms{cf_note}"
        )


__all__ = ["JITTER_RATIO", "ProbeScheduler", "TRACE_HEADERS", "build_result", "trace_header_lines"]
