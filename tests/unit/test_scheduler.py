# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io
import random
import threading
import time

from cacheprobe.http import HttpRequest, StubHttpClient, make_error, make_response
from cacheprobe.log import TraceLog
from cacheprobe.models import DESKTOP, MOBILE, CacheClass, ProbeTask
from cacheprobe.scan import ProbeScheduler, build_queue
from cacheprobe.scan.scheduler import build_result, trace_header_lines


class ConcurrencyProbe:
    """HttpClient that records the peak number of requests in flight."""

    def __init__(self, delay: float = 0.005):
        self.delay = delay
        self.lock = threading.Lock()
        self.current = 0
        self.peak = 0
        self.calls = 0

    def request(self, request: HttpRequest):
        with self.lock:
            self.current += 1
            self.calls += 1
            self.peak = max(self.peak, self.current)
        time.sleep(self.delay)
        with self.lock:
            self.current -= 1
        return make_response(200, headers={"X-LiteSpeed-Cache": "hit"}, url=request.url)

    def close(self) -> None:
        pass


def _scheduler(client, **kwargs) -> ProbeScheduler:
    kwargs.setdefault("delay_ms", 0)
    kwargs.setdefault("sleep", lambda _: None)
    return ProbeScheduler(client, **kwargs)


def test_concurrency_bound_and_each_task_once():
    urls = [f"https://shop.test/{i}" for i in range(37)]
    queue = build_queue(urls, [DESKTOP], 1)
    client = ConcurrencyProbe()

    results = _scheduler(client, concurrency=5).run(queue)

    assert len(results) == 37
    assert sorted(result.task_index for result in results) == list(range(37))
    assert client.calls == 37
    assert 1 <= client.peak <= 5


def test_sequential_runs_in_queue_order():
    queue = build_queue(["https://shop.test/a", "https://shop.test/b"], [DESKTOP, MOBILE], 2)
    stub = StubHttpClient()
    for url in ("https://shop.test/a", "https://shop.test/b"):
        stub.add(url, make_response(200, headers={"X-LiteSpeed-Cache": "no-cache", "Cache-Control": "no-cache"}))

    results = _scheduler(stub, concurrency=1).run(queue)

    assert [result.task_index for result in results] == list(range(8))
    assert all(result.cache_class == CacheClass.BYPASS for result in results)
    assert stub.requests[0].headers["User-Agent"] == DESKTOP.user_agent
    assert stub.requests[2].headers["User-Agent"] == MOBILE.user_agent
    assert stub.requests[0].method == "GET"


def test_head_method_and_empty_queue():
    stub = StubHttpClient({"https://shop.test/": make_response(200)})
    scheduler = _scheduler(stub, method="head")
    assert scheduler.run([]) == []

    scheduler.run(build_queue(["https://shop.test/"], [DESKTOP], 1))
    assert stub.requests[0].method == "HEAD"
    assert stub.requests[0].headers["Accept"] == "*/*"


def test_jitter_within_bounds():
    sleeps = []
    stub = StubHttpClient({"https://shop.test/": make_response(200)})
    scheduler = ProbeScheduler(stub, delay_ms=1000, rng=random.Random(7), sleep=sleeps.append)

    scheduler.run(build_queue(["https://shop.test/"], [DESKTOP, MOBILE], 3))

    assert len(sleeps) == 6
    assert all(1.0 <= value <= 1.3 for value in sleeps)


def test_zero_delay_never_sleeps():
    sleeps = []
    stub = StubHttpClient({"https://shop.test/": make_response(200)})
    ProbeScheduler(stub, delay_ms=0, sleep=sleeps.append).run(build_queue(["https://shop.test/"], [DESKTOP], 2))
    assert sleeps == []


def test_errors_are_recorded_not_retried():
    stub = StubHttpClient({"https://down.test/": make_error("connection refused", url="https://down.test/")})

    results = _scheduler(stub).run(build_queue(["https://down.test/"], [DESKTOP], 2))

    assert len(stub.requests) == 2
    assert all(result.is_error for result in results)
    assert results[0].cache_status == "error"
    assert results[0].cache_class == CacheClass.NA
    assert results[0].http_status is None
    assert results[0].error == "connection refused"


def test_client_exceptions_become_error_results():
    class Exploding:
        def request(self, request):  # noqa: ARG002
            raise RuntimeError("kaboom")

        def close(self):
            pass

    results = _scheduler(Exploding(), concurrency=3).run(build_queue(["https://x.test/"], [DESKTOP, MOBILE], 2))

    assert len(results) == 4
    assert {result.error for result in results} == {"kaboom"}


def test_build_result_classifies_headers():
    task = ProbeTask(url="https://shop.test/", variant=DESKTOP, pass_number=2, index=5)
    response = make_response(
        200,
        headers={"CF-Cache-Status": "HIT", "X-LiteSpeed-Cache": "miss", "Server": "cloudflare"},
        url="https://shop.test/",
    )

    result = build_result(task, response)

    assert result.variant == "desktop"
    assert result.pass_number == 2
    assert result.task_index == 5
    assert result.http_status == 200
    assert result.cache_status == "miss"
    assert result.cache_class == CacheClass.MISS
    assert result.origin_unverifiable is True
    assert result.server == "cloudflare"
    assert result.to_dict()["cache_class"] == "miss"


def test_progress_callback_and_verbose_trace_lines():
    stream = io.StringIO()
    progress = []
    stub = StubHttpClient(
        {
            "https://shop.test/": make_response(
                200,
                headers={"X-LiteSpeed-Cache": "hit", "Set-Cookie": "a=b"},
                url="https://shop.test/home",
            )
        }
    )
    scheduler = _scheduler(
        stub,
        passes=1,
        trace=TraceLog(stream=stream),
        verbose=True,
        trace_requests=True,
        on_progress=lambda processed, total, pct: progress.append((processed, total, pct)),
    )

    scheduler.run(build_queue(["https://shop.test/"], [DESKTOP], 1))
    lines = stream.getvalue().splitlines()

    assert progress == [(1, 1, 100)]
    assert "Progress: 1/1 (100%)" in lines
    assert "[DESKTOP] Pass 1/1: https://shop.test/ | HTTP 200 | hit | 0ms" in lines
    assert any(line.startswith(">> GET https://shop.test/ [DESKTOP] UA=") for line in lines)
    assert "<< Effective-URL: https://shop.test/home" in lines
    assert "<< HTTP/1.1 200" in lines
    assert "<< X-LiteSpeed-Cache: hit" in lines
    assert not any("Set-Cookie" in line for line in lines)


def test_trace_header_lines_filters_to_cache_headers():
    raw = "HTTP/1.1 301 Moved\r\nLocation: /b\r\nX-Other: 1\r\n\r\nHTTP/1.1 200 OK\r\nAge: 3\r\n\r\n"
    assert trace_header_lines(raw) == ["HTTP/1.1 301 Moved", "Location: /b", "HTTP/1.1 200 OK", "Age: 3"]
