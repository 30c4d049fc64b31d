# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io
import json
import logging

import httpx
import pytest

from cacheprobe.cli import main as cli
from cacheprobe.config import HttpSettings, RunConfig
from cacheprobe.errors import ErrorCategory, NoUrlsDiscovered, SitemapNotFound
from cacheprobe.http import HttpResponse, HttpxClient, StubHttpClient, make_response
from cacheprobe.log import TraceLog
from cacheprobe.models import CacheClass
from cacheprobe.report import render_html_report
from cacheprobe.runtime import CacheProbe

SITE = "https://shop.test"


def urlset_of(*urls: str) -> str:
    entries = "".join(f"<url><loc>{url}</loc></url>" for url in urls)
    return f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'


def site_stub() -> StubHttpClient:
    stub = StubHttpClient()
    stub.add(f"{SITE}/sitemap.xml", make_response(200), method="HEAD")
    stub.add(
        f"{SITE}/sitemap.xml",
        make_response(200, text=urlset_of(f"{SITE}/", f"{SITE}/cart/", f"{SITE}/&lt;b&gt;")),
        method="GET",
    )
    stub.add(f"{SITE}/", make_response(200, headers={"X-LiteSpeed-Cache": "hit", "Server": "LiteSpeed"}))
    stub.add(f"{SITE}/cart/", make_response(200, headers={"X-LiteSpeed-Cache": "no-cache", "Cache-Control": "no-cache"}))
    stub.add(
        f"{SITE}/<b>",
        HttpResponse(ok=False, error_message="timed out", error_type="ReadTimeout", error_category=ErrorCategory.TIMEOUT.value),
    )
    return stub


def test_runtime_scan_end_to_end():
    stub = site_stub()
    config = RunConfig.create(SITE, limit=3, variant="desktop", passes=1, delay_ms=0, expect_nocache="woocommerce")

    with CacheProbe(stub) as probe:
        report = probe.scan(config)

    assert stub.closed is True
    assert report.sitemap_url == f"{SITE}/sitemap.xml"
    assert report.discovered_count == 3
    assert report.sample == [f"{SITE}/", f"{SITE}/cart/", f"{SITE}/<b>"]
    assert report.config.seed is not None
    assert report.request_count == 3
    assert all((r.variant, r.pass_number) == ("desktop", 1) for r in report.results)

    stats = report.summary.stats["desktop"]
    assert (stats.hit, stats.bypass, stats.error) == (1, 1, 1)
    assert (stats.expected_total, stats.expected_problem) == (1, 0)
    assert (stats.public_total, stats.public_problem) == (2, 1)
    assert report.summary.final_result(f"{SITE}/", "desktop").cache_class == CacheClass.HIT

    probe_requests = [req for req in stub.requests if "sitemap" not in req.url]
    assert len(probe_requests) == 3
    assert all(req.method == "GET" for req in probe_requests)


def test_runtime_discover_and_missing_urls():
    stub = StubHttpClient()
    stub.add(f"{SITE}/wp-sitemap.xml", make_response(200), method="HEAD")
    stub.add(f"{SITE}/wp-sitemap.xml", make_response(200, text=urlset_of("https://elsewhere.test/")), method="GET")
    probe = CacheProbe(stub)

    assert probe.discover(SITE).urls == []
    with pytest.raises(NoUrlsDiscovered):
        probe.scan(RunConfig.create(SITE, delay_ms=0))
    probe.close()


def test_runtime_writes_transcript_to_trace():
    stream = io.StringIO()
    config = RunConfig.create(SITE, limit=1, variant="mobile", passes=2, delay_ms=0, seed="fixed")

    CacheProbe(site_stub(), trace=TraceLog(stream=stream), verbose=True).scan(config)
    text = stream.getvalue()

    assert f"Sitemap: {SITE}/sitemap.xml" in text
    assert "Seed: fixed" in text
    assert "Progress: 2/2 (100%)" in text
    assert "[MOBILE] Pass 2/2:" in text


def test_html_report_renders_and_escapes():
    config = RunConfig.create(SITE, limit=3, variant="both", passes=2, delay_ms=0, seed="s", expect_nocache="woocommerce")
    report = CacheProbe(site_stub()).scan(config)

    page = render_html_report(report, generated_at=0)

    assert "<title>Cache Probe - https://shop.test</title>" in page
    assert "DESKTOP P2 status" in page
    assert "MOBILE HTTP" in page
    assert "&lt;b&gt;" in page
    assert f"{SITE}/<b>" not in page
    assert "Expected no-cache URLs checked" in page
    assert 'title="Network timeout during probe: timed out"' in page


def test_cli_success_writes_report_and_trace(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(cli, "create_default_http_client", lambda settings=None: site_stub())
    output = tmp_path / "report.html"
    trace_log = tmp_path / "trace.log"

    rc = cli.main(
        [
            "--site",
            "shop.test",
            "--limit",
            "2",
            "--variant",
            "DESKTOP",
            "--passes",
            "1",
            "--delay-ms",
            "0",
            "--seed",
            "abc",
            "--output",
            str(output),
            "--trace-log",
            str(trace_log),
            "--json",
        ]
    )

    assert rc == 0
    assert output.read_text(encoding="utf-8").startswith("<!doctype html>")
    log_text = trace_log.read_text(encoding="utf-8")
    assert f"Trace log: {trace_log}" in log_text
    assert f"HTML report saved: {output}" in log_text
    assert "Requests sent: 2" in log_text
    assert "Average time per request:" in log_text

    payload = json.loads(capsys.readouterr().out)
    assert payload["config"]["seed"] == "abc"
    assert payload["config"]["variant"] == "desktop"
    assert payload["summary"]["final_pass"] == 1
    assert len(payload["sample"]) == 2


def test_cli_reports_setup_failure(tmp_path, monkeypatch):
    class FailingProbe:
        def __init__(self, *args, **kwargs):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return None

        def scan(self, config):
            raise SitemapNotFound(f"Could not find sitemap for site: {config.site}")

    monkeypatch.setattr(cli, "CacheProbe", FailingProbe)
    monkeypatch.setattr(cli, "create_default_http_client", lambda settings=None: StubHttpClient())
    output = tmp_path / "report.html"
    trace_log = tmp_path / "trace.log"

    rc = cli.main(["--site", SITE, "--output", str(output), "--trace-log", str(trace_log)])

    assert rc == 1
    assert not output.exists()
    assert "Error: Could not find sitemap for site: https://shop.test" in trace_log.read_text(encoding="utf-8")


def test_cli_rejects_invalid_choice(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--site", SITE, "--variant", "tablet"])
    assert excinfo.value.code == 2
    assert "invalid choice" in capsys.readouterr().err


def test_default_paths_use_timestamp():
    name = cli._default_path("html", 0)
    assert name.startswith("cache-probe-")
    assert name.endswith(".html")
    assert cli._format_duration(75.5) == "1m 15.50s (75.50 seconds total)"


def test_cli_keeps_http_library_logging_quiet(tmp_path, monkeypatch, caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/wp-sitemap.xml":
            return httpx.Response(200, text=urlset_of(f"{SITE}/a", f"{SITE}/b"))
        return httpx.Response(200, headers={"X-LiteSpeed-Cache": "hit"})

    def client_factory(settings=None):
        transport = httpx.MockTransport(handler)
        return HttpxClient(settings or HttpSettings(), client=httpx.Client(transport=transport, follow_redirects=True))

    monkeypatch.setattr(cli, "create_default_http_client", client_factory)
    caplog.set_level(logging.DEBUG)

    rc = cli.main(
        [
            "--site",
            SITE,
            "--variant",
            "desktop",
            "--passes",
            "1",
            "--delay-ms",
            "0",
            "--verbose",
            "--output",
            str(tmp_path / "report.html"),
            "--trace-log",
            str(tmp_path / "trace.log"),
        ]
    )

    assert rc == 0
    assert "Progress: 2/2 (100%)" in caplog.text
    assert not [record for record in caplog.records if record.name.startswith(("httpx", "httpcore"))]
