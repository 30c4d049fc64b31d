# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""CacheProbe CLI."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from typing import Any

from ..config import EXPECT_NOCACHE_MODES, METHODS, VARIANT_SELECTIONS, RunConfig, load_http_settings
from ..errors import CacheProbeError
from ..http import create_default_http_client
from ..log import TraceLog, setup_logging
from ..models import ScanReport
from ..report import write_html_report
from ..runtime import CacheProbe

logger = logging.getLogger("cacheprobe.cli")


def _lower(value: str) -> str:
    return value.strip().lower()


def _positive_int(value: str) -> int:
    try:
        return max(1, int(value))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc


def _non_negative_int(value: str) -> int:
    try:
        return max(0, int(value))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cacheprobe",
        description="Probe a site's page cache: sample sitemap URLs, request them repeatedly and classify cache headers",
    )
    parser.add_argument("--site", required=True, help="Site to probe, e.g. https://example.com")
    parser.add_argument("--limit", type=_positive_int, default=10, help="Number of sitemap URLs to sample (default: 10)")
    parser.add_argument("--variant", type=_lower, choices=VARIANT_SELECTIONS, default="both", help="Device profile(s) to probe with")
    parser.add_argument("--method", type=_lower, choices=METHODS, default="get", help="HTTP method for probes")
    parser.add_argument("--passes", type=_positive_int, default=2, help="Requests per URL and variant (default: 2)")
    parser.add_argument("--concurrency", type=_positive_int, default=1, help="Maximum requests in flight (default: 1)")
    parser.add_argument("--delay-ms", type=_non_negative_int, default=500, help="Pause before each request, plus up to 30%% jitter")
    parser.add_argument("--seed", default=None, help="Sampling seed; defaults to the current time and is printed for reuse")
    parser.add_argument(
        "--expect-nocache",
        type=_lower,
        choices=EXPECT_NOCACHE_MODES,
        default="none",
        help="Treat shop/account URLs as intentionally uncached",
    )
    parser.add_argument("--output", default=None, help="HTML report path (default: cache-probe-<timestamp>.html)")
    parser.add_argument("--trace-log", default=None, help="Trace log path (default: cache-probe-<timestamp>.log)")
    parser.add_argument("--verbose", action="store_true", help="Print one line per probe result")
    parser.add_argument("--trace", action="store_true", help="Print request/response header traces")
    parser.add_argument("--json", action="store_true", help="Also print the run summary as JSON on stdout")
    return parser


def _default_path(extension: str, now: float | None = None) -> str:
    stamp = time.strftime("%Y-%m-%d_%H-%M-%S", time.localtime(now if now is not None else time.time()))
    return f"cache-probe-{stamp}.{extension}"


def _format_duration(seconds: float) -> str:
    minutes = int(seconds // 60)
    rest = seconds - minutes * 60
    return f"{minutes}m {rest:.2f}s ({seconds:.2f} seconds total)"


def _print_json(report: ScanReport) -> None:
    payload: dict[str, Any] = {
        "config": report.to_dict()["config"],
        "sitemap_url": report.sitemap_url,
        "discovered_count": report.discovered_count,
        "sample": list(report.sample),
        "summary": report.summary.to_dict(),
        "warnings": list(report.warnings),
        "duration_seconds": report.duration_seconds,
    }
    json.dump(payload, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "INFO")

    now = time.time()
    output = args.output or _default_path("html", now)
    trace_log = args.trace_log or _default_path("log", now)

    try:
        config = RunConfig.create(
            args.site,
            method=args.method,
            limit=args.limit,
            variant=args.variant,
            passes=args.passes,
            concurrency=args.concurrency,
            delay_ms=args.delay_ms,
            seed=args.seed,
            expect_nocache=args.expect_nocache,
        )
    except CacheProbeError as exc:
        parser.error(str(exc))

    try:
        trace = TraceLog(trace_log).open()
    except OSError as exc:
        logger.error("Cannot open trace log file: %s (%s)", trace_log, exc)
        return 1

    with trace:
        trace.echo(f"Trace log: {trace_log}", log=logger)
        trace.echo(f"Output HTML: {output}", log=logger)

        settings = load_http_settings()
        try:
            with CacheProbe(
                create_default_http_client(settings),
                settings=settings,
                trace=trace,
                verbose=args.verbose,
                trace_requests=args.trace,
            ) as probe:
                report = probe.scan(config)
            write_html_report(report, output)
        except CacheProbeError as exc:
            trace.echo(f"Error: {exc}", logging.ERROR, log=logger)
            return 1
        except OSError as exc:
            trace.echo(f"Error: failed to write HTML report to {output}: {exc}", logging.ERROR, log=logger)
            return 1

        trace.echo(f"HTML report saved: {output}", log=logger)
        trace.echo(f"Trace log saved: {trace_log}", log=logger)
        trace.echo(f"Requests sent: {report.request_count}", log=logger)
        trace.echo(f"Execution time: {_format_duration(report.duration_seconds)}", log=logger)
        trace.echo(f"Average time per request: {report.average_request_ms:.2f}ms", log=logger)

    if args.json:
        _print_json(report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
