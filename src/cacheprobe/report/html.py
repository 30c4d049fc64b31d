# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Standalone HTML rendering of a ScanReport."""

from __future__ import annotations

import time
from html import escape
from pathlib import Path

from ..classify.expectations import is_expected_no_cache
from ..errors import error_category_to_reason
from ..models import ProbeResult, ScanReport

_STYLE = """
    body{font-family:system-ui,-apple-system,Segoe UI,Roboto,Arial,sans-serif;margin:0;padding:20px;color:#222;background:#f6f7f9;}
    .container{max-width:1200px;margin:0 auto;background:#fff;padding:18px;border-radius:10px;box-shadow:0 2px 10px rgba(0,0,0,.08);}
    h1{margin:0 0 6px;font-size:20px;}
    .meta{background:#f8f9fb;border:1px solid #e7e9ef;padding:12px;border-radius:8px;margin:12px 0;}
    .meta code{background:#fff;border:1px solid #e7e9ef;padding:2px 6px;border-radius:6px;}
    .summary{display:flex;gap:14px;flex-wrap:wrap;margin:14px 0;}
    .card{flex:1;min-width:260px;border:1px solid #e7e9ef;border-radius:10px;padding:12px;background:#fff;}
    .card h2{margin:0 0 8px;font-size:14px;color:#2c3e50;text-transform:uppercase;letter-spacing:.3px;}
    .badge{display:inline-block;padding:3px 8px;border-radius:999px;font-weight:600;font-size:12px;border:1px solid transparent;}
    .hit{background:#e6f7ea;color:#187a2f;border-color:#bfe8c7;}
    .miss{background:#e9f2ff;color:#1450a3;border-color:#c9dcff;}
    .bypass{background:#fff3e0;color:#e65100;border-color:#ffe0b2;}
    .na{background:#f2f2f2;color:#616161;border-color:#e0e0e0;}
    .error{background:#ffebee;color:#c62828;border-color:#ffcdd2;}
    .warn{color:#e65100;}
    table{width:100%;border-collapse:collapse;margin-top:12px;font-size:13px;}
    th,td{padding:10px 10px;border-bottom:1px solid #e7e9ef;text-align:left;vertical-align:top;}
    th{background:#fafbfc;font-size:12px;color:#2c3e50;text-transform:uppercase;letter-spacing:.3px;}
    tr:hover{background:#fafbff;}
    .url{max-width:520px;word-break:break-all;}
    .small{color:#6b7280;font-size:12px;}
"""


def _badge(css_class: str, text: str, title: str = "") -> str:
    title_attr = f' title="{escape(title)}"' if title else ""
    return f'<span class="badge {escape(css_class)}"{title_attr}>{escape(text)}</span>'


def _result_title(result: ProbeResult) -> str:
    parts: list[str] = []
    if result.origin_unverifiable:
        parts.append("CF-HIT: origin unverifiable")
    if result.x_litespeed_cache_control:
        parts.append(f"x-litespeed-cache-control: {result.x_litespeed_cache_control}")
    if result.cache_control:
        parts.append(f"cache-control: {result.cache_control}")
    if result.vary:
        parts.append(f"vary: {result.vary}")
    if result.age:
        parts.append(f"age: {result.age}")
    return " | ".join(parts)


def _status_cell(result: ProbeResult | None) -> str:
    if result is None:
        return f"<td>{_badge('na', '-')}</td>"
    if result.is_error:
        reason = error_category_to_reason(result.error_category)
        detail = f"{reason}: {result.error}" if reason else (result.error or "")
        return f"<td>{_badge('error', 'error', detail)}</td>"
    text = result.cache_status + (" ⚠" if result.origin_unverifiable else "")
    return f"<td>{_badge(result.cache_class.value, text, _result_title(result))}</td>"


def _render_meta(report: ScanReport) -> list[str]:
    config = report.config
    return [
        '  <div class="meta">',
        f"    <div><strong>Site:</strong> <code>{escape(config.site)}</code></div>",
        f"    <div><strong>Sitemap:</strong> <code>{escape(report.sitemap_url)}</code> | "
        f"<strong>URLs in sitemap:</strong> <code>{report.discovered_count}</code></div>",
        f"    <div><strong>Limit:</strong> <code>{config.limit}</code> | <strong>Variant:</strong> <code>{escape(config.variant)}</code> | "
        f"<strong>Method:</strong> <code>{escape(config.method)}</code> | <strong>Passes:</strong> <code>{config.passes}</code></div>",
        f"    <div><strong>Concurrency:</strong> <code>{config.concurrency}</code> | <strong>Delay:</strong> <code>{config.delay_ms}ms</code> | "
        f"<strong>Seed:</strong> <code>{escape(config.seed or '(none)')}</code></div>",
        f"    <div><strong>Expect no-cache:</strong> <code>{escape(config.expect_nocache)}</code></div>",
        "  </div>",
    ]


def _render_summary(report: ScanReport) -> list[str]:
    lines = ['  <div class="summary">']
    for variant in report.summary.variants:
        stats = report.summary.stats[variant]
        lines.append('    <div class="card">')
        lines.append(f"      <h2>{escape(variant.upper())}</h2>")
        lines.append(f"      <div>{_badge('hit', 'hit')} {stats.hit}</div>")
        lines.append(f"      <div>{_badge('miss', 'miss')} {stats.miss}</div>")
        lines.append(f"      <div>{_badge('bypass', 'bypass')} {stats.bypass}</div>")
        lines.append(f"      <div>{_badge('na', 'n/a')} {stats.na}</div>")
        if stats.error > 0:
            lines.append(f"      <div>{_badge('error', 'error')} {stats.error}</div>")
        if stats.origin_unverifiable > 0:
            lines.append(f'      <div class="small warn">⚠ CF-HIT (origin unverifiable): {stats.origin_unverifiable}</div>')
        lines.append(
            f"      <div class=\"small\">Public URLs checked: {stats.public_total}, public problems: {stats.public_problem}</div>"
        )
        if report.config.expect_nocache != "none":
            lines.append(
                f"      <div class=\"small\">Expected no-cache URLs checked: {stats.expected_total}, errors: {stats.expected_problem}</div>"
            )
        lines.append("    </div>")
    lines.append("  </div>")
    return lines


def _render_table(report: ScanReport) -> list[str]:
    passes = report.config.passes
    variants = report.summary.variants
    lines = ["  <table>", "    <thead>", "      <tr>", "        <th>#</th>", "        <th>URL</th>", "        <th>Expected no-cache</th>"]
    for variant in variants:
        label = escape(variant.upper())
        for pass_number in range(1, passes + 1):
            suffix = f" P{pass_number}" if passes > 1 else ""
            lines.append(f"        <th>{label}{suffix} status</th>")
        lines.append(f"        <th>{label} HTTP</th>")
        lines.append(f"        <th>{label} time</th>")
        lines.append(f"        <th>{label} server/cf</th>")
    lines.extend(["      </tr>", "    </thead>", "    <tbody>"])

    for idx, url in enumerate(report.sample, start=1):
        expected = is_expected_no_cache(url, report.config.expect_nocache)
        lines.append("      <tr>")
        lines.append(f"        <td>{idx}</td>")
        lines.append(f'        <td class="url">{escape(url)}</td>')
        lines.append(f"        <td>{'yes' if expected else 'no'}</td>")
        for variant in variants:
            by_pass = report.summary.grouped.get(url, {}).get(variant)
            if not by_pass:
                lines.append(f'        <td colspan="{passes + 3}">{_badge("na", "n/a")}</td>')
                continue
            for pass_number in range(1, passes + 1):
                lines.append(f"        {_status_cell(by_pass.get(pass_number))}")
            last = report.summary.final_result(url, variant)
            if last is not None and not last.is_error:
                server_cf = (last.server or "") + (f" / {last.cf_cache_status}" if last.cf_cache_status else "")
                lines.append(f"        <td>{last.http_status or 0}</td>")
                lines.append(f"        <td>{last.elapsed_ms}ms</td>")
                lines.append(f'        <td class="small">{escape(server_cf.strip())}</td>')
            else:
                lines.append("        <td>-</td><td>-</td><td>-</td>")
        lines.append("      </tr>")

    lines.extend(["    </tbody>", "  </table>"])
    return lines


def render_html_report(report: ScanReport, *, generated_at: float | None = None) -> str:
    """Render the whole report as one HTML document."""
    title = f"Cache Probe - {report.config.site}"
    generated = time.strftime("%Y-%m-%d %H:%M:%S (%Z)", time.localtime(generated_at if generated_at is not None else time.time()))

    lines = [
        "<!doctype html>",
        '<html lang="en">',
        "<head>",
        '  <meta charset="utf-8"/>',
        '  <meta name="viewport" content="width=device-width, initial-scale=1"/>',
        f"  <title>{escape(title)}</title>",
        f"  <style>{_STYLE}  </style>",
        "</head>",
        "<body>",
        '<div class="container">',
        f"  <h1>{escape(title)}</h1>",
    ]
    lines.extend(_render_meta(report))
    if report.warnings:
        lines.append('  <div class="small warn">')
        lines.extend(f"    <div>{escape(warning)}</div>" for warning in report.warnings)
        lines.append("  </div>")
    lines.extend(_render_summary(report))
    lines.extend(_render_table(report))
    lines.append(f'  <div class="small" style="margin-top:12px;">Generated: {escape(generated)}</div>')
    lines.extend(["</div>", "</body>", "</html>"])
    return "\n".join(lines) + "\n"


def write_html_report(report: ScanReport, path: str | Path) -> Path:
    target = Path(path)
    target.write_text(render_html_report(report), encoding="utf-8")
    return target


__all__ = ["render_html_report", "write_html_report"]
