# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Sitemap discovery and expansion.

Locates a site's sitemap among the well-known candidate paths, then expands it into a
flat list of page URLs on the site's own host. Sitemap indexes are followed
recursively. Only the top-level sitemap is allowed to fail the run; a broken child
sitemap is skipped with a warning.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Literal
from xml.sax.saxutils import unescape

from ..config import HttpSettings, load_http_settings
from ..errors import SitemapFetchFailed, SitemapNotFound, SitemapParseFailed
from ..http.client import HttpClient
from ..http.models import HttpRequest, HttpResponse
from ..http.url import build_sitemap_candidates, same_site_host, url_host
from ..log import TraceLog

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 5

_LOC_RE = re.compile(r"<loc>\s*([^<]+?)\s*</loc>", re.IGNORECASE)
_SITEMAP_INDEX_RE = re.compile(r"<sitemapindex[\s>]", re.IGNORECASE)

SitemapKind = Literal["index", "urlset", "unknown"]


@dataclass
class ParsedSitemap:
    kind: SitemapKind
    locs: list[str] = field(default_factory=list)
    well_formed: bool = True

    @property
    def is_index(self) -> bool:
        return self.kind == "index"


@dataclass
class SitemapDiscovery:
    sitemap_url: str
    urls: list[str]
    warnings: list[str] = field(default_factory=list)


def _localname(tag: object) -> str:
    name = str(tag)
    if "}" in name:
        return name.rsplit("}", 1)[-1]
    return name


def _child_text(node: ET.Element, name: str) -> str | None:
    for child in node:
        if _localname(child.tag) == name and child.text:
            text = child.text.strip()
            if text:
                return text
    return None


def scan_locs(text: str) -> list[str]:
    """Best-effort extraction of every `<loc>` span, for documents that do not parse."""
    return [unescape(match) for match in _LOC_RE.findall(text or "") if match.strip()]


def parse_sitemap(content: bytes | str) -> ParsedSitemap:
    """
    Parse a sitemap document.

    - `<sitemapindex>` style (child `<sitemap>` entries) -> kind "index", locs are child sitemaps
    - `<urlset>` style (child `<url>` entries) -> kind "urlset", locs are pages
    - well-formed but neither -> kind "unknown", locs from a `<loc>` scan
    - malformed XML -> well_formed=False, locs from a `<loc>` scan; kind "index" when the
      document mentions `<sitemapindex`, "unknown" otherwise
    """
    raw = content.encode("utf-8") if isinstance(content, str) else bytes(content or b"")
    text = raw.decode("utf-8", errors="replace")
    try:
        root = ET.fromstring(raw)
    except (ET.ParseError, ValueError):
        kind: SitemapKind = "index" if _SITEMAP_INDEX_RE.search(text) else "unknown"
        return ParsedSitemap(kind=kind, locs=scan_locs(text), well_formed=False)

    sitemaps = [child for child in root if _localname(child.tag) == "sitemap"]
    if sitemaps:
        return ParsedSitemap(kind="index", locs=[loc for loc in (_child_text(node, "loc") for node in sitemaps) if loc])

    pages = [child for child in root if _localname(child.tag) == "url"]
    if pages:
        return ParsedSitemap(kind="urlset", locs=[loc for loc in (_child_text(node, "loc") for node in pages) if loc])

    return ParsedSitemap(kind="unknown", locs=scan_locs(text))


def filter_same_host(urls: list[str], site: str) -> list[str]:
    """Keep URLs on the site's host (www-insensitive), de-duplicated, first occurrence first."""
    site_host = url_host(site)
    if not site_host:
        return []
    kept = (url for url in urls if same_site_host(url, site_host))
    return list(dict.fromkeys(kept))


class SitemapResolver:
    """Finds and expands a site's sitemap into page URLs."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        settings: HttpSettings | None = None,
        trace: TraceLog | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.http_client = http_client
        self.settings = settings or load_http_settings()
        self.trace = trace or TraceLog()
        self.max_depth = max(0, max_depth)
        self.warnings: list[str] = []

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        self.trace.echo(message, logging.WARNING, log=logger)

    def _get(self, url: str, *, method: str, timeout: float) -> HttpResponse:
        request = HttpRequest(
            url=url,
            method=method,
            headers={"Accept": "*/*", "User-Agent": self.settings.user_agent},
            timeout=timeout,
        )
        try:
            return self.http_client.request(request)
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(ok=False, url=url, error_message=str(exc), error_type=type(exc).__name__)

    def find_sitemap(self, site: str) -> str:
        """Return the first candidate sitemap URL that answers a HEAD with a 2xx status."""
        for candidate in build_sitemap_candidates(site):
            response = self._get(candidate, method="HEAD", timeout=self.settings.sitemap_check_timeout)
            logger.debug("Sitemap candidate %s -> %s", candidate, response.status_code or response.error_message)
            if response.is_success:
                return candidate
        raise SitemapNotFound(f"Could not find sitemap for site: {site}")

    def fetch_urls(self, sitemap_url: str, site: str) -> list[str]:
        """Expand `sitemap_url` recursively and return the on-host page URLs it lists."""
        visited: set[str] = set()
        locs = self._expand(sitemap_url, depth=0, visited=visited)
        return filter_same_host(locs, site)

    def resolve(self, site: str) -> SitemapDiscovery:
        self.warnings = []
        sitemap_url = self.find_sitemap(site)
        self.trace.echo(f"Sitemap: {sitemap_url}", log=logger)
        urls = self.fetch_urls(sitemap_url, site)
        return SitemapDiscovery(sitemap_url=sitemap_url, urls=urls, warnings=list(self.warnings))

    def _expand(self, sitemap_url: str, *, depth: int, visited: set[str]) -> list[str]:
        nested = depth > 0
        if sitemap_url in visited:
            self._warn(f"Warning: skipping already visited sitemap: {sitemap_url}")
            return []
        if depth > self.max_depth:
            self._warn(f"Warning: skipping nested sitemap beyond depth {self.max_depth}: {sitemap_url}")
            return []
        visited.add(sitemap_url)

        response = self._get(sitemap_url, method="GET", timeout=self.settings.sitemap_fetch_timeout)
        if not response.is_success:
            detail = f"HTTP {response.status_code}" if response.status_code is not None else (response.error_message or "no response")
            if nested:
                self._warn(f"Warning: skipping nested sitemap ({detail}): {sitemap_url}")
                return []
            raise SitemapFetchFailed(f"Failed to fetch sitemap: {sitemap_url} ({detail})")

        parsed = parse_sitemap(response.content or response.text)
        if not parsed.well_formed and not parsed.locs:
            if nested:
                self._warn(f"Warning: skipping unparseable nested sitemap: {sitemap_url}")
                return []
            raise SitemapParseFailed(f"Failed to parse sitemap XML: {sitemap_url}")

        if not parsed.is_index:
            return parsed.locs

        urls: list[str] = []
        for child in parsed.locs:
            urls.extend(self._expand(child, depth=depth + 1, visited=visited))
        return urls


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "ParsedSitemap",
    "SitemapDiscovery",
    "SitemapResolver",
    "filter_same_host",
    "parse_sitemap",
    "scan_locs",
]
