# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared by discovery and probing."""

from __future__ import annotations

from urllib.parse import urlsplit

SITEMAP_CANDIDATE_PATHS: tuple[str, ...] = ("wp-sitemap.xml", "sitemap.xml", "sitemap_index.xml")


def url_host(url: str) -> str | None:
    """Return the lowercase host of `url`, or None when it cannot be parsed."""
    try:
        host = urlsplit(str(url or "").strip()).hostname
    except ValueError:
        return None
    return host.lower() if host else None


def strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def same_site_host(url: str, site_host: str) -> bool:
    """
    Return True when `url` lives on `site_host`, treating a `www.` prefix as insignificant.

      https://www.example.com/a on example.com -> True
      https://shop.example.com/ on example.com -> False
    """
    host = url_host(url)
    if not host or not site_host:
        return False
    site = site_host.lower()
    return host == site or strip_www(host) == strip_www(site)


def build_sitemap_candidates(site: str) -> list[str]:
    """Candidate sitemap URLs for a normalized site, in probe order."""
    base = str(site or "").rstrip("/")
    if not base:
        return []
    return [f"{base}/{path}" for path in SITEMAP_CANDIDATE_PATHS]


__all__ = ["SITEMAP_CANDIDATE_PATHS", "build_sitemap_candidates", "same_site_host", "strip_www", "url_host"]
