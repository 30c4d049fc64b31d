# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL discovery: sitemap expansion and sampling."""

from .sampling import default_seed, sample_urls, seed_from_string
from .sitemap import SitemapDiscovery, SitemapResolver, filter_same_host, parse_sitemap

__all__ = [
    "SitemapDiscovery",
    "SitemapResolver",
    "default_seed",
    "filter_same_host",
    "parse_sitemap",
    "sample_urls",
    "seed_from_string",
]
