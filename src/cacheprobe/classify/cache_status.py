# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Cache status classification from response headers.

The cache status is the raw, vendor-specific string a response advertises; the cache
class is the coarse bucket reports are built on. Precedence, first match wins:

1. ``X-LiteSpeed-Cache`` (lowercased value)
2. ``X-LiteSpeed-Cache-Control`` when it carries both ``public`` and ``max-age``
3. ``Cache-Control`` when it carries both ``public`` and ``max-age``
4. ``X-Qc-Cache`` (as ``qc:<value>``)
5. ``n/a``
"""

from __future__ import annotations

from dataclasses import dataclass

from ..http.headers import header_value
from ..models.probe import CacheClass

STATUS_NOT_AVAILABLE = "n/a"
STATUS_ERROR = "error"


def _is_public_max_age(value: str) -> bool:
    return "public" in value and "max-age" in value


def cache_status_from_headers(raw_headers: str | None) -> str:
    """Return the cache status string for a raw header block."""
    litespeed = header_value(raw_headers, "x-litespeed-cache")
    if litespeed is not None:
        return litespeed.lower()

    litespeed_cc = header_value(raw_headers, "x-litespeed-cache-control")
    if litespeed_cc is not None and _is_public_max_age(litespeed_cc.lower()):
        return litespeed_cc.lower()

    cache_control = header_value(raw_headers, "cache-control")
    if cache_control is not None and _is_public_max_age(cache_control.lower()):
        return cache_control.lower()

    quic_cloud = header_value(raw_headers, "x-qc-cache")
    if quic_cloud is not None:
        return "qc:" + quic_cloud.lower()

    return STATUS_NOT_AVAILABLE


def status_class(status: str | None) -> CacheClass:
    """Bucket a cache status string into hit/miss/bypass/na."""
    value = str(status or "").lower()
    if "hit" in value:
        return CacheClass.HIT
    if "miss" in value:
        return CacheClass.MISS
    if "bypass" in value or "no-cache" in value:
        return CacheClass.BYPASS
    if _is_public_max_age(value):
        return CacheClass.HIT
    # QUIC.cloud statuses; already covered by the "hit"/"miss" checks above.
    if "qc:hit" in value:
        return CacheClass.HIT
    if "qc:miss" in value:
        return CacheClass.MISS
    return CacheClass.NA


def is_origin_unverifiable(cf_cache_status: str | None) -> bool:
    """A Cloudflare edge hit hides the origin's own cache state."""
    return cf_cache_status is not None and "hit" in cf_cache_status.lower()


@dataclass(frozen=True)
class CacheClassification:
    cache_status: str
    cache_class: CacheClass
    origin_unverifiable: bool = False
    server: str | None = None
    cf_cache_status: str | None = None
    vary: str | None = None
    x_litespeed_cache_control: str | None = None
    cache_control: str | None = None
    age: str | None = None


def classify_headers(raw_headers: str | None) -> CacheClassification:
    """Classify a raw header block and pull out the headers reports show alongside it."""
    status = cache_status_from_headers(raw_headers)
    cf_cache_status = header_value(raw_headers, "cf-cache-status")
    return CacheClassification(
        cache_status=status,
        cache_class=status_class(status),
        origin_unverifiable=is_origin_unverifiable(cf_cache_status),
        server=header_value(raw_headers, "server"),
        cf_cache_status=cf_cache_status,
        vary=header_value(raw_headers, "vary"),
        x_litespeed_cache_control=header_value(raw_headers, "x-litespeed-cache-control"),
        cache_control=header_value(raw_headers, "cache-control"),
        age=header_value(raw_headers, "age"),
    )


__all__ = [
    "CacheClassification",
    "STATUS_ERROR",
    "STATUS_NOT_AVAILABLE",
    "cache_status_from_headers",
    "classify_headers",
    "is_origin_unverifiable",
    "status_class",
]
