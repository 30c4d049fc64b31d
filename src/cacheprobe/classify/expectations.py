# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URLs that are expected to bypass the page cache."""

from __future__ import annotations

import re

_WOOCOMMERCE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # English and Polish storefront slugs
    re.compile(r"/(cart|koszyk|checkout|do-kasy|my-account|moje-konto)(/|$)", re.IGNORECASE),
    re.compile(r"[?&]add-to-cart=", re.IGNORECASE),
    re.compile(r"[?&]wc-ajax=", re.IGNORECASE),
    re.compile(r"/wp-admin/|/wp-json/|wp-login\.php$", re.IGNORECASE),
)


def is_expected_no_cache(url: str, mode: str) -> bool:
    """Return True when `url` is intentionally uncached under `mode` (`none` | `woocommerce`)."""
    if mode != "woocommerce":
        return False
    return any(pattern.search(url or "") for pattern in _WOOCOMMERCE_PATTERNS)


__all__ = ["is_expected_no_cache"]
