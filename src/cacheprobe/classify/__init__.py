# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header-based cache classification."""

from .cache_status import (
    STATUS_ERROR,
    STATUS_NOT_AVAILABLE,
    CacheClassification,
    cache_status_from_headers,
    classify_headers,
    is_origin_unverifiable,
    status_class,
)
from .expectations import is_expected_no_cache

__all__ = [
    "CacheClassification",
    "STATUS_ERROR",
    "STATUS_NOT_AVAILABLE",
    "cache_status_from_headers",
    "classify_headers",
    "is_expected_no_cache",
    "is_origin_unverifiable",
    "status_class",
]
