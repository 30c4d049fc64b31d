# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for CacheProbe."""

from ..http.models import Headers, HttpRequest, HttpResponse
from .probe import (
    DESKTOP,
    MOBILE,
    VARIANTS,
    CacheClass,
    ProbeResult,
    ProbeTask,
    Variant,
    select_variants,
)
from .report import GroupedResults, ScanReport, ScanSummary, VariantStats

__all__ = [
    "CacheClass",
    "DESKTOP",
    "GroupedResults",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "MOBILE",
    "ProbeResult",
    "ProbeTask",
    "ScanReport",
    "ScanSummary",
    "VARIANTS",
    "Variant",
    "VariantStats",
    "select_variants",
]
