# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe task/result models."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0 Safari/537.36"
)
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


class CacheClass(str, Enum):
    HIT = "hit"
    MISS = "miss"
    BYPASS = "bypass"
    NA = "na"


@dataclass(frozen=True)
class Variant:
    """Device profile a URL is probed under."""

    name: str
    user_agent: str


DESKTOP = Variant("desktop", DESKTOP_USER_AGENT)
MOBILE = Variant("mobile", MOBILE_USER_AGENT)
VARIANTS: dict[str, Variant] = {DESKTOP.name: DESKTOP, MOBILE.name: MOBILE}


def select_variants(selection: str) -> list[Variant]:
    """Map a `desktop|mobile|both` selection onto the known variants."""
    key = str(selection or "").strip().lower()
    if key == "both":
        return [DESKTOP, MOBILE]
    if key in VARIANTS:
        return [VARIANTS[key]]
    raise ValueError(f"Unknown variant selection: {selection!r}")


@dataclass(frozen=True)
class ProbeTask:
    url: str
    variant: Variant
    pass_number: int
    index: int = 0


@dataclass
class ProbeResult:
    """
    Outcome of one dispatched ProbeTask.

    On transport failure `error` is set, `cache_status` is "error" and the
    header-derived fields stay empty.
    """

    url: str
    variant: str
    pass_number: int
    task_index: int
    http_status: int | None = None
    elapsed_ms: int = 0
    cache_status: str = "n/a"
    cache_class: CacheClass = CacheClass.NA
    server: str | None = None
    cf_cache_status: str | None = None
    origin_unverifiable: bool = False
    vary: str | None = None
    x_litespeed_cache_control: str | None = None
    cache_control: str | None = None
    age: str | None = None
    effective_url: str | None = None
    error: str | None = None
    error_category: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["cache_class"] = self.cache_class.value
        return data


__all__ = [
    "CacheClass",
    "DESKTOP",
    "DESKTOP_USER_AGENT",
    "MOBILE",
    "MOBILE_USER_AGENT",
    "ProbeResult",
    "ProbeTask",
    "VARIANTS",
    "Variant",
    "select_variants",
]
