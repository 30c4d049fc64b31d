# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclasses for aggregated results and scan reports."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from ..config import RunConfig
from .probe import ProbeResult


@dataclass
class VariantStats:
    """Final-pass tallies for one variant."""

    hit: int = 0
    miss: int = 0
    bypass: int = 0
    na: int = 0
    error: int = 0
    origin_unverifiable: int = 0
    total: int = 0
    expected_total: int = 0
    expected_problem: int = 0
    public_total: int = 0
    public_problem: int = 0


# url -> variant -> pass -> result
GroupedResults = dict[str, dict[str, dict[int, ProbeResult]]]


@dataclass
class ScanSummary:
    final_pass: int
    variants: list[str]
    stats: dict[str, VariantStats]
    grouped: GroupedResults = field(default_factory=dict)

    def final_result(self, url: str, variant: str) -> ProbeResult | None:
        return self.grouped.get(url, {}).get(variant, {}).get(self.final_pass)

    def to_dict(self) -> dict[str, Any]:
        return {
            "final_pass": self.final_pass,
            "variants": list(self.variants),
            "stats": {name: asdict(stats) for name, stats in self.stats.items()},
        }


@dataclass
class ScanReport:
    """Everything a reporter needs to render one run."""

    config: RunConfig
    sitemap_url: str
    discovered_count: int
    sample: list[str]
    results: list[ProbeResult]
    summary: ScanSummary
    warnings: list[str] = field(default_factory=list)
    started_at: float = 0.0
    duration_seconds: float = 0.0

    @property
    def request_count(self) -> int:
        return len(self.results)

    @property
    def average_request_ms(self) -> float:
        if not self.results:
            return 0.0
        return self.duration_seconds / len(self.results) * 1000

    def to_dict(self) -> dict[str, Any]:
        return {
            "config": asdict(self.config),
            "sitemap_url": self.sitemap_url,
            "discovered_count": self.discovered_count,
            "sample": list(self.sample),
            "summary": self.summary.to_dict(),
            "results": [result.to_dict() for result in self.results],
            "warnings": list(self.warnings),
            "started_at": self.started_at,
            "duration_seconds": self.duration_seconds,
        }
