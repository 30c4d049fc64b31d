# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Result aggregation: group probe results and tally final-pass outcomes per variant."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..classify.expectations import is_expected_no_cache
from ..models.probe import CacheClass, ProbeResult
from ..models.report import GroupedResults, ScanSummary, VariantStats

PUBLIC_PROBLEM_CLASSES = frozenset({CacheClass.NA, CacheClass.BYPASS, CacheClass.MISS})


def group_results(results: Iterable[ProbeResult]) -> GroupedResults:
    """Index results as url -> variant -> pass number."""
    grouped: GroupedResults = {}
    for result in results:
        grouped.setdefault(result.url, {}).setdefault(result.variant, {})[result.pass_number] = result
    return grouped


def aggregate_results(
    results: Sequence[ProbeResult],
    *,
    passes: int,
    sample_urls: Sequence[str] | None = None,
    expect_nocache: str = "none",
) -> ScanSummary:
    """
    Summarize a run.

    Only the final pass of each (url, variant) is counted. Expected/public totals cover
    every sampled pair, even one whose final pass is missing. An error counts as a
    problem on either side; a public URL is also a problem when its final response is
    origin-unverifiable or classed na/bypass/miss.
    """
    grouped = group_results(results)
    variants = sorted({result.variant for result in results})
    urls = list(sample_urls) if sample_urls is not None else list(dict.fromkeys(result.url for result in results))
    stats = {variant: VariantStats() for variant in variants}

    for url in urls:
        expected = is_expected_no_cache(url, expect_nocache)
        for variant in variants:
            bucket = stats[variant]
            if expected:
                bucket.expected_total += 1
            else:
                bucket.public_total += 1

            final = grouped.get(url, {}).get(variant, {}).get(passes)
            if final is None:
                continue
            bucket.total += 1

            if final.is_error:
                bucket.error += 1
                if expected:
                    bucket.expected_problem += 1
                else:
                    bucket.public_problem += 1
                continue

            if final.origin_unverifiable:
                bucket.origin_unverifiable += 1

            if final.cache_class == CacheClass.HIT:
                bucket.hit += 1
            elif final.cache_class == CacheClass.MISS:
                bucket.miss += 1
            elif final.cache_class == CacheClass.BYPASS:
                bucket.bypass += 1
            else:
                bucket.na += 1

            if not expected and (final.origin_unverifiable or final.cache_class in PUBLIC_PROBLEM_CLASSES):
                bucket.public_problem += 1

    return ScanSummary(final_pass=passes, variants=variants, stats=stats, grouped=grouped)


__all__ = ["PUBLIC_PROBLEM_CLASSES", "aggregate_results", "group_results"]
