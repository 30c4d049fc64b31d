# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import zlib

from cacheprobe.discovery import default_seed, sample_urls, seed_from_string
from cacheprobe.models import DESKTOP, MOBILE, select_variants
from cacheprobe.scan import ProgressTracker, build_queue

URLS = [f"https://shop.test/p/{i}" for i in range(100)]


def test_same_seed_same_sample():
    first = sample_urls(URLS, 10, "abc")
    second = sample_urls(URLS, 10, "abc")
    assert first == second
    assert len(first) == 10
    assert len(set(first)) == 10
    assert set(first) <= set(URLS)


def test_different_seeds_usually_differ():
    assert sample_urls(URLS, 10, "abc") != sample_urls(URLS, 10, "xyz")


def test_limit_at_or_above_size_returns_everything_in_order():
    assert sample_urls(URLS, 200, "abc") == URLS
    assert sample_urls(URLS, 100, "abc") == URLS
    assert sample_urls([], 5, "abc") == []


def test_unseeded_sampling_still_distinct():
    picked = sample_urls(URLS, 25)
    assert len(set(picked)) == 25


def test_seed_helpers():
    assert seed_from_string("abc") == zlib.crc32(b"abc")
    assert default_seed().isdigit()


def test_select_variants():
    assert select_variants("both") == [DESKTOP, MOBILE]
    assert select_variants("MOBILE") == [MOBILE]


def test_queue_order_url_variant_pass():
    queue = build_queue(["u1", "u2"], [DESKTOP, MOBILE], 2)
    assert len(queue) == 8
    assert [(t.url, t.variant.name, t.pass_number) for t in queue[:4]] == [
        ("u1", "desktop", 1),
        ("u1", "desktop", 2),
        ("u1", "mobile", 1),
        ("u1", "mobile", 2),
    ]
    assert [t.index for t in queue] == list(range(8))


def test_progress_reports_each_even_threshold_once():
    tracker = ProgressTracker(100)
    emitted = [pct for pct in (tracker.advance() for _ in range(100)) if pct is not None]
    assert emitted[0] == 1
    assert emitted[1:] == list(range(2, 101, 2))
    assert tracker.percent == 100


def test_progress_small_queue_jumps_thresholds():
    tracker = ProgressTracker(3)
    assert [tracker.advance() for _ in range(3)] == [33, 66, 100]


def test_progress_empty_queue_never_reports():
    tracker = ProgressTracker(0)
    assert tracker.advance() is None
