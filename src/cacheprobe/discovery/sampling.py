# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Seeded URL sampling.

The seed string is hashed with CRC-32 and fed to a `random.Random` (Mersenne Twister).
Indices are drawn with `randrange(n)` and duplicates discarded until `limit` distinct
picks exist, so the same seed over the same URL list always yields the same sample.
"""

from __future__ import annotations

import random
import time
import zlib
from collections.abc import Sequence


def seed_from_string(seed: str) -> int:
    return zlib.crc32(str(seed).encode("utf-8"))


def default_seed() -> str:
    """Time-derived seed for runs that did not supply one; record it to reproduce the run."""
    return str(int(time.time()))


def sample_urls(urls: Sequence[str], limit: int, seed: str | None = None) -> list[str]:
    """Return `min(limit, len(urls))` distinct URLs, drawn without replacement."""
    n = len(urls)
    if n <= limit:
        return list(urls)

    rng = random.Random(seed_from_string(seed if seed is not None else default_seed()))
    picked: list[str] = []
    picked_idx: set[int] = set()
    while len(picked) < limit:
        idx = rng.randrange(n)
        if idx in picked_idx:
            continue
        picked_idx.add(idx)
        picked.append(urls[idx])
    return picked


__all__ = ["default_seed", "sample_urls", "seed_from_string"]
