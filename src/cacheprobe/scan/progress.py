# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Progress accounting for probe runs."""

from __future__ import annotations

from collections.abc import Callable

ProgressCallback = Callable[[int, int, int], None]


class ProgressTracker:
    """
    Counts completed tasks and reports each new `step`-percent threshold once.

    `advance()` returns the floored percentage when a threshold not reported before has
    been reached, otherwise None. Jumping over several thresholds reports once.
    """

    def __init__(self, total: int, *, step: int = 2):
        self.total = max(0, total)
        self.step = max(1, step)
        self.processed = 0
        self._next_threshold = 0

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 100
        return self.processed * 100 // self.total

    def advance(self) -> int | None:
        self.processed += 1
        if self.total <= 0:
            return None
        pct = self.percent
        if pct < self._next_threshold:
            return None
        self._next_threshold = (pct // self.step + 1) * self.step
        return pct


__all__ = ["ProgressCallback", "ProgressTracker"]
