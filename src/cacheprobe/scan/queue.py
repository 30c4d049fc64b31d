# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe queue construction."""

from __future__ import annotations

from collections.abc import Sequence

from ..models.probe import ProbeTask, Variant


def build_queue(urls: Sequence[str], variants: Sequence[Variant], passes: int) -> list[ProbeTask]:
    """
    Build the task matrix: URL outer, variant middle, pass inner.

    Progress and trace logs are read in this order, so it must not change.
    """
    queue: list[ProbeTask] = []
    for url in urls:
        for variant in variants:
            for pass_number in range(1, passes + 1):
                queue.append(ProbeTask(url=url, variant=variant, pass_number=pass_number, index=len(queue)))
    return queue


__all__ = ["build_queue"]
