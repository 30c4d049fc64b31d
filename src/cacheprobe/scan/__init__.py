# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Scan orchestration: queueing, scheduling and aggregation."""

from .aggregate import aggregate_results, group_results
from .engine import ScanEngine
from .progress import ProgressTracker
from .queue import build_queue
from .scheduler import ProbeScheduler

__all__ = [
    "ProbeScheduler",
    "ProgressTracker",
    "ScanEngine",
    "aggregate_results",
    "build_queue",
    "group_results",
]
