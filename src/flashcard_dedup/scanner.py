"""Cooperative driver for the all-pairs clustering scan.

The scan is O(n^2) comparisons; on a shared event loop it must not starve other
tasks. After every ``chunk_size`` comparisons the driver awaits a zero-delay
sleep (handing control back to the loop) and reports progress.

Progress is a fraction of the outer seed index, not of the pair count, and is
routed through a ProgressTracker so values are clamped, non-decreasing, and end
with exactly one report of 1.0.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .clustering import Cluster, ClusterBuilder
from .records import FlashcardRecord

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

DEFAULT_CHUNK_SIZE = 50


@dataclass(frozen=True)
class ScanOptions:
    """Per-call scan tuning.

    Attributes:
        chunk_size: Comparisons between two cooperative pauses
        yield_delay: Seconds to sleep at each pause (0 only yields)
    """
    chunk_size: int = DEFAULT_CHUNK_SIZE
    yield_delay: float = 0.0

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if self.yield_delay < 0:
            raise ValueError("yield_delay must be >= 0")


class ProgressTracker:
    """Forwards scan progress to a callback, keeping it monotonic in [0, 1].

    Values of 1 or more are held back until ``finish()`` so the callback
    sees 1.0 exactly once, at the end.
    """

    def __init__(self, total: int, callback: Optional[ProgressCallback] = None) -> None:
        self.total = total
        self.callback = callback
        self.last_reported = 0.0
        self.finished = False

    def report_index(self, index: int) -> None:
        if self.total <= 0:
            return
        self.report(index / self.total)

    def report(self, fraction: float) -> None:
        if self.finished:
            return
        fraction = max(self.last_reported, min(fraction, 1.0))
        if fraction >= 1.0:
            return
        self.last_reported = fraction
        if self.callback is not None:
            self.callback(fraction)

    def finish(self) -> None:
        if self.finished:
            return
        self.finished = True
        self.last_reported = 1.0
        if self.callback is not None:
            self.callback(1.0)


async def cooperative_pause(delay: float = 0.0) -> None:
    """Hand control back to the event loop."""
    await asyncio.sleep(delay)


async def scan_clusters(
    records: Sequence[FlashcardRecord],
    builder: ClusterBuilder,
    tracker: ProgressTracker,
    options: Optional[ScanOptions] = None,
    report_each_seed: bool = False,
) -> List[Cluster]:
    """Drive ``builder`` over ``records``, pausing every ``chunk_size`` comparisons.

    Args:
        records: Cards in scan order
        builder: Configured ClusterBuilder (similarity, threshold, error policy)
        tracker: Progress context for this scan
        options: Chunk size and pause delay; defaults to ScanOptions()
        report_each_seed: Also report progress after each outer iteration

    Returns:
        Clusters of two or more cards, in discovery order
    """
    options = options or ScanOptions()
    logger.debug("Scanning %d cards (chunk size %d)", len(records), options.chunk_size)

    for step in builder.steps(records):
        if step.seed_finished:
            if report_each_seed:
                tracker.report_index(step.seed_index + 1)
            continue
        if step.comparisons % options.chunk_size == 0:
            await cooperative_pause(options.yield_delay)
            tracker.report_index(step.seed_index)

    tracker.finish()
    logger.debug(
        "Scan finished: %d clusters, %d skipped pairs", len(builder.clusters), builder.skipped_pairs
    )
    return builder.clusters
