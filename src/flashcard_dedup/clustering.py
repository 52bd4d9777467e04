"""Greedy seed clustering of cards.

Each unprocessed card becomes a seed; every later unprocessed card whose
similarity to the seed reaches the threshold joins the seed's group. Members are
compared with the seed only, never with each other, so groups are stars rather
than transitive closures. Groups of one are dropped.

The loop is written as a step generator so a driver (see scanner.py) can
suspend between comparisons; ``ClusterBuilder.build`` runs it to completion
without suspending.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence, Set

from .records import FlashcardRecord

logger = logging.getLogger(__name__)

SimilarityFn = Callable[[FlashcardRecord, FlashcardRecord], float]


@dataclass
class ClusterMember:
    record: FlashcardRecord
    similarity_to_seed: Optional[float] = None


@dataclass
class Cluster:
    """An ordered group of similar cards; the first member is the seed."""
    members: List[ClusterMember] = field(default_factory=list)

    @property
    def records(self) -> List[FlashcardRecord]:
        return [m.record for m in self.members]

    @property
    def seed(self) -> FlashcardRecord:
        return self.members[0].record

    def __len__(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class ScanStep:
    """Position of the scan after one unit of work.

    Attributes:
        seed_index: Index of the outer (seed) loop
        comparisons: Pairwise comparisons performed so far
        seed_finished: True when the step marks the end of an outer iteration
    """
    seed_index: int
    comparisons: int
    seed_finished: bool = False


class ClusterBuilder:
    def __init__(
        self,
        similarity: SimilarityFn,
        threshold: float,
        skip_pair_errors: bool = False,
    ) -> None:
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be in [0, 1], got {threshold!r}")
        self._similarity = similarity
        self._threshold = threshold
        self._skip_pair_errors = skip_pair_errors
        self.clusters: List[Cluster] = []
        self.skipped_pairs = 0

    def _score(self, seed: FlashcardRecord, other: FlashcardRecord) -> Optional[float]:
        if not self._skip_pair_errors:
            return self._similarity(seed, other)
        try:
            return self._similarity(seed, other)
        except Exception:
            self.skipped_pairs += 1
            logger.warning(
                "Skipping pair (%s, %s): similarity failed", seed.id, other.id, exc_info=True
            )
            return None

    def steps(self, records: Sequence[FlashcardRecord]) -> Iterator[ScanStep]:
        """Run the clustering, yielding after every comparison and every seed.

        Completed clusters accumulate in ``self.clusters``.
        """
        self.clusters = []
        self.skipped_pairs = 0
        processed: Set[str] = set()
        comparisons = 0
        n = len(records)

        for i in range(n):
            seed = records[i]
            if seed.id in processed:
                yield ScanStep(i, comparisons, seed_finished=True)
                continue

            group = Cluster([ClusterMember(seed, 1.0)])
            processed.add(seed.id)

            for j in range(i + 1, n):
                candidate = records[j]
                if candidate.id in processed:
                    continue

                score = self._score(seed, candidate)
                if score is not None and score >= self._threshold:
                    group.members.append(ClusterMember(candidate, score))
                    processed.add(candidate.id)

                comparisons += 1
                yield ScanStep(i, comparisons)

            if len(group) > 1:
                self.clusters.append(group)
            yield ScanStep(i, comparisons, seed_finished=True)

    def build(self, records: Sequence[FlashcardRecord]) -> List[Cluster]:
        for _ in self.steps(records):
            pass
        return self.clusters
