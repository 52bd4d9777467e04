"""Duplicate detection entry points.

Modes:
- Near-duplicates: lexical card_similarity, groups in discovery order
- Similar concepts: concept_similarity, groups sorted by similarity to the seed
- Exact duplicates: identical trimmed question and answer text

Each mode returns a DedupResult: one card to keep per group, every other group
member to delete, and the groups themselves. Callers issue the actual deletes.
Concurrent calls over the same collection are not supported; serialize them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .clustering import Cluster, ClusterBuilder, ClusterMember
from .quality import DEFAULT_CATEGORY, select_representative
from .records import FlashcardRecord, coerce_records
from .scanner import ProgressCallback, ProgressTracker, ScanOptions, scan_clusters
from .similarity import card_similarity, concept_similarity

logger = logging.getLogger(__name__)

DEFAULT_NEAR_THRESHOLD = 0.7
DEFAULT_CONCEPT_THRESHOLD = 0.25

CardInput = Iterable[Union[FlashcardRecord, Mapping[str, Any]]]


@dataclass
class DedupResult:
    keep: List[FlashcardRecord] = field(default_factory=list)
    delete: List[FlashcardRecord] = field(default_factory=list)
    groups: List[Cluster] = field(default_factory=list)

    @property
    def keep_ids(self) -> List[str]:
        return [r.id for r in self.keep]

    @property
    def delete_ids(self) -> List[str]:
        return [r.id for r in self.delete]


def resolve_clusters(
    clusters: List[Cluster],
    now: Optional[datetime] = None,
    default_category: str = DEFAULT_CATEGORY,
) -> DedupResult:
    """Pick a representative per cluster and split members into keep/delete."""
    result = DedupResult(groups=clusters)
    for cluster in clusters:
        best = select_representative(cluster.records, now, default_category)
        result.keep.append(best)
        result.delete.extend(r for r in cluster.records if r.id != best.id)
    return result


async def find_near_duplicates(
    records: CardInput,
    threshold: float = DEFAULT_NEAR_THRESHOLD,
    on_progress: Optional[ProgressCallback] = None,
    options: Optional[ScanOptions] = None,
    now: Optional[datetime] = None,
) -> DedupResult:
    """Group lexically near-identical cards.

    Errors raised while comparing a pair abort the scan and propagate unchanged.
    """
    cards = coerce_records(records)
    builder = ClusterBuilder(card_similarity, threshold)
    tracker = ProgressTracker(len(cards), on_progress)
    clusters = await scan_clusters(cards, builder, tracker, options)
    logger.debug("Near-duplicate scan: %d groups from %d cards", len(clusters), len(cards))
    return resolve_clusters(clusters, now)


async def find_conceptually_similar(
    records: CardInput,
    threshold: float = DEFAULT_CONCEPT_THRESHOLD,
    on_progress: Optional[ProgressCallback] = None,
    options: Optional[ScanOptions] = None,
    now: Optional[datetime] = None,
) -> DedupResult:
    """Group cards that test the same idea in different words.

    A pair whose scoring raises is logged and skipped. Members of each group
    are ordered by descending similarity to the seed (stable for ties), so the
    seed is not guaranteed to stay first.
    """
    cards = coerce_records(records)
    builder = ClusterBuilder(concept_similarity, threshold, skip_pair_errors=True)
    tracker = ProgressTracker(len(cards), on_progress)
    clusters = await scan_clusters(cards, builder, tracker, options, report_each_seed=True)
    for cluster in clusters:
        cluster.members.sort(key=lambda m: m.similarity_to_seed or 0.0, reverse=True)
    logger.debug("Concept scan: %d groups from %d cards", len(clusters), len(cards))
    return resolve_clusters(clusters, now)


def find_exact_duplicates(records: CardInput, now: Optional[datetime] = None) -> DedupResult:
    """Group cards whose trimmed question and answer are identical.

    Cards without an id, or with both question and answer empty, are ignored.
    """
    groups: Dict[str, List[FlashcardRecord]] = {}
    for card in coerce_records(records):
        if not card.id:
            logger.warning("Skipping card with missing id")
            continue
        question = (card.question or "").strip()
        answer = (card.answer or "").strip()
        if not question and not answer:
            logger.warning("Skipping card with empty question and answer: %s", card.id)
            continue
        groups.setdefault(f"{question}|||{answer}", []).append(card)

    clusters = [
        Cluster([ClusterMember(card, 1.0) for card in group])
        for group in groups.values()
        if len(group) > 1
    ]
    return resolve_clusters(clusters, now)


def suggest_category_groupings(records: CardInput) -> Dict[str, List[FlashcardRecord]]:
    """Bucket cards by category; missing categories go under "Uncategorized"."""
    grouped: Dict[str, List[FlashcardRecord]] = {}
    for card in coerce_records(records):
        grouped.setdefault(card.category or DEFAULT_CATEGORY, []).append(card)
    return grouped
