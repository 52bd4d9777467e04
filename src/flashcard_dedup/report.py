"""Reporting utilities for dedup results."""

from __future__ import annotations

from typing import Dict, List

from .dedupe import DedupResult
from .ingest import write_csv
from .records import FlashcardRecord

REPORT_FIELDS = ["group", "role", "id", "similarity_to_seed", "question", "answer", "category"]


def results_to_rows(result: DedupResult) -> List[dict]:
    """Flatten a result into one row per group member."""
    keep_ids = set(result.keep_ids)
    rows: List[dict] = []
    for group_no, cluster in enumerate(result.groups, start=1):
        for member in cluster.members:
            card = member.record
            similarity = member.similarity_to_seed
            rows.append(
                {
                    "group": group_no,
                    "role": "keep" if card.id in keep_ids else "delete",
                    "id": card.id,
                    "similarity_to_seed": "" if similarity is None else f"{similarity:.3f}",
                    "question": card.question,
                    "answer": card.answer,
                    "category": card.category or "",
                }
            )
    return rows


def write_results_csv(path: str, result: DedupResult) -> None:
    write_csv(path, results_to_rows(result), fieldnames=REPORT_FIELDS)


def print_summary(result: DedupResult, total_cards: int, mode: str = "near") -> None:
    """Print summary of a dedup run.

    Args:
        result: Result to summarize
        total_cards: Number of cards scanned
        mode: Label of the detection mode ("near", "concepts", "exact")
    """
    sizes = [len(g) for g in result.groups]
    print(f"Duplicate Detection Summary ({mode}):")
    print(f"  cards scanned : {total_cards}")
    print(f"  groups        : {len(result.groups)}")
    if sizes:
        print(f"  largest group : {max(sizes)}")
    print(f"  to keep       : {len(result.keep)}")
    print(f"  to delete     : {len(result.delete)}")


def print_category_summary(groupings: Dict[str, List[FlashcardRecord]]) -> None:
    total = sum(len(cards) for cards in groupings.values())
    print("Category Summary:")
    for category, cards in sorted(groupings.items(), key=lambda kv: (-len(kv[1]), kv[0])):
        print(f"  {category:<30} {len(cards):>5}")
    print(f"  {'total':<30} {total:>5}")
