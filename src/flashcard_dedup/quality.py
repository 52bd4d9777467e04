"""Heuristic card quality used to pick which duplicate to keep.

Prefers cards with more content, a real category, review history (FSRS
stability/difficulty) and recent edits.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from .normalize import normalize_text
from .records import FlashcardRecord

DEFAULT_CATEGORY = "Uncategorized"


def _days_since(when: datetime, now: Optional[datetime] = None) -> float:
    if now is None:
        now = datetime.now(when.tzinfo)
    elif (now.tzinfo is None) != (when.tzinfo is None):
        # Mixed naive/aware: compare wall-clock values.
        now = now.replace(tzinfo=when.tzinfo)
    return (now - when).total_seconds() / 86400.0


def score_record(
    record: FlashcardRecord,
    now: Optional[datetime] = None,
    default_category: str = DEFAULT_CATEGORY,
) -> float:
    score = 0.0

    score += min(len(normalize_text(record.question)) / 100, 3)
    score += min(len(normalize_text(record.answer)) / 200, 3)

    if record.category and record.category != default_category:
        score += 1
    if record.sub_category:
        score += 0.5

    quality = record.quality
    if quality is not None:
        if quality.stability_present:
            score += 1
        if quality.difficulty_present:
            score += 0.5
        if quality.last_updated is not None:
            days_old = _days_since(quality.last_updated, now)
            score += max(0.0, 1 - days_old / 365)

    return score


def select_representative(
    records: Sequence[FlashcardRecord],
    now: Optional[datetime] = None,
    default_category: str = DEFAULT_CATEGORY,
) -> FlashcardRecord:
    """Return the highest scoring card; ties keep the earlier card."""
    if not records:
        raise ValueError("Cannot select a representative from an empty group")
    best = records[0]
    best_score = score_record(best, now, default_category)
    for current in records[1:]:
        current_score = score_record(current, now, default_category)
        if current_score > best_score:
            best, best_score = current, current_score
    return best
