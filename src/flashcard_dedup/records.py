"""Flashcard record types consumed by the duplicate detector.

Records come from the card store export (Firestore documents, CSV rows, ...).
Only ``id`` is mandatory; everything else defaults to empty/absent so the
detector never fails on sparse cards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QualityAttributes:
    """Review metadata used when choosing which duplicate to keep.

    Attributes:
        stability_present: Card has FSRS stability data (it has been reviewed)
        difficulty_present: Card has FSRS difficulty data
        last_updated: When the card was last edited, if known
    """
    stability_present: bool = False
    difficulty_present: bool = False
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class FlashcardRecord:
    id: str
    question: str = ""
    answer: str = ""
    category: Optional[str] = None
    sub_category: Optional[str] = None
    quality: Optional[QualityAttributes] = None


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "none", "null")
    return bool(value)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string, epoch seconds or a Firestore timestamp.

    Firestore timestamps arrive as {"seconds": N, "nanoseconds": M} (or with
    "_seconds"/"_nanoseconds" from the REST export). Returns None for empty
    values. Raises ValueError for unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, Mapping):
        seconds = _first(value, "seconds", "_seconds")
        if seconds is None:
            raise ValueError(f"Timestamp mapping without seconds: {dict(value)!r}")
        nanos = _first(value, "nanoseconds", "_nanoseconds") or 0
        return datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9, tz=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = str(value).strip()
    # Python < 3.11 does not accept a trailing "Z" in fromisoformat.
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def as_record(obj: FlashcardRecord | Mapping[str, Any]) -> FlashcardRecord:
    """Coerce a store document (mapping) into a FlashcardRecord."""
    if isinstance(obj, FlashcardRecord):
        return obj
    card_id = obj.get("id")
    if card_id is None or str(card_id) == "":
        raise ValueError(f"Card is missing an id: {dict(obj)!r}")

    stability = _first(obj, "stability", "stability_present")
    difficulty = _first(obj, "difficulty", "difficulty_present")
    raw_updated = _first(obj, "updated_at", "updatedAt", "last_updated")
    try:
        updated = parse_timestamp(raw_updated)
    except (ValueError, TypeError, OverflowError, OSError):
        logger.warning("Ignoring unparseable last-updated value on card %s: %r", card_id, raw_updated)
        updated = None
    quality = None
    if stability is not None or difficulty is not None or updated is not None:
        quality = QualityAttributes(
            stability_present=_truthy(stability),
            difficulty_present=_truthy(difficulty),
            last_updated=updated,
        )

    category = _first(obj, "category")
    sub_category = _first(obj, "sub_category", "subCategory")
    return FlashcardRecord(
        id=str(card_id),
        question=str(obj.get("question") or ""),
        answer=str(obj.get("answer") or ""),
        category=str(category) if category is not None else None,
        sub_category=str(sub_category) if sub_category is not None else None,
        quality=quality,
    )


def coerce_records(records: Iterable[FlashcardRecord | Mapping[str, Any]]) -> List[FlashcardRecord]:
    return [as_record(r) for r in records]
