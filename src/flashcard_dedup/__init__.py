"""Flashcard duplicate and near-duplicate detection.

Lexical (word Jaccard + Levenshtein) and concept (subject-term) similarity,
greedy seed clustering, and quality-based choice of the card to keep. The
all-pairs scans run cooperatively on asyncio so they never block the loop.
"""

from .dedupe import (
    DedupResult,
    find_conceptually_similar,
    find_exact_duplicates,
    find_near_duplicates,
    suggest_category_groupings,
)
from .records import FlashcardRecord, QualityAttributes
from .scanner import ScanOptions

__all__ = [
    "DedupResult",
    "FlashcardRecord",
    "QualityAttributes",
    "ScanOptions",
    "find_conceptually_similar",
    "find_exact_duplicates",
    "find_near_duplicates",
    "suggest_category_groupings",
]
