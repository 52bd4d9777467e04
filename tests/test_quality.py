"""Tests for card quality scoring and representative selection."""

from datetime import datetime, timedelta, timezone

import pytest

from flashcard_dedup.quality import score_record, select_representative
from flashcard_dedup.records import FlashcardRecord, QualityAttributes

NOW = datetime(2025, 6, 1, 12, 0, 0)


class TestScoreRecord:
    def test_empty_card(self):
        assert score_record(FlashcardRecord(id="x"), now=NOW) == 0.0

    def test_content_length(self):
        rec = FlashcardRecord(id="x", question="q" * 50, answer="a" * 100)
        assert score_record(rec, now=NOW) == pytest.approx(0.5 + 0.5)

    def test_content_length_capped(self):
        rec = FlashcardRecord(id="x", question="q" * 1000, answer="a" * 5000)
        assert score_record(rec, now=NOW) == pytest.approx(6.0)

    def test_length_measured_after_normalization(self):
        rec = FlashcardRecord(id="x", question="<b>" + "q" * 100 + "</b>")
        assert score_record(rec, now=NOW) == pytest.approx(1.0)

    def test_category_bonus(self):
        assert score_record(FlashcardRecord(id="x", category="Biology"), now=NOW) == 1.0

    def test_placeholder_category_ignored(self):
        assert score_record(FlashcardRecord(id="x", category="Uncategorized"), now=NOW) == 0.0

    def test_sub_category_bonus(self):
        assert score_record(FlashcardRecord(id="x", sub_category="Cells"), now=NOW) == 0.5

    def test_review_data_bonus(self):
        quality = QualityAttributes(stability_present=True, difficulty_present=True)
        assert score_record(FlashcardRecord(id="x", quality=quality), now=NOW) == 1.5

    @pytest.mark.parametrize(
        "days_old, expected",
        [(0, 1.0), (73, 0.8), (365, 0.0), (800, 0.0)],
    )
    def test_recency_bonus(self, days_old, expected):
        quality = QualityAttributes(last_updated=NOW - timedelta(days=days_old))
        rec = FlashcardRecord(id="x", quality=quality)
        assert score_record(rec, now=NOW) == pytest.approx(expected)

    def test_aware_timestamp_without_now(self):
        """A timezone-aware timestamp compares against aware current time."""
        quality = QualityAttributes(last_updated=datetime.now(timezone.utc))
        rec = FlashcardRecord(id="x", quality=quality)
        assert score_record(rec) == pytest.approx(1.0, abs=1e-3)


class TestSelectRepresentative:
    def test_prefers_category_and_recency(self):
        """Identical text: the categorized, recently updated card wins."""
        plain = FlashcardRecord(id="plain", question="What is ATP?", answer="Energy currency")
        curated = FlashcardRecord(
            id="curated",
            question="What is ATP?",
            answer="Energy currency",
            category="Biology",
            quality=QualityAttributes(last_updated=NOW - timedelta(days=2)),
        )
        assert select_representative([plain, curated], now=NOW).id == "curated"

    def test_ties_keep_first(self):
        cards = [FlashcardRecord(id=str(i), question="same") for i in range(3)]
        assert select_representative(cards, now=NOW).id == "0"

    def test_strictly_greater_wins(self):
        cards = [
            FlashcardRecord(id="a", question="short"),
            FlashcardRecord(id="b", question="a much longer question text"),
            FlashcardRecord(id="c", question="a much longer question text"),
        ]
        assert select_representative(cards, now=NOW).id == "b"

    def test_empty_group(self):
        with pytest.raises(ValueError):
            select_representative([])
