"""Card export ingest (CSV or JSON) and CSV writing.

CSV schema: id, question, answer (required); category, sub_category,
stability, difficulty, updated_at (optional). JSON: a list of card objects, or
an object with a "flashcards" list, using the same keys (camelCase accepted).
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .records import FlashcardRecord, as_record


def read_records_csv(path: str | Path) -> List[FlashcardRecord]:
    path = Path(path)
    rows: List[FlashcardRecord] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        expected = {"id", "question", "answer"}
        missing = expected - set(h.lower() for h in reader.fieldnames or [])
        if missing:
            raise ValueError(f"Missing required columns in {path}: {sorted(missing)}")
        for r in reader:
            rows.append(as_record({k.lower(): v for k, v in r.items() if k}))
    return rows


def read_records_json(path: str | Path) -> List[FlashcardRecord]:
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("flashcards", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of cards in {path}")
    return [as_record(item) for item in data]


def read_records(path: str | Path) -> List[FlashcardRecord]:
    """Read cards from a .json or .csv export."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.suffix.lower() == ".json":
        return read_records_json(path)
    return read_records_csv(path)


def write_csv(path: str | Path, rows: Iterable[dict], fieldnames: Optional[Sequence[str]] = None) -> None:
    """Write dict rows as CSV.

    Columns come from ``fieldnames`` when given, else from the first row. With
    fixed columns an empty result still gets its header line; without them it
    produces an empty file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = list(rows)
    columns = list(fieldnames) if fieldnames is not None else (list(rows[0]) if rows else [])
    with path.open("w", encoding="utf-8", newline="") as f:
        if not columns:
            return
        writer = csv.DictWriter(f, fieldnames=columns)
        writer.writeheader()
        writer.writerows(rows)
