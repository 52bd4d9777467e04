"""Integration tests for the full flashcard-dedup pipeline."""

import csv
import json
import tempfile
from pathlib import Path

import pytest

from flashcard_dedup.cli import load_config, main
from flashcard_dedup.ingest import read_records, read_records_csv, read_records_json

CARDS = [
    {"id": "1", "question": "What is the capital of France?", "answer": "Paris", "category": "Geography"},
    {"id": "2", "question": "What is the capital of France", "answer": "Paris", "category": ""},
    {"id": "3", "question": "Explain mitosis", "answer": "Cell division producing two identical daughter cells", "category": "Biology"},
    {"id": "4", "question": "Describe the process of cell division", "answer": "Mitosis splits a cell into two identical cells", "category": "Biology"},
    {"id": "5", "question": "Who wrote Hamlet?", "answer": "William Shakespeare", "category": ""},
]


def write_cards_csv(path: Path, cards=CARDS) -> Path:
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["id", "question", "answer", "category"])
        writer.writeheader()
        writer.writerows(cards)
    return path


def read_report(path: Path):
    with path.open("r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


@pytest.fixture
def workdir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestIngest:
    def test_read_csv(self, workdir):
        cards = read_records_csv(write_cards_csv(workdir / "cards.csv"))

        assert [c.id for c in cards] == ["1", "2", "3", "4", "5"]
        assert cards[0].category == "Geography"
        assert cards[1].category is None

    def test_csv_missing_columns(self, workdir):
        path = workdir / "bad.csv"
        path.write_text("front,back\nx,y\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Missing required columns"):
            read_records_csv(path)

    def test_read_json_list(self, workdir):
        path = workdir / "cards.json"
        path.write_text(json.dumps(CARDS), encoding="utf-8")
        assert len(read_records_json(path)) == 5

    def test_read_json_export_object(self, workdir):
        path = workdir / "cards.json"
        path.write_text(json.dumps({"flashcards": CARDS[:2]}), encoding="utf-8")
        assert [c.id for c in read_records(path)] == ["1", "2"]

    def test_missing_file(self, workdir):
        with pytest.raises(FileNotFoundError):
            read_records(workdir / "nope.csv")


class TestLoadConfig:
    def test_defaults_when_missing(self, workdir):
        cfg = load_config(workdir / "missing.json")
        assert cfg["near_threshold"] == 0.7
        assert cfg["concept_threshold"] == 0.25
        assert cfg["chunk_size"] == 50

    def test_overrides_merge_with_defaults(self, workdir):
        path = workdir / "config.json"
        path.write_text(json.dumps({"near_threshold": 0.9}), encoding="utf-8")
        cfg = load_config(path)
        assert cfg["near_threshold"] == 0.9
        assert cfg["concept_threshold"] == 0.25


class TestCli:
    def run(self, workdir, *args):
        return main([*args, "--config", str(workdir / "config.json")])

    def test_near(self, workdir, capsys):
        cards = write_cards_csv(workdir / "cards.csv")
        out = workdir / "out" / "near.csv"

        assert self.run(workdir, "near", "--input", str(cards), "--out", str(out)) == 0

        rows = read_report(out)
        assert [(r["id"], r["role"]) for r in rows] == [("1", "keep"), ("2", "delete")]
        assert rows[0]["similarity_to_seed"] == "1.000"
        assert "to delete     : 1" in capsys.readouterr().out

    def test_concepts(self, workdir):
        cards = write_cards_csv(workdir / "cards.csv")
        out = workdir / "concepts.csv"

        assert self.run(workdir, "concepts", "--input", str(cards), "--out", str(out), "--progress") == 0

        groups = {}
        for r in read_report(out):
            groups.setdefault(r["group"], set()).add(r["id"])
        assert {"3", "4"} in groups.values()

    def test_exact(self, workdir):
        cards = write_cards_csv(workdir / "cards.csv", CARDS + [dict(CARDS[4], id="6")])
        out = workdir / "exact.csv"

        assert self.run(workdir, "exact", "--input", str(cards), "--out", str(out)) == 0
        assert [r["id"] for r in read_report(out)] == ["5", "6"]

    def test_no_duplicates_writes_empty_report(self, workdir):
        cards = write_cards_csv(workdir / "cards.csv", CARDS[2:3])
        out = workdir / "near.csv"

        assert self.run(workdir, "near", "--input", str(cards), "--out", str(out)) == 0
        assert read_report(out) == []
        assert out.read_text(encoding="utf-8").splitlines() == [
            "group,role,id,similarity_to_seed,question,answer,category"
        ]

    def test_malformed_config(self, workdir, capsys):
        cards = write_cards_csv(workdir / "cards.csv")
        (workdir / "config.json").write_text("{not json", encoding="utf-8")

        code = self.run(workdir, "near", "--input", str(cards), "--out", str(workdir / "x.csv"))
        assert code == 1
        assert "Error:" in capsys.readouterr().out
        assert not (workdir / "x.csv").exists()

    def test_invalid_threshold(self, workdir, capsys):
        cards = write_cards_csv(workdir / "cards.csv")
        code = self.run(
            workdir, "near", "--input", str(cards), "--out", str(workdir / "x.csv"), "--threshold", "2"
        )
        assert code == 1
        assert "Error:" in capsys.readouterr().out

    def test_missing_input(self, workdir, capsys):
        code = self.run(workdir, "near", "--input", str(workdir / "nope.csv"), "--out", str(workdir / "x.csv"))
        assert code == 1
        assert "Input file not found" in capsys.readouterr().out

    def test_categories(self, workdir, capsys):
        cards = write_cards_csv(workdir / "cards.csv")
        assert main(["categories", "--input", str(cards)]) == 0

        output = capsys.readouterr().out
        assert "Biology" in output
        assert "Uncategorized" in output
