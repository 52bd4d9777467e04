"""CLI entrypoint for the flashcard duplicate detector.

Usage:
  flashdedup near --input cards.csv --out out/near_duplicates.csv
  flashdedup concepts --input cards.json --out out/concepts.csv --threshold 0.3
  flashdedup exact --input cards.csv --out out/exact.csv
  flashdedup categories --input cards.csv
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List

from .dedupe import (
    DEFAULT_CONCEPT_THRESHOLD,
    DEFAULT_NEAR_THRESHOLD,
    find_conceptually_similar,
    find_exact_duplicates,
    find_near_duplicates,
    suggest_category_groupings,
)
from .ingest import read_records
from .report import print_category_summary, print_summary, write_results_csv
from .scanner import DEFAULT_CHUNK_SIZE, ScanOptions


def load_config(path: str | Path) -> dict:
    defaults = {
        "near_threshold": DEFAULT_NEAR_THRESHOLD,
        "concept_threshold": DEFAULT_CONCEPT_THRESHOLD,
        "chunk_size": DEFAULT_CHUNK_SIZE,
        "yield_delay": 0.0,
    }
    path = Path(path)
    if not path.exists():
        return defaults
    cfg = json.loads(path.read_text(encoding="utf-8"))
    return {**defaults, **cfg}


def _progress_printer(enabled: bool):
    if not enabled:
        return None

    def _print(fraction: float) -> None:
        end = "\n" if fraction >= 1.0 else ""
        print(f"\rScanning... {fraction * 100:5.1f}%", end=end, file=sys.stderr, flush=True)

    return _print


def _scan(args: argparse.Namespace, mode: str) -> int:
    try:
        # json.JSONDecodeError is a ValueError.
        cfg = load_config(args.config)
        cards = read_records(args.input)
        options = ScanOptions(
            chunk_size=int(cfg["chunk_size"]),
            yield_delay=float(cfg["yield_delay"]),
        )
        on_progress = _progress_printer(args.progress)
        if mode == "near":
            threshold = args.threshold if args.threshold is not None else cfg["near_threshold"]
            result = asyncio.run(find_near_duplicates(cards, float(threshold), on_progress, options))
        elif mode == "concepts":
            threshold = args.threshold if args.threshold is not None else cfg["concept_threshold"]
            result = asyncio.run(find_conceptually_similar(cards, float(threshold), on_progress, options))
        else:
            result = find_exact_duplicates(cards)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    write_results_csv(args.out, result)
    print_summary(result, total_cards=len(cards), mode=mode)
    print(f"Wrote report: {args.out}")
    return 0


def cmd_near(args: argparse.Namespace) -> int:
    return _scan(args, "near")


def cmd_concepts(args: argparse.Namespace) -> int:
    return _scan(args, "concepts")


def cmd_exact(args: argparse.Namespace) -> int:
    return _scan(args, "exact")


def cmd_categories(args: argparse.Namespace) -> int:
    try:
        cards = read_records(args.input)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    print_category_summary(suggest_category_groupings(cards))
    return 0


def _add_scan_arguments(sub: argparse.ArgumentParser, with_threshold: bool = True) -> None:
    sub.add_argument("--input", required=True, help="Path to card export (.csv or .json)")
    sub.add_argument("--out", required=True, help="Path to output CSV report")
    sub.add_argument(
        "--config",
        default="resources/config.json",
        help="Path to config.json (optional; defaults will be used if missing)",
    )
    if with_threshold:
        sub.add_argument(
            "--threshold",
            type=float,
            default=None,
            help="Similarity threshold in [0, 1] (overrides config)",
        )
        sub.add_argument(
            "--progress", action="store_true", help="Print scan progress to stderr"
        )
    else:
        sub.set_defaults(threshold=None, progress=False)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="flashdedup", description="Flashcard duplicate detector")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    near = sub.add_parser("near", help="Find lexical near-duplicates")
    _add_scan_arguments(near)
    near.set_defaults(func=cmd_near)

    concepts = sub.add_parser("concepts", help="Find cards testing the same concept")
    _add_scan_arguments(concepts)
    concepts.set_defaults(func=cmd_concepts)

    exact = sub.add_parser("exact", help="Find cards with identical question and answer")
    _add_scan_arguments(exact, with_threshold=False)
    exact.set_defaults(func=cmd_exact)

    categories = sub.add_parser("categories", help="Show card counts per category")
    categories.add_argument("--input", required=True, help="Path to card export (.csv or .json)")
    categories.set_defaults(func=cmd_categories)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
