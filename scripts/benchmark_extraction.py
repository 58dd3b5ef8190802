"""Measure item extraction quality against hand-labelled news posts.

Labels file: a JSON list of {"post_id", "title", "content", "expected_item_ids"}.
Items file: a JSON list of {"id", "name", "value", "buy_limit"}. Without
--items the catalog is read from the configured database.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Set

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import settings
from services.catalog_loader import load_catalog
from services.content_cleaner import clean_article_content
from services.item_recognition import CatalogIndex, ExtractionConfig, ItemCatalogEntry, match_items, vote

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def score_predictions(predicted: Iterable[int], expected: Iterable[int]) -> Dict:
    predicted_ids = set(predicted)
    expected_ids = set(expected)
    tp = len(predicted_ids & expected_ids)
    fp = len(predicted_ids - expected_ids)
    fn = len(expected_ids - predicted_ids)
    return {"tp": tp, "fp": fp, "fn": fn, **_ratios(tp, fp, fn)}


def aggregate_scores(scores: List[Dict]) -> Dict:
    tp = sum(s["tp"] for s in scores)
    fp = sum(s["fp"] for s in scores)
    fn = sum(s["fn"] for s in scores)
    return {"tp": tp, "fp": fp, "fn": fn, **_ratios(tp, fp, fn)}


def _ratios(tp: int, fp: int, fn: int) -> Dict[str, float]:
    precision = tp / (tp + fp) if tp + fp else 0.0
    recall = tp / (tp + fn) if tp + fn else 0.0
    f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0
    return {"precision": precision, "recall": recall, "f1": f1}


def load_items(path: Path) -> List[ItemCatalogEntry]:
    records = json.loads(path.read_text(encoding="utf-8"))
    return [
        ItemCatalogEntry(
            id=r["id"],
            name=r["name"],
            value=r.get("value"),
            buy_limit=r.get("buy_limit", r.get("limit")),
        )
        for r in records
    ]


def load_catalog_from_db() -> List[ItemCatalogEntry]:
    from models import SessionLocal

    db = SessionLocal()
    try:
        return load_catalog(db)
    finally:
        db.close()


async def predict(mode: str, title: str, content: str, index: CatalogIndex, config: ExtractionConfig) -> Set[int]:
    if mode == "lexical":
        return set(match_items(content, index, config=config))
    result = await vote(title, content, index, config=config)
    return {m.item_id for m in result.mentions}


async def run_benchmark(labels_path: Path, items_path: Path, mode: str, greedy: bool) -> Dict:
    labels = json.loads(labels_path.read_text(encoding="utf-8"))
    catalog = load_items(items_path) if items_path else load_catalog_from_db()
    index = CatalogIndex(catalog)
    config = ExtractionConfig.from_settings(settings).with_greedy(greedy)

    print("=" * 80)
    print(f"ITEM EXTRACTION BENCHMARK ({mode}, greedy={greedy})")
    print(f"{len(labels)} posts, {len(index)} catalog items")
    print("=" * 80)

    scores = []
    for label in labels:
        content = clean_article_content(label["content"])
        predicted = await predict(mode, label["title"], content, index, config)
        score = score_predictions(predicted, label["expected_item_ids"])
        scores.append(score)
        print(
            f"{str(label.get('post_id', '-')).rjust(7)} | {label['title'][:36].ljust(36)} | "
            f"P {score['precision']:.1%} | R {score['recall']:.1%} | F1 {score['f1']:.1%}"
        )

    summary = aggregate_scores(scores)
    print(f"\n{'=' * 80}")
    print("SUMMARY")
    print(f"{'=' * 80}")
    print(f"TP {summary['tp']}  FP {summary['fp']}  FN {summary['fn']}")
    print(f"Precision: {summary['precision']:.1%}")
    print(f"Recall:    {summary['recall']:.1%}")
    print(f"F1 Score:  {summary['f1']:.1%}")
    return summary


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark item extraction against labelled posts")
    parser.add_argument("labels", type=Path, help="JSON file of labelled posts")
    parser.add_argument("--items", type=Path, default=None, help="JSON catalog file (default: database)")
    parser.add_argument(
        "--mode",
        choices=["lexical", "vote"],
        default="lexical",
        help="lexical: offline scan only; vote: full voting engine with the live oracle",
    )
    parser.add_argument("--greedy", action="store_true", default=False, help="Enable greedy prefix matching")
    args = parser.parse_args()

    asyncio.run(run_benchmark(args.labels, args.items, args.mode, args.greedy))


if __name__ == "__main__":
    main()
