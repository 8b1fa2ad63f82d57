"""Collect recent draws, analyze them and print recommendations.

Usage:
  lotto-analyzer                       # latest 20 rounds
  lotto-analyzer --start 1100 --end 1119 --min-count 15
  lotto-analyzer --json --seed 7
  lotto-analyzer --count-only
"""

from __future__ import annotations

import argparse
import json
import logging
import random
from collections.abc import Sequence

from dotenv import load_dotenv
from tqdm import tqdm

from lotto_analyzer.config import get_config
from lotto_analyzer.errors import AppError
from lotto_analyzer.schemas.analysis import AnalysisSnapshotSchema
from lotto_analyzer.schemas.recommendation import StrategyResultSchema
from lotto_analyzer.services.frequency_analysis_service import AnalysisSnapshot
from lotto_analyzer.services.pipeline import AnalysisPipeline, build_pipeline
from lotto_analyzer.services.recommendation_service import STRATEGIES, StrategyResult
from lotto_analyzer.utils.progress import ProgressEvent


logger = logging.getLogger(__name__)


def _config_from_args(args: argparse.Namespace) -> dict[str, object]:
    cfg = get_config()
    config = {k: getattr(cfg, k) for k in dir(cfg) if k.isupper()}
    if args.timeout_seconds is not None:
        config["REQUEST_TIMEOUT_SECONDS"] = float(args.timeout_seconds)
    if args.wave_size is not None:
        config["WAVE_SIZE"] = int(args.wave_size)
    return config


def _attach_progress_bar(pipeline: AnalysisPipeline) -> tqdm:
    bar = tqdm(total=0, desc="Collecting", unit="round", leave=False)

    def _on_progress(event: ProgressEvent) -> None:
        if event.total is None or event.completed is None:
            bar.set_postfix_str(event.message[:60])
            return
        if bar.total != event.total:
            bar.reset(total=event.total)
        bar.n = event.completed
        if event.round_no is not None:
            bar.set_postfix(round=event.round_no)
        bar.refresh()

    pipeline.reporter.subscribe(_on_progress)
    return bar


def _print_report(snapshot: AnalysisSnapshot, results: list[StrategyResult]) -> None:
    s = snapshot.summary
    print(f"=== {snapshot.total_rounds} rounds analyzed ===")
    print(f"Most frequent : {s.most_frequent[0]} ({s.most_frequent[1]}x)")
    print(f"Least frequent: {s.least_frequent[0]} ({s.least_frequent[1]}x)")
    print(f"Average frequency: {s.average_frequency}")
    print(f"Hot  (>= {snapshot.hot_threshold}): {list(snapshot.hot)}")
    print(f"Cold (<= {snapshot.cold_threshold}): {list(snapshot.cold)}")
    print("Columns: " + " ".join(f"{c.numbers[0]}-{c.numbers[-1]}:{c.total}" for c in snapshot.columns))
    print(f"Rounds with consecutive numbers: {s.consecutive_rounds}")
    print(f"Sum ranges: {dict(s.sum_ranges)}")
    print("-" * 30)
    for i, r in enumerate(results, start=1):
        m = r.metrics
        print(
            f"{i:>2}. {r.strategy:<18} {' '.join(f'{n:>2}' for n in r.numbers)}"
            f"  odd/even {m.odd_count}:{m.even_count}  sum {m.sum}"
            f"  hot/cold/medium {m.frequency_class['hot']}/{m.frequency_class['cold']}/{m.frequency_class['medium']}"
        )


def _print_collection(pipeline: AnalysisPipeline, *, as_json: bool) -> None:
    dataset = pipeline.dataset
    summary = {
        "requested": dataset.requested if dataset else 0,
        "collected": len(dataset) if dataset else 0,
        "failed_rounds": list(dataset.failed_rounds) if dataset else [],
    }
    if as_json:
        print(json.dumps(summary, indent=2))
        return
    print(f"Collected {summary['collected']}/{summary['requested']} rounds")
    if summary["failed_rounds"]:
        print(f"Missing rounds: {summary['failed_rounds']}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run one analysis from the command line."""

    parser = argparse.ArgumentParser(description="Analyze recent lotto draws and recommend numbers")
    parser.add_argument("--start", dest="start_round", type=int, default=None)
    parser.add_argument(
        "--end",
        dest="end_round",
        type=int,
        default=None,
        help="Last round (default: auto-detect latest)",
    )
    parser.add_argument("--min-count", dest="minimum_count", type=int, default=None)
    parser.add_argument("--timeout", dest="timeout_seconds", type=float, default=None)
    parser.add_argument("--wave-size", dest="wave_size", type=int, default=None)
    parser.add_argument(
        "--strategy",
        dest="strategies",
        action="append",
        choices=list(STRATEGIES),
        help="Strategy to run (repeatable; default: all)",
    )
    parser.add_argument(
        "--count-only",
        action="store_true",
        help="Only report how many rounds were collected; no recommendations",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible recommendations")
    parser.add_argument("--json", dest="as_json", action="store_true", help="Print JSON instead of text")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(message)s")
    load_dotenv()

    if args.start_round is not None and args.end_round is None:
        parser.error("--start requires --end")
    if args.start_round is not None and args.start_round < 1:
        parser.error("--start must be >= 1")
    if args.start_round is not None and args.end_round < args.start_round:
        parser.error(f"--end ({args.end_round}) must be >= --start ({args.start_round})")
    if args.minimum_count is not None and args.minimum_count < 1:
        parser.error("--min-count must be >= 1")
    if args.minimum_count is not None and args.start_round is not None:
        span = args.end_round - args.start_round + 1
        if args.minimum_count > span:
            parser.error(f"--min-count ({args.minimum_count}) exceeds the {span} requested rounds")

    pipeline = build_pipeline(_config_from_args(args))
    bar = _attach_progress_bar(pipeline)
    try:
        snapshot = pipeline.request_analysis(
            start_round=args.start_round,
            end_round=args.end_round,
            minimum_count=args.minimum_count,
        )
    except AppError as exc:
        logger.error("%s: %s %s", exc.code, exc.message, exc.details or "")
        return 1
    finally:
        bar.close()

    if args.count_only:
        _print_collection(pipeline, as_json=args.as_json)
        return 0

    rng = random.Random(args.seed) if args.seed is not None else None
    results = pipeline.request_recommendations(strategies=args.strategies, rng=rng)

    if args.as_json:
        print(
            json.dumps(
                {
                    "analysis": AnalysisSnapshotSchema().dump(snapshot),
                    "recommendations": StrategyResultSchema(many=True).dump(results),
                },
                ensure_ascii=False,
                indent=2,
            )
        )
    else:
        _print_report(snapshot, results)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
