#!/usr/bin/env python3
"""
CLI for Content Series Analysis

Usage:
    python -m series_engine.cli analyze --db-path /path/to/db.sqlite videos.csv
    python -m series_engine.cli analyze --db-path /path/to/db.sqlite videos.csv --ai
    python -m series_engine.cli detect --db-path /path/to/db.sqlite videos.csv
    python -m series_engine.cli history --db-path /path/to/db.sqlite
"""
import argparse
import asyncio
import json
import logging
import sys

from .analysis.engine import analyze_channel
from .data.loader import load_videos
from .db.database import Database
from .db.result_cache import ResultCache, fingerprint
from .detection.enhancer import EnhancementTask
from .detection.pattern import detect_series_by_pattern
from .detection.semantic import DEFAULT_MODEL, SemanticDetector, estimate_prompt_tokens

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

RECOMMENDATION_ORDER = ("scale", "optimize", "maintain", "sunset")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Content Series Analysis CLI"
    )
    parser.add_argument(
        "--db-path",
        required=True,
        help="Path to SQLite database for the AI cache and run history"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Detect, score and classify content series"
    )
    analyze_parser.add_argument(
        "input",
        help="Video export file (.csv or .json)"
    )
    analyze_parser.add_argument(
        "--ai",
        action="store_true",
        help="Run semantic (LLM) detection on uncategorized videos if not cached"
    )
    analyze_parser.add_argument(
        "--llm-model",
        default=DEFAULT_MODEL,
        help=f"Ollama model for semantic detection (default: {DEFAULT_MODEL})"
    )
    analyze_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ignore and don't write cached semantic results"
    )

    # Detect command
    detect_parser = subparsers.add_parser(
        "detect",
        help="Show title pattern series without scoring"
    )
    detect_parser.add_argument(
        "input",
        help="Video export file (.csv or .json)"
    )

    # History command
    history_parser = subparsers.add_parser(
        "history",
        help="Show past analysis runs"
    )
    history_parser.add_argument(
        "--limit",
        type=int,
        default=5,
        help="Number of recent runs to show (default: 5)"
    )

    return parser.parse_args(argv)


async def cmd_analyze(db: Database, args) -> dict:
    """Execute the analyze command."""
    db.ensure_cache_tables()
    db.ensure_analysis_tables()

    videos = load_videos(args.input)
    pattern_result = detect_series_by_pattern(videos)
    cache = None if args.no_cache else ResultCache(db)

    semantic_groups = None
    ai_status = "not_run"
    ai_error = None

    if args.ai:
        task = EnhancementTask(SemanticDetector(model=args.llm_model), cache)
        semantic_groups = task.load_cached(videos)
        if semantic_groups is None:
            logger.info(
                "Running semantic detection on %d videos (~%d prompt tokens)",
                len(pattern_result.uncategorized),
                estimate_prompt_tokens(len(pattern_result.uncategorized)),
            )
            semantic_groups = await task.run(videos, pattern_result)
        ai_status = task.state
        ai_error = task.error
    elif cache is not None:
        semantic_groups = cache.load(videos)
        if semantic_groups is not None:
            ai_status = "cached"

    report = analyze_channel(videos, pattern_result, semantic_groups)

    run_id = db.save_analysis_run(
        fingerprint=fingerprint(videos),
        video_count=len(videos),
        report=report,
        used_ai=ai_status in ("done", "cached"),
    )

    return {
        "command": "analyze",
        "input": args.input,
        "run_id": run_id,
        "video_count": len(videos),
        "ai_status": ai_status,
        "ai_error": ai_error,
        **report.to_dict(),
    }


def cmd_detect(db: Database, args) -> dict:
    """Execute the detect command."""
    videos = load_videos(args.input)
    result = detect_series_by_pattern(videos)

    return {
        "command": "detect",
        "video_count": len(videos),
        "series": [
            {
                "name": g.name,
                "count": len(g.videos),
                "pattern": g.pattern,
                "titles": g.titles,
            }
            for g in result.pattern_series
        ],
        "uncategorized_count": len(result.uncategorized),
    }


def cmd_history(db: Database, args) -> dict:
    """Execute the history command."""
    db.ensure_analysis_tables()

    runs = db.get_analysis_history(limit=args.limit)

    return {
        "command": "history",
        "count": len(runs),
        "runs": runs,
    }


def print_result(args, result: dict) -> None:
    """Print a command result as text."""
    print(f"\n{'=' * 50}")
    print(f"Command: {result['command']}")
    print(f"{'=' * 50}")

    if args.command == "analyze":
        print(f"Videos: {result['video_count']} (run #{result['run_id']})")
        print(f"Channel averages:")
        print(f"  Views: {result['avgViews']:,.0f}")
        print(f"  CTR: {result['avgCtr'] * 100:.2f}%")
        print(f"  Retention: {result['avgRet'] * 100:.2f}%")
        print(f"  Subs per 1K views: {result['avgSubsPerKViews']:.2f}")
        print(f"AI enhancement: {result['ai_status']}")
        if result.get("ai_error"):
            print(f"  Error: {result['ai_error']}")

        print(f"\nSeries: {len(result['series'])}")
        for s in result["series"]:
            flags = []
            if s["isAbandoned"]:
                flags.append("abandoned")
            if s["isAudienceBuilder"]:
                flags.append("audience builder")
            flag_str = f" [{', '.join(flags)}]" if flags else ""
            print(f"\n  [{s['recommendation'].upper():<8}] {s['name'][:50]} "
                  f"({s['count']} videos, {s['detectionMethod']}){flag_str}")
            print(f"     Score: {s['performanceScore']:.2f} | "
                  f"View lift: {s['viewLift'] * 100:+.1f}% | "
                  f"Trend: {s['trend']} ({s['trendPct'] * 100:+.1f}%)")
            print(f"     {s['recommendationText']}")

        by_label = {label: 0 for label in RECOMMENDATION_ORDER}
        for s in result["series"]:
            by_label[s["recommendation"]] += 1
        print("\nBy recommendation:")
        for label, count in by_label.items():
            print(f"  {label}: {count}")

        print(f"\nUncategorized videos: {result['uncategorizedCount']}")
        if result["oneHitWonders"]:
            print("One-hit wonders:")
            for w in result["oneHitWonders"]:
                print(f"  {w['views']:>12,.0f} ({w['viewLift'] * 100:+.0f}%) {w['title'][:60]}")

    elif args.command == "detect":
        print(f"Videos: {result['video_count']}")
        print(f"Pattern series: {len(result['series'])}")
        for s in result["series"]:
            print(f"  {s['name'][:40]:<40} | {s['count']:>4} videos | {s['pattern']}")
        print(f"Uncategorized: {result['uncategorized_count']}")

    elif args.command == "history":
        if not result["runs"]:
            print("No analysis runs found.")
        for run in result["runs"]:
            print(f"\n  Run #{run['run_id']} at {run['run_at']}")
            print(f"    Videos: {run['video_count']}, Series: {run['series_count']}, "
                  f"AI: {'yes' if run['used_ai'] else 'no'}")
            for s in run["series"][:5]:
                print(f"    [{s['recommendation']}] {s['name'][:50]} "
                      f"(score={s['performance_score']:.2f})")

    print(f"{'=' * 50}\n")


async def main():
    """Main entry point."""
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")

    args = parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    with Database(args.db_path) as db:
        try:
            if args.command == "analyze":
                result = await cmd_analyze(db, args)
            elif args.command == "detect":
                result = cmd_detect(db, args)
            elif args.command == "history":
                result = cmd_history(db, args)
            else:
                logger.error(f"Unknown command: {args.command}")
                sys.exit(1)
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Cannot read input: {e}")
            sys.exit(1)

    if args.json:
        print(json.dumps(result, indent=2, default=str))
    else:
        print_result(args, result)


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
