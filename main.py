"""
Cog Board Optimizer - Entry Point

Reads a save snapshot, searches for a better cog arrangement and prints
the score card and the ordered swap steps.

Example:
    python main.py snapshot.json
    python main.py snapshot.json --time 3000 --weights 1 100 0
    python main.py snapshot.json --json  # Machine-readable output
"""

import sys
import json
import logging
import argparse
import random
from dataclasses import asdict
from pathlib import Path

from src.construction import Weights
from src.session_manager import ConstructionSessions
from src.settings import load_settings

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Configure logging - output to both console and file."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[
            logging.StreamHandler(),  # Console output
            logging.FileHandler("optimizer.log", mode='w', encoding='utf-8')  # File output
        ]
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Cog Board Optimizer - Rearranges construction cogs for a better score"
    )
    parser.add_argument(
        "snapshot",
        type=Path,
        help="Path to the save snapshot JSON file"
    )
    parser.add_argument(
        "--time", "-t",
        type=float,
        default=None,
        help="Search time budget in milliseconds (default: from config.json)"
    )
    parser.add_argument(
        "--weights", "-w",
        type=float,
        nargs=3,
        metavar=("BUILD", "EXP", "FLAGGY"),
        default=None,
        help="Objective weights (default: from config.json)"
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for a reproducible search"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Load a snapshot, optimize it and print the steps."""
    args = parse_args(argv)
    settings = load_settings()
    setup_logging("DEBUG" if args.debug else str(settings.get("log_level", "INFO")))

    try:
        raw = args.snapshot.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to read snapshot: {e}")
        return 1

    weights = None
    if args.weights:
        weights = Weights(build_rate=args.weights[0], exp=args.weights[1], flaggy=args.weights[2])

    rng = random.Random(args.seed) if args.seed is not None else None
    sessions = ConstructionSessions(settings=settings, rng=rng)
    source = args.snapshot.stem

    before = sessions.load(source, raw)
    report = sessions.optimize(source, time_budget_ms=args.time, weights=weights)

    if report is None:
        logger.error("No computable arrangement found")
        return 1

    if args.json:
        print(json.dumps({
            "before": asdict(before),
            "after": asdict(report.after),
            "diff": asdict(report.diff),
            "steps": [step.to_dict() for step in report.steps],
        }, indent=2))
    else:
        print(f"Before: {report.before}")
        print(f"After:  {report.after}  ({report.diff})")
        for line in report.describe_steps():
            print(line)
        if not report.steps:
            print("Board is already optimal for these weights")

    return 0


if __name__ == "__main__":
    sys.exit(main())
