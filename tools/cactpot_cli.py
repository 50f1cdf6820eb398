#!/usr/bin/env python3
"""
CACTPOT — Board Solver CLI

Usage:
    python -m tools.cactpot_cli 100050000
    python -m tools.cactpot_cli 1,0,0,0,5,0,0,0,9 --json
    python -m tools.cactpot_cli 123400000 --payout 6=5000 --payout 24=7200
    python -m tools.cactpot_cli 000000000 --workers 4
"""

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console

from config.cactpot_schema import DEFAULT_PAYOUTS, InvalidInputError
from config.settings import SolverConfig
from sim_engine.cactpot import solve
from tools.cactpot_report import build_report, render_report

logger = logging.getLogger("cactpot.cli")
console = Console()


def parse_board(text: str) -> list[int]:
    """'100050000' or '1,0,0,0,5,0,0,0,0' → list of ints."""
    text = text.strip()
    parts = text.split(",") if "," in text else list(text)
    try:
        return [int(p) for p in parts]
    except ValueError:
        raise InvalidInputError(f"board must contain digits only: {text!r}")


def parse_payout(text: str) -> tuple[int, int]:
    """'6=10000' → (6, 10000)."""
    key, sep, value = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected SUM=PAYOUT, got {text!r}")
    try:
        return int(key), int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected integers in {text!r}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Solve a mini cactpot board")
    parser.add_argument("board", type=str, help="9 cells, row-major, 0 = hidden")
    parser.add_argument("--payout", type=parse_payout, action="append", default=[],
                        metavar="SUM=PAYOUT", help="Override one payout-table entry")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--workers", type=int, default=None, help="Enumeration processes")
    parser.add_argument("--reveal-limit", type=int, default=None)
    parser.add_argument("--strict", action="store_true", help="Reject duplicate revealed numbers")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else SolverConfig.LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
    )

    payouts = dict(DEFAULT_PAYOUTS)
    payouts.update(dict(args.payout))

    try:
        board = parse_board(args.board)
        result = solve(board, payouts, strict=args.strict or None, workers=args.workers)
    except InvalidInputError as e:
        console.print(f"[bold red]❌ Invalid input:[/bold red] {e}")
        return 2

    if args.json:
        report = build_report(board, payouts, result, reveal_limit=args.reveal_limit)
        print(json.dumps(report, indent=2))
    else:
        render_report(board, payouts, result, console=console, reveal_limit=args.reveal_limit)
    return 0


if __name__ == "__main__":
    sys.exit(main())
