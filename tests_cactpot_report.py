#!/usr/bin/env python3
"""
Tests for the board report and CLI

Validates:
1.  game_phase() labels start / scouting / selection from the reveal count
2.  format_scenarios() joins needed numbers with & and alternatives with /
3.  payout_breakdown() lists the largest reachable payouts first
4.  impossible_sums() greys out unreachable payout-table rows
5.  build_report() only recommends a scratch while scouting
6.  render_report() prints the best line through rich
7.  CLI --json output, payout overrides and invalid-input exit code
"""

import io
import json
import sys
from contextlib import redirect_stdout
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from rich.console import Console

from config.cactpot_schema import DEFAULT_PAYOUTS
from sim_engine.cactpot import LineType, solve
from tools.cactpot_cli import main, parse_board, parse_payout
from tools.cactpot_report import (
    build_report, format_scenarios, game_phase, impossible_sums,
    line_label, payout_breakdown, render_report,
)

TWO_EMPTY = [1, 2, 3, 4, 5, 6, 7, 0, 0]
SCOUTING = [0, 0, 0, 0, 5, 0, 0, 0, 1]


# ============================================================
# Tests
# ============================================================

def test_game_phase():
    """Phase follows the number of distinct revealed values."""
    assert game_phase([0] * 9, reveal_limit=4) == "start"
    assert game_phase([1, 0, 0, 0, 0, 0, 0, 0, 0], reveal_limit=4) == "scouting"
    assert game_phase([1, 2, 3, 0, 0, 0, 0, 0, 0], reveal_limit=4) == "scouting"
    assert game_phase([1, 2, 3, 4, 0, 0, 0, 0, 0], reveal_limit=4) == "selection"
    assert game_phase(TWO_EMPTY, reveal_limit=4) == "selection"
    print("✅ game_phase labels start/scouting/selection")


def test_line_labels():
    assert line_label(LineType.ROW_0) == "Row 1"
    assert line_label(LineType.DIAG_ANTI) == "TR-BL"
    print("✅ line labels")


def test_format_scenarios():
    """Scenarios render as '2&3 / 1&4'; the empty scenario renders as nothing."""
    assert format_scenarios([(2, 3), (1, 4)]) == "2&3 / 1&4"
    assert format_scenarios([(9,)]) == "9"
    assert format_scenarios([()]) == ""
    assert format_scenarios([]) == ""
    print("✅ format_scenarios")


def test_payout_breakdown_orders_by_payout():
    result = solve(TWO_EMPTY, DEFAULT_PAYOUTS)
    rows = payout_breakdown(result.line_results[LineType.COL_1])
    assert [r["payout"] for r in rows] == [180, 72]
    assert rows[0]["needs"] == "8"
    assert rows[1]["needs"] == "9"
    assert rows[0]["percent"] == 50.0
    print("✅ payout_breakdown sorted by payout, with needed numbers")


def test_payout_breakdown_respects_top():
    result = solve(SCOUTING, DEFAULT_PAYOUTS)
    best = result.best_line
    rows = payout_breakdown(best, top=3)
    assert len(rows) <= 3
    payouts = [r["payout"] for r in rows]
    assert payouts == sorted(payouts, reverse=True)
    assert all(r["probability"] > 0 for r in rows)
    print(f"✅ payout_breakdown top=3 → {payouts}")


def test_impossible_sums():
    result = solve([1, 2, 3, 4, 5, 6, 7, 8, 0], DEFAULT_PAYOUTS)
    greyed = impossible_sums(DEFAULT_PAYOUTS, result.possible_sums)
    assert greyed == [s for s in range(6, 25) if s not in (6, 12, 15, 18, 24)]
    print("✅ impossible_sums")


def test_build_report_scouting_recommends_scratch():
    result = solve(SCOUTING, DEFAULT_PAYOUTS)
    report = build_report(SCOUTING, DEFAULT_PAYOUTS, result, reveal_limit=4)
    assert report["phase"] == "scouting"
    assert report["recommended_scratch"] == result.best_scratch_cell_id
    assert SCOUTING[report["recommended_scratch"]] == 0
    assert set(report["scratch_scores"]) == {str(c) for c in result.empty_cells}
    assert len(report["lines"]) == 8
    json.dumps(report)
    print(f"✅ scouting report recommends cell {report['recommended_scratch']}")


def test_build_report_selection_has_no_scratch():
    result = solve(TWO_EMPTY, DEFAULT_PAYOUTS)
    report = build_report(TWO_EMPTY, DEFAULT_PAYOUTS, result, reveal_limit=4)
    assert report["phase"] == "selection"
    assert report["recommended_scratch"] is None
    assert report["best_line"]["label"] == "Row 1"
    assert report["best_line"]["expected_value"] == 10000
    print("✅ selection report has no scratch recommendation")


def test_render_report_prints_best_line():
    result = solve(TWO_EMPTY, DEFAULT_PAYOUTS)
    buf = io.StringIO()
    console = Console(file=buf, width=120, color_system=None)
    report = render_report(TWO_EMPTY, DEFAULT_PAYOUTS, result, console=console, reveal_limit=4)
    out = buf.getvalue()
    assert "Best line" in out
    assert "Row 1" in out
    assert "All lines" in out
    assert report["phase"] == "selection"
    print("✅ render_report prints panels and tables")


def test_render_report_start_phase():
    result = solve([1, 2, 3, 4, 5, 6, 7, 8, 9], DEFAULT_PAYOUTS)
    buf = io.StringIO()
    console = Console(file=buf, width=100, color_system=None)
    render_report([0] * 9, DEFAULT_PAYOUTS, result, console=console, reveal_limit=4)
    assert "first revealed number" in buf.getvalue()
    print("✅ start phase shows the waiting panel")


def test_parse_board():
    assert parse_board("100050000") == [1, 0, 0, 0, 5, 0, 0, 0, 0]
    assert parse_board("1,0,0,0,5,0,0,0,9") == [1, 0, 0, 0, 5, 0, 0, 0, 9]
    assert parse_payout("6=5000") == (6, 5000)
    print("✅ CLI parsers")


def test_cli_json_output():
    buf = io.StringIO()
    with redirect_stdout(buf):
        code = main(["123456780", "--json", "--payout", "24=7200"])
    assert code == 0
    report = json.loads(buf.getvalue())
    assert report["candidates"] == 1
    row2 = [ln for ln in report["lines"] if ln["line_id"] == LineType.ROW_2][0]
    assert row2["expected_value"] == 7200
    print("✅ CLI --json with payout override")


def test_cli_invalid_board_exit_code():
    assert main(["12345"]) == 2
    assert main(["1234567ab"]) == 2
    print("✅ CLI exits 2 on invalid input")


# ============================================================
# Main
# ============================================================

if __name__ == "__main__":
    tests = [
        test_game_phase,
        test_line_labels,
        test_format_scenarios,
        test_payout_breakdown_orders_by_payout,
        test_payout_breakdown_respects_top,
        test_impossible_sums,
        test_build_report_scouting_recommends_scratch,
        test_build_report_selection_has_no_scratch,
        test_render_report_prints_best_line,
        test_render_report_start_phase,
        test_parse_board,
        test_cli_json_output,
        test_cli_invalid_board_exit_code,
    ]

    print(f"\n{'='*60}")
    print(f"Report & CLI Tests — {len(tests)} tests")
    print(f"{'='*60}\n")

    passed = 0
    failed = 0
    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"❌ {test.__name__}: {e}")
            failed += 1
        print()

    print(f"{'='*60}")
    print(f"Results: {passed} passed, {failed} failed, {passed + failed} total")
    print(f"{'='*60}")

    sys.exit(0 if failed == 0 else 1)
