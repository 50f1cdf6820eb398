"""
CACTPOT — Board Report

Turns a SolverResult into something a player can act on:
  1. Game phase (start / scouting / selection) from the reveal count
  2. Best-line payout breakdown with the numbers each payout still needs
  3. Payout-table rows that can no longer be hit
  4. Rich terminal rendering, or a JSON-ready dict for other front ends

Usage:
    from tools.cactpot_report import build_report, render_report
    result = solve(board, payouts)
    render_report(board, payouts, result)
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config.settings import SolverConfig
from sim_engine.cactpot.line_stats import LineResult
from sim_engine.cactpot.lines import LINE_LABELS
from sim_engine.cactpot.recommend import scratch_scores
from sim_engine.cactpot.solver import SolverResult

logger = logging.getLogger("cactpot.report")

PHASE_START = "start"
PHASE_SCOUTING = "scouting"
PHASE_SELECTION = "selection"


# ═══════════════════════════════════════════════════════════════
# Phase & labels
# ═══════════════════════════════════════════════════════════════

def game_phase(board: Sequence[int], reveal_limit: Optional[int] = None) -> str:
    """start: nothing revealed. scouting: still revealing. selection: pick a line."""
    limit = SolverConfig.REVEAL_LIMIT if reveal_limit is None else reveal_limit
    revealed = len({v for v in board if v != 0})
    if revealed == 0:
        return PHASE_START
    if revealed < limit:
        return PHASE_SCOUTING
    return PHASE_SELECTION


def line_label(line_id: int) -> str:
    return LINE_LABELS[line_id]


def format_scenarios(scenarios: Sequence[Sequence[int]]) -> str:
    """[(2, 3), (1, 4)] → '2&3 / 1&4'. Empty when nothing is missing."""
    parts = ["&".join(str(v) for v in s) for s in scenarios if s]
    return " / ".join(parts)


# ═══════════════════════════════════════════════════════════════
# Breakdowns
# ═══════════════════════════════════════════════════════════════

def payout_breakdown(line: LineResult, top: int = 5) -> list[dict]:
    """Largest reachable payouts for a line, with probability and needs."""
    rows = []
    for payout in sorted(line.payout_probabilities, reverse=True):
        prob = line.payout_probabilities[payout]
        if prob <= 0:
            continue
        scenarios = line.winning_scenarios.get(payout, [])
        rows.append({
            "payout": payout,
            "probability": prob,
            "percent": round(prob * 100, 1),
            "needs": format_scenarios(scenarios),
            "scenarios": [list(s) for s in scenarios],
        })
        if len(rows) >= top:
            break
    return rows


def impossible_sums(payouts: Mapping[int, int], possible_sums: set) -> list[int]:
    """Payout-table sums no completion of the board can produce."""
    return sorted(s for s in payouts if s not in possible_sums)


def build_report(board: Sequence[int], payouts: Mapping[int, int],
                 result: SolverResult, reveal_limit: Optional[int] = None,
                 top: int = 5) -> dict:
    phase = game_phase(board, reveal_limit)
    best = result.best_line
    scores = scratch_scores(board, result.line_results)
    return {
        "board": list(board),
        "phase": phase,
        "candidates": result.total,
        "best_line": {
            "line_id": best.line_id,
            "label": best.label,
            "cells": list(best.cells),
            "expected_value": round(best.expected_value, 4),
            "max_possible": best.max_possible,
            "breakdown": payout_breakdown(best, top=top),
        },
        # scouting only
        "recommended_scratch": result.best_scratch_cell_id if phase == PHASE_SCOUTING else None,
        "scratch_scores": {str(c): round(s, 4) for c, s in scores.items()},
        "lines": [
            {
                "line_id": lr.line_id,
                "label": lr.label,
                "expected_value": round(lr.expected_value, 4),
                "max_possible": lr.max_possible,
            }
            for lr in result.line_results
        ],
        "impossible_sums": impossible_sums(payouts, result.possible_sums),
    }


# ═══════════════════════════════════════════════════════════════
# Rendering
# ═══════════════════════════════════════════════════════════════

def _board_grid(board: Sequence[int], highlight: set, scratch: Optional[int]) -> str:
    rows = []
    for r in range(3):
        cells = []
        for c in range(3):
            idx = r * 3 + c
            v = board[idx]
            text = str(v) if v else "·"
            if idx == scratch:
                text = f"[bold cyan]{text if v else '?'}[/bold cyan]"
            elif idx in highlight:
                text = f"[bold yellow]{text}[/bold yellow]"
            cells.append(text)
        rows.append("  ".join(cells))
    return "\n".join(rows)


def render_report(board: Sequence[int], payouts: Mapping[int, int],
                  result: SolverResult, console: Optional[Console] = None,
                  reveal_limit: Optional[int] = None) -> dict:
    """Print the report with rich and return the underlying dict."""
    console = console or Console()
    report = build_report(board, payouts, result, reveal_limit=reveal_limit)
    phase = report["phase"]
    best = report["best_line"]

    if phase == PHASE_START:
        console.print(Panel(
            "Enter the first revealed number to start the analysis.",
            title="Mini Cactpot", border_style="dim",
        ))
        return report

    highlight = set(best["cells"]) if phase == PHASE_SELECTION else set()
    scratch = report["recommended_scratch"]
    console.print(Panel(
        f"{_board_grid(board, highlight, scratch)}\n\n"
        f"Phase: [bold]{phase}[/bold]   Candidates: {report['candidates']:,}\n"
        f"Best line: [bold yellow]{best['label']}[/bold yellow]  "
        f"EV {best['expected_value']:,.0f}  (max {best['max_possible']:,})"
        + (f"\nScratch next: [bold cyan]cell {scratch}[/bold cyan]" if scratch is not None else ""),
        title="Mini Cactpot", border_style="yellow" if phase == PHASE_SELECTION else "cyan",
    ))

    table = Table(title=f"{best['label']} payouts")
    table.add_column("Payout", justify="right")
    table.add_column("Needs")
    table.add_column("Chance", justify="right")
    for row in best["breakdown"]:
        table.add_row(f"{row['payout']:,}", row["needs"] or "-", f"{row['percent']:.1f}%")
    if not best["breakdown"]:
        logger.debug("Best line has no reachable payouts")
    console.print(table)

    lines = Table(title="All lines")
    lines.add_column("Line")
    lines.add_column("EV", justify="right")
    lines.add_column("Max", justify="right")
    for ln in report["lines"]:
        style = "bold yellow" if ln["line_id"] == best["line_id"] else None
        lines.add_row(ln["label"], f"{ln['expected_value']:,.1f}", f"{ln['max_possible']:,}", style=style)
    console.print(lines)

    if report["impossible_sums"]:
        console.print(f"[dim]Unreachable sums: {', '.join(map(str, report['impossible_sums']))}[/dim]")
    return report
