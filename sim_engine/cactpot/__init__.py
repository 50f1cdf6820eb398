"""
CACTPOT — Mini Cactpot Board Solver

Exact line probabilities and recommendations for the 3×3 scratch card.
Each solve enumerates every completion of the hidden cells, so the numbers
are exact rather than simulated.

Usage:
    from sim_engine.cactpot import solve
    from config.cactpot_schema import DEFAULT_PAYOUTS
    result = solve([0, 0, 0, 0, 7, 0, 0, 0, 0], DEFAULT_PAYOUTS)
    print(result.best_line.label, result.best_line.expected_value)
"""

from config.cactpot_schema import InvalidInputError
from sim_engine.cactpot.lines import LINES, LINE_LABELS, LineType, lines_through
from sim_engine.cactpot.line_stats import LineResult
from sim_engine.cactpot.solver import SolverResult, solve

__all__ = [
    "InvalidInputError",
    "LINES",
    "LINE_LABELS",
    "LineResult",
    "LineType",
    "SolverResult",
    "lines_through",
    "solve",
]
