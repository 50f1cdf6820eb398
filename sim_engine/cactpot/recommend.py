"""Line choice and next-scratch recommendation."""
from typing import Optional, Sequence

from sim_engine.cactpot.line_stats import LineResult
from sim_engine.cactpot.lines import lines_through


def best_line(line_results: Sequence[LineResult]) -> int:
    """Index of the line with the highest expected value.

    Lines are scanned in canonical order and the best is only replaced on a
    strict improvement, so ties go to the lowest index.
    """
    best = 0
    for idx, result in enumerate(line_results):
        if result.expected_value > line_results[best].expected_value:
            best = idx
    return best


def scratch_scores(board: Sequence[int], line_results: Sequence[LineResult]) -> dict:
    """Empty cell → summed expected value of every line through it."""
    return {
        cell: sum(line_results[line_id].expected_value for line_id in lines_through(cell))
        for cell, v in enumerate(board) if v == 0
    }


def best_scratch_cell(board: Sequence[int], line_results: Sequence[LineResult]) -> Optional[int]:
    """Empty cell to reveal next, or None when nothing is left to reveal.

    Heuristic: favour the cell whose incident lines are worth the most on
    average. Ties go to the lowest cell index.
    """
    best_cell, best_score = None, None
    for cell, score in scratch_scores(board, line_results).items():
        if best_score is None or score > best_score:
            best_cell, best_score = cell, score
    return best_cell
