"""
CACTPOT — Board Solver

Exhaustive solver for the 3×3 mini cactpot card. For a partially revealed
board it enumerates every equally likely completion, scores all 8 lines
against the payout table, and recommends the line to pick and the cell to
scratch next.

Usage:
    from sim_engine.cactpot import solve
    from config.cactpot_schema import DEFAULT_PAYOUTS
    result = solve([1, 0, 0, 0, 5, 0, 0, 0, 0], DEFAULT_PAYOUTS)
    result.best_line_id, result.best_scratch_cell_id

Every call recomputes from scratch; nothing is cached between calls.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from config.cactpot_schema import BoardState, InvalidInputError, PayoutTable
from config.settings import SolverConfig
from sim_engine.cactpot.completions import (
    available_numbers, completion_count, empty_cells, iter_completions,
)
from sim_engine.cactpot.line_stats import LineAccumulator, LineResult, accumulate
from sim_engine.cactpot.recommend import best_line, best_scratch_cell

logger = logging.getLogger("cactpot.solver")

BoardInput = Union[BoardState, Sequence[int]]
PayoutInput = Union[PayoutTable, Mapping[int, int]]


@dataclass
class SolverResult:
    """Everything the caller needs to render one board state."""
    line_results: list[LineResult]
    best_line_id: int
    best_scratch_cell_id: Optional[int]
    possible_sums: set = field(default_factory=set)
    total: int = 0                      # candidate boards enumerated
    empty_cells: list = field(default_factory=list)

    @property
    def best_line(self) -> LineResult:
        return self.line_results[self.best_line_id]

    def to_dict(self) -> dict:
        return {
            "best_line_id": self.best_line_id,
            "best_scratch_cell_id": self.best_scratch_cell_id,
            "possible_sums": sorted(self.possible_sums),
            "total": self.total,
            "empty_cells": list(self.empty_cells),
            "line_results": [lr.to_dict() for lr in self.line_results],
        }


# ═══════════════════════════════════════════════════════════════
# Input validation
# ═══════════════════════════════════════════════════════════════

def validate_inputs(board: BoardInput, payouts: PayoutInput,
                    strict: bool = False) -> tuple[BoardState, PayoutTable]:
    """Structural checks; raises InvalidInputError on malformed input."""
    try:
        state = board if isinstance(board, BoardState) else BoardState(cells=list(board))
        table = payouts if isinstance(payouts, PayoutTable) else PayoutTable(payouts=payouts)
    except ValidationError as e:
        raise InvalidInputError.from_validation(e) from e
    except TypeError as e:
        raise InvalidInputError(f"board must be a sequence of 9 integers: {e}") from e

    dupes = state.duplicates()
    if dupes:
        if strict:
            raise InvalidInputError(f"duplicate revealed values: {dupes}")
        logger.warning(f"Board {state.cells} repeats revealed values {dupes}; "
                       f"probabilities will be skewed")
    return state, table


# ═══════════════════════════════════════════════════════════════
# Enumeration
# ═══════════════════════════════════════════════════════════════

def _accumulate_partition(board: tuple, payouts: dict, first: int) -> list[LineAccumulator]:
    """Tally the candidates whose first empty cell holds `first` (pool worker)."""
    return accumulate(board, payouts, iter_completions(board, first))


def _accumulate_parallel(board: tuple, payouts: dict, workers: int) -> list[LineAccumulator]:
    pool_values = available_numbers(board)
    with ProcessPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_accumulate_partition, board, payouts, v) for v in pool_values]
        # merge in ascending partition order
        partials = [f.result() for f in futures]

    merged = partials[0]
    for part in partials[1:]:
        for acc, other in zip(merged, part):
            acc.merge(other)
    return merged


# ═══════════════════════════════════════════════════════════════
# Solve
# ═══════════════════════════════════════════════════════════════

def solve(board: BoardInput, payouts: PayoutInput, *,
          strict: Optional[bool] = None, workers: Optional[int] = None) -> SolverResult:
    """Solve one board state.

    Args:
        board: 9 cells in row-major order, 0 for unrevealed.
        payouts: line sum → payout; missing sums pay 0.
        strict: reject duplicate revealed values (defaults to SolverConfig).
        workers: process count for enumeration (defaults to SolverConfig).

    Raises:
        InvalidInputError: the board or payout table is malformed.
    """
    strict = SolverConfig.STRICT_BOARD if strict is None else strict
    workers = SolverConfig.WORKERS if workers is None else max(1, workers)
    state, table = validate_inputs(board, payouts, strict=strict)

    cells = tuple(state.cells)
    table_map = dict(table.payouts)
    empties = empty_cells(cells)

    if len(empties) > SolverConfig.WARN_EMPTY_CELLS:
        logger.warning(f"{len(empties)} empty cells, enumerating "
                       f"{completion_count(cells):,} candidate boards")

    if workers > 1 and len(available_numbers(cells)) > 1 and empties:
        accs = _accumulate_parallel(cells, table_map, workers)
    else:
        accs = accumulate(cells, table_map, iter_completions(cells))

    line_results = [acc.finalize() for acc in accs]
    possible_sums = set()
    for lr in line_results:
        possible_sums |= lr.possible_sums

    result = SolverResult(
        line_results=line_results,
        best_line_id=best_line(line_results),
        best_scratch_cell_id=best_scratch_cell(cells, line_results),
        possible_sums=possible_sums,
        total=line_results[0].total,
        empty_cells=empties,
    )
    logger.debug(f"Solved {list(cells)}: {result.total:,} candidates, "
                 f"best line {result.best_line_id} "
                 f"(EV {result.best_line.expected_value:.2f}), "
                 f"scratch {result.best_scratch_cell_id}")
    return result
