"""
CACTPOT — Per-line statistics over the candidate board set.

Each of the 8 lines gets one LineAccumulator. Every candidate board is fed
to all of them once; finalize() turns the integer tallies into probability
distributions, the expected payout and the winning scenarios.

Accumulators over disjoint slices of the candidate set can be merged, and
because payouts are tallied as integers the merged result is identical to a
single sequential pass regardless of merge order.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from sim_engine.cactpot.lines import LINES, LINE_LABELS


# ═══════════════════════════════════════════════════════════════
# Result
# ═══════════════════════════════════════════════════════════════

@dataclass
class LineResult:
    """Exact outcome distribution of one line."""
    line_id: int
    cells: tuple
    total: int                                   # candidate boards scanned
    expected_value: float
    max_possible: int
    sum_counts: dict = field(default_factory=dict)             # {sum: n}
    payout_counts: dict = field(default_factory=dict)          # {payout: n}
    sum_probabilities: dict = field(default_factory=dict)      # {sum: p}
    payout_probabilities: dict = field(default_factory=dict)   # {payout: p}
    winning_scenarios: dict = field(default_factory=dict)      # {payout: [(a, b), ...]}

    @property
    def label(self) -> str:
        return LINE_LABELS[self.line_id]

    @property
    def possible_sums(self) -> set:
        return set(self.sum_counts)

    @property
    def is_fixed(self) -> bool:
        """True when the line's outcome is already certain."""
        return len(self.sum_counts) == 1

    def to_dict(self) -> dict:
        return {
            "line_id": self.line_id,
            "label": self.label,
            "cells": list(self.cells),
            "total": self.total,
            "expected_value": round(self.expected_value, 6),
            "max_possible": self.max_possible,
            "sum_probabilities": {str(k): round(v, 8) for k, v in self.sum_probabilities.items()},
            "payout_probabilities": {str(k): round(v, 8) for k, v in self.payout_probabilities.items()},
            "winning_scenarios": {
                str(k): [list(s) for s in v] for k, v in self.winning_scenarios.items()
            },
        }


# ═══════════════════════════════════════════════════════════════
# Accumulator
# ═══════════════════════════════════════════════════════════════

class LineAccumulator:
    """Running tallies for one line."""

    def __init__(self, line_id: int, board: Sequence[int], payouts: Mapping[int, int]):
        self.line_id = line_id
        self.cells = LINES[line_id]
        # cells of this line that are hidden on the *original* board
        self.open_cells = tuple(c for c in self.cells if board[c] == 0)
        self.payouts = payouts
        self.total = 0
        self.payout_total = 0
        self.max_payout = 0
        self.sum_counts: Counter = Counter()
        self.payout_counts: Counter = Counter()
        self.scenarios: defaultdict = defaultdict(set)

    def add(self, candidate: Sequence[int]) -> None:
        a, b, c = self.cells
        line_sum = candidate[a] + candidate[b] + candidate[c]
        payout = self.payouts.get(line_sum, 0)

        self.total += 1
        self.payout_total += payout
        if payout > self.max_payout:
            self.max_payout = payout
        self.sum_counts[line_sum] += 1
        self.payout_counts[payout] += 1
        self.scenarios[payout].add(tuple(sorted(candidate[i] for i in self.open_cells)))

    def merge(self, other: "LineAccumulator") -> "LineAccumulator":
        if other.line_id != self.line_id:
            raise ValueError(f"Cannot merge line {other.line_id} into line {self.line_id}")
        self.total += other.total
        self.payout_total += other.payout_total
        self.max_payout = max(self.max_payout, other.max_payout)
        self.sum_counts.update(other.sum_counts)
        self.payout_counts.update(other.payout_counts)
        for payout, keys in other.scenarios.items():
            self.scenarios[payout] |= keys
        return self

    def finalize(self) -> LineResult:
        # an all-revealed board still has one (empty) completion
        assert self.total > 0, f"line {self.line_id}: no candidate boards were scanned"
        n = self.total
        sum_counts = dict(sorted(self.sum_counts.items()))
        payout_counts = dict(sorted(self.payout_counts.items()))
        return LineResult(
            line_id=self.line_id,
            cells=self.cells,
            total=n,
            expected_value=self.payout_total / n,
            max_possible=self.max_payout,
            sum_counts=sum_counts,
            payout_counts=payout_counts,
            sum_probabilities={s: k / n for s, k in sum_counts.items()},
            payout_probabilities={p: k / n for p, k in payout_counts.items()},
            winning_scenarios={p: sorted(self.scenarios[p]) for p in payout_counts},
        )


# ═══════════════════════════════════════════════════════════════
# Aggregation
# ═══════════════════════════════════════════════════════════════

def new_accumulators(board: Sequence[int], payouts: Mapping[int, int]) -> list[LineAccumulator]:
    return [LineAccumulator(line_id, board, payouts) for line_id in range(len(LINES))]


def accumulate(board: Sequence[int], payouts: Mapping[int, int],
               candidates: Iterable[Sequence[int]]) -> list[LineAccumulator]:
    """Single pass over `candidates`, feeding all 8 line accumulators."""
    accs = new_accumulators(board, payouts)
    for candidate in candidates:
        for acc in accs:
            acc.add(candidate)
    return accs


def line_statistics(line_id: int, board: Sequence[int], payouts: Mapping[int, int],
                    candidates: Iterable[Sequence[int]]) -> LineResult:
    """Statistics for a single line."""
    acc = LineAccumulator(line_id, board, payouts)
    for candidate in candidates:
        acc.add(candidate)
    return acc.finalize()
