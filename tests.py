#!/usr/bin/env python3
"""
CACTPOT — Unit & Integration Test Suite

Run: python tests.py
     python tests.py -v                 # verbose
     python tests.py TestSolverScenarios

Test categories:
  TestPermutations      — lazy Heap's generator vs. recursive insertion
  TestCompletions       — empty cells, available numbers, candidate boards
  TestLineStatistics    — counts, probabilities, scenarios, merging
  TestRecommendations   — best line / best scratch tie-breaking
  TestSolverScenarios   — fixed boards with hand-checked answers
  TestSolverProperties  — invariants over a spread of boards
  TestInputValidation   — malformed boards and payout tables
"""

import itertools
import logging
import math
import sys
import unittest
from pathlib import Path

# ── Ensure project root is on sys.path ──
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.cactpot_schema import DEFAULT_PAYOUTS, BoardState, InvalidInputError, PayoutTable
from config.settings import SolverConfig
from sim_engine.cactpot import LINES, LineResult, LineType, lines_through, solve
from sim_engine.cactpot.completions import (
    available_numbers, complete, completion_count, empty_cells, iter_completions,
)
from sim_engine.cactpot.line_stats import accumulate, line_statistics
from sim_engine.cactpot.permutations import Permutations, heap_permutations, insertion_permutations
from sim_engine.cactpot.recommend import best_line, best_scratch_cell, scratch_scores


SCENARIO_A = [1, 2, 3, 4, 5, 6, 7, 8, 0]
SCENARIO_B = [1, 2, 3, 4, 5, 6, 7, 8, 9]
TWO_EMPTY = [1, 2, 3, 4, 5, 6, 7, 0, 0]


def _line(line_id: int, ev: float) -> LineResult:
    return LineResult(line_id=line_id, cells=LINES[line_id], total=1,
                      expected_value=ev, max_possible=int(ev))


# ============================================================
# Permutations
# ============================================================

class TestPermutations(unittest.TestCase):

    def test_empty_sequence_has_one_ordering(self):
        self.assertEqual(list(Permutations([])), [()])
        self.assertEqual(len(Permutations([])), 1)

    def test_counts_match_factorial(self):
        for k in range(0, 7):
            perms = list(Permutations(range(1, k + 1)))
            self.assertEqual(len(perms), math.factorial(k))
            self.assertEqual(len(set(perms)), math.factorial(k), f"duplicates for k={k}")

    def test_matches_itertools(self):
        items = [2, 4, 6, 8, 9]
        self.assertEqual(set(heap_permutations(items)), set(itertools.permutations(items)))

    def test_matches_recursive_insertion(self):
        items = (1, 3, 5, 7)
        self.assertEqual(set(Permutations(items)), set(insertion_permutations(items)))
        self.assertEqual(len(insertion_permutations(items)), 24)

    def test_restartable_and_deterministic(self):
        perms = Permutations([3, 1, 4, 5])
        first = list(perms)
        second = list(perms)
        self.assertEqual(first, second)
        self.assertEqual(first[0], (3, 1, 4, 5))

    def test_len_does_not_enumerate(self):
        self.assertEqual(len(Permutations(range(1, 10))), 362880)


# ============================================================
# Completions
# ============================================================

class TestCompletions(unittest.TestCase):

    def test_empty_cells_and_available(self):
        board = [0, 3, 0, 0, 7, 0, 1, 0, 0]
        self.assertEqual(empty_cells(board), [0, 2, 3, 5, 7, 8])
        self.assertEqual(available_numbers(board), [2, 4, 5, 6, 8, 9])

    def test_complete_fills_in_index_order(self):
        board = [0, 3, 0, 0, 7, 0, 1, 0, 0]
        filled = complete(board, (9, 8, 6, 5, 4, 2))
        self.assertEqual(filled, (9, 3, 8, 6, 7, 5, 1, 4, 2))
        # original untouched
        self.assertEqual(board[0], 0)

    def test_candidate_set_size(self):
        board = [0, 0, 0, 4, 5, 6, 7, 8, 9]
        boards = list(iter_completions(board))
        self.assertEqual(len(boards), 6)
        self.assertEqual(len(set(boards)), 6)
        self.assertEqual(completion_count(board), 6)
        for b in boards:
            self.assertEqual(sorted(b), list(range(1, 10)))
            self.assertEqual(b[3:], (4, 5, 6, 7, 8, 9))

    def test_fully_revealed_has_single_completion(self):
        self.assertEqual(list(iter_completions(SCENARIO_B)), [tuple(SCENARIO_B)])

    def test_partitions_cover_candidate_set(self):
        board = [0, 0, 0, 0, 5, 6, 7, 8, 9]
        full = set(iter_completions(board))
        parts = set()
        for v in available_numbers(board):
            part = list(iter_completions(board, first=v))
            self.assertTrue(all(b[0] == v for b in part))
            parts.update(part)
        self.assertEqual(parts, full)

    def test_partition_rejects_unavailable_value(self):
        with self.assertRaises(ValueError):
            list(iter_completions(SCENARIO_A, first=3))


# ============================================================
# Line Statistics
# ============================================================

class TestLineStatistics(unittest.TestCase):

    def test_two_empty_cells_distributions(self):
        accs = accumulate(TWO_EMPTY, DEFAULT_PAYOUTS, iter_completions(TWO_EMPTY))
        col1 = accs[LineType.COL_1].finalize()
        self.assertEqual(col1.total, 2)
        self.assertEqual(col1.sum_counts, {15: 1, 16: 1})
        self.assertEqual(col1.payout_probabilities, {72: 0.5, 180: 0.5})
        self.assertAlmostEqual(col1.expected_value, 126.0)
        self.assertEqual(col1.max_possible, 180)
        self.assertEqual(col1.winning_scenarios, {72: [(9,)], 180: [(8,)]})

    def test_scenarios_deduplicate(self):
        """Both orderings of {8, 9} land on row 3 and collapse to one scenario."""
        row2 = line_statistics(LineType.ROW_2, TWO_EMPTY, DEFAULT_PAYOUTS,
                               iter_completions(TWO_EMPTY))
        self.assertEqual(row2.total, 2)
        self.assertEqual(row2.sum_probabilities, {24: 1.0})
        self.assertEqual(row2.winning_scenarios, {3600: [(8, 9)]})

    def test_fixed_line_is_point_mass(self):
        row0 = line_statistics(LineType.ROW_0, TWO_EMPTY, DEFAULT_PAYOUTS,
                               iter_completions(TWO_EMPTY))
        self.assertTrue(row0.is_fixed)
        self.assertEqual(row0.sum_probabilities, {6: 1.0})
        self.assertEqual(row0.payout_probabilities, {10000: 1.0})
        self.assertEqual(row0.winning_scenarios, {10000: [()]})
        self.assertEqual(row0.expected_value, 10000)

    def test_missing_payout_defaults_to_zero(self):
        row1 = line_statistics(LineType.ROW_1, SCENARIO_A, {24: 100}, iter_completions(SCENARIO_A))
        self.assertEqual(row1.payout_probabilities, {0: 1.0})
        self.assertEqual(row1.expected_value, 0)
        self.assertEqual(row1.max_possible, 0)

    def test_scenario_keys_are_tuples_not_strings(self):
        board = [0, 0, 0, 4, 5, 6, 7, 8, 9]
        row0 = line_statistics(LineType.ROW_0, board, DEFAULT_PAYOUTS, iter_completions(board))
        self.assertEqual(row0.winning_scenarios, {10000: [(1, 2, 3)]})

    def test_merge_matches_single_pass(self):
        board = [0, 0, 3, 0, 0, 0, 7, 0, 0]
        whole = [a.finalize() for a in accumulate(board, DEFAULT_PAYOUTS, iter_completions(board))]

        merged = None
        for v in available_numbers(board):
            part = accumulate(board, DEFAULT_PAYOUTS, iter_completions(board, first=v))
            if merged is None:
                merged = part
            else:
                for acc, other in zip(merged, part):
                    acc.merge(other)
        merged = [a.finalize() for a in merged]

        for w, m in zip(whole, merged):
            self.assertEqual(w.to_dict(), m.to_dict())
            self.assertEqual(w.expected_value, m.expected_value)

    def test_merge_rejects_other_line(self):
        accs = accumulate(SCENARIO_A, DEFAULT_PAYOUTS, iter_completions(SCENARIO_A))
        with self.assertRaises(ValueError):
            accs[0].merge(accs[1])

    def test_finalize_requires_candidates(self):
        accs = accumulate(SCENARIO_A, DEFAULT_PAYOUTS, [])
        with self.assertRaises(AssertionError):
            accs[0].finalize()


# ============================================================
# Recommendations
# ============================================================

class TestRecommendations(unittest.TestCase):

    def test_best_line_strict_maximum(self):
        results = [_line(i, ev) for i, ev in enumerate([10, 50, 20, 70, 5, 1, 2, 3])]
        self.assertEqual(best_line(results), 3)

    def test_best_line_tie_goes_to_lowest_index(self):
        results = [_line(i, ev) for i, ev in enumerate([10, 90, 20, 90, 5, 90, 2, 3])]
        self.assertEqual(best_line(results), 1)

    def test_best_line_all_equal(self):
        self.assertEqual(best_line([_line(i, 0.0) for i in range(8)]), 0)

    def test_cell_line_membership(self):
        self.assertEqual(len(lines_through(4)), 4)  # centre: row, col, both diagonals
        for corner in (0, 2, 6, 8):
            self.assertEqual(len(lines_through(corner)), 3)
        for edge in (1, 3, 5, 7):
            self.assertEqual(len(lines_through(edge)), 2)

    def test_scratch_scores_sum_incident_lines(self):
        results = [_line(i, float(i + 1)) for i in range(8)]
        board = [0, 1, 2, 3, 4, 5, 6, 7, 0]
        scores = scratch_scores(board, results)
        self.assertEqual(set(scores), {0, 8})
        # cell 0: ROW_0 + COL_0 + DIAG_MAIN = 1 + 4 + 7
        self.assertEqual(scores[0], 12.0)
        # cell 8: ROW_2 + COL_2 + DIAG_MAIN = 3 + 6 + 7
        self.assertEqual(scores[8], 16.0)
        self.assertEqual(best_scratch_cell(board, results), 8)

    def test_scratch_none_when_nothing_hidden(self):
        results = [_line(i, 1.0) for i in range(8)]
        self.assertIsNone(best_scratch_cell(SCENARIO_B, results))

    def test_scratch_tie_goes_to_lowest_index(self):
        results = [_line(i, 0.0) for i in range(8)]
        board = [5, 0, 0, 0, 0, 0, 0, 0, 1]
        self.assertEqual(best_scratch_cell(board, results), 1)


# ============================================================
# Solver Scenarios
# ============================================================

class TestSolverScenarios(unittest.TestCase):

    def test_scenario_a_single_hidden_cell(self):
        result = solve(SCENARIO_A, DEFAULT_PAYOUTS)
        self.assertEqual(result.total, 1)
        lr = result.line_results

        row2 = lr[LineType.ROW_2]
        self.assertEqual(row2.sum_probabilities, {24: 1.0})
        self.assertEqual(row2.payout_probabilities, {3600: 1.0})
        self.assertEqual(row2.winning_scenarios, {3600: [(9,)]})

        col2 = lr[LineType.COL_2]
        self.assertEqual(col2.sum_probabilities, {18: 1.0})
        self.assertEqual(col2.payout_probabilities, {119: 1.0})

        diag = lr[LineType.DIAG_MAIN]
        self.assertEqual(diag.sum_probabilities, {15: 1.0})
        self.assertEqual(diag.payout_probabilities, {180: 1.0})

        # lines away from cell 8 are fixed by the revealed cells
        self.assertEqual(lr[LineType.ROW_0].sum_probabilities, {6: 1.0})
        self.assertEqual(lr[LineType.ROW_1].sum_probabilities, {15: 1.0})
        self.assertEqual(lr[LineType.COL_0].sum_probabilities, {12: 1.0})
        self.assertEqual(lr[LineType.COL_1].sum_probabilities, {15: 1.0})
        self.assertEqual(lr[LineType.DIAG_ANTI].sum_probabilities, {15: 1.0})

        self.assertEqual(result.best_line_id, LineType.ROW_0)
        self.assertEqual(result.best_scratch_cell_id, 8)
        self.assertEqual(result.possible_sums, {6, 12, 15, 18, 24})

    def test_scenario_b_fully_revealed(self):
        result = solve(SCENARIO_B, DEFAULT_PAYOUTS)
        self.assertEqual(result.total, 1)
        self.assertIsNone(result.best_scratch_cell_id)
        self.assertEqual(result.empty_cells, [])
        for lr in result.line_results:
            self.assertEqual(len(lr.sum_probabilities), 1)
            (line_sum, prob), = lr.sum_probabilities.items()
            self.assertEqual(prob, 1.0)
            self.assertEqual(lr.expected_value, DEFAULT_PAYOUTS[line_sum])
            self.assertEqual(lr.winning_scenarios, {DEFAULT_PAYOUTS[line_sum]: [()]})
        sums = {sum(SCENARIO_B[i] for i in line) for line in LINES}
        self.assertEqual(result.possible_sums, sums)
        self.assertEqual(result.possible_sums, {6, 12, 15, 18, 24})

    def test_two_hidden_cells(self):
        result = solve(TWO_EMPTY, DEFAULT_PAYOUTS)
        self.assertEqual(result.total, 2)
        self.assertEqual(result.best_line_id, LineType.ROW_0)
        # cell 7: ROW_2 (3600) + COL_1 (126); cell 8: ROW_2 + COL_2 (149.5) + DIAG_MAIN (117)
        self.assertEqual(result.best_scratch_cell_id, 8)
        self.assertAlmostEqual(result.line_results[LineType.COL_2].expected_value, 149.5)
        self.assertAlmostEqual(result.line_results[LineType.DIAG_MAIN].expected_value, 117.0)

    def test_empty_payout_table_ties(self):
        result = solve([5, 0, 0, 0, 0, 0, 0, 0, 1], {})
        self.assertEqual(result.best_line_id, 0)
        self.assertEqual(result.best_scratch_cell_id, 1)
        for lr in result.line_results:
            self.assertEqual(lr.expected_value, 0)

    def test_parallel_matches_sequential(self):
        board = [0, 0, 0, 0, 5, 0, 0, 0, 9]
        seq = solve(board, DEFAULT_PAYOUTS, workers=1)
        par = solve(board, DEFAULT_PAYOUTS, workers=2)
        self.assertEqual(seq.to_dict(), par.to_dict())
        for a, b in zip(seq.line_results, par.line_results):
            self.assertEqual(a.expected_value, b.expected_value)

    def test_to_dict_is_json_ready(self):
        import json
        data = solve(TWO_EMPTY, DEFAULT_PAYOUTS).to_dict()
        text = json.dumps(data)
        self.assertIn('"best_line_id": 0', text)
        self.assertEqual(data["line_results"][LineType.ROW_2]["winning_scenarios"], {"3600": [[8, 9]]})

    def test_accepts_schema_models(self):
        result = solve(BoardState(cells=SCENARIO_A), PayoutTable())
        self.assertEqual(result.best_line_id, 0)


class TestFullyHiddenBoard(unittest.TestCase):
    """All nine cells hidden: 9! candidate boards."""

    @classmethod
    def setUpClass(cls):
        cls.result = solve([0] * 9, DEFAULT_PAYOUTS)

    def test_candidate_count(self):
        self.assertEqual(self.result.total, 362880)
        for lr in self.result.line_results:
            self.assertEqual(sum(lr.sum_counts.values()), 362880)
            self.assertEqual(sum(lr.payout_counts.values()), 362880)

    def test_distributions_sum_to_one(self):
        for lr in self.result.line_results:
            self.assertAlmostEqual(sum(lr.sum_probabilities.values()), 1.0, places=9)
            self.assertAlmostEqual(sum(lr.payout_probabilities.values()), 1.0, places=9)

    def test_lines_are_symmetric(self):
        evs = {lr.expected_value for lr in self.result.line_results}
        self.assertEqual(len(evs), 1)
        # only {1, 2, 3} sums to 6: 3! * 6! boards out of 9!
        self.assertAlmostEqual(self.result.line_results[0].sum_probabilities[6], 1 / 84)
        self.assertEqual(self.result.possible_sums, set(range(6, 25)))

    def test_recommendations(self):
        # equal EVs: lowest line wins; the centre sits on 4 lines and outscores the corners
        self.assertEqual(self.result.best_line_id, 0)
        self.assertEqual(self.result.best_scratch_cell_id, 4)


# ============================================================
# Properties
# ============================================================

class TestSolverProperties(unittest.TestCase):

    BOARDS = [
        SCENARIO_A,
        SCENARIO_B,
        TWO_EMPTY,
        [0, 0, 0, 0, 5, 0, 0, 0, 0],
        [1, 0, 0, 0, 0, 0, 0, 0, 9],
        [0, 2, 0, 6, 0, 0, 0, 0, 7],
        [9, 8, 7, 0, 0, 0, 0, 0, 0],
    ]

    def test_invariants(self):
        for board in self.BOARDS:
            with self.subTest(board=board):
                result = solve(board, DEFAULT_PAYOUTS)
                k = board.count(0)
                self.assertEqual(result.total, math.factorial(k))
                evs = [lr.expected_value for lr in result.line_results]

                for lr in result.line_results:
                    self.assertEqual(sum(lr.sum_counts.values()), math.factorial(k))
                    self.assertEqual(sum(lr.payout_counts.values()), math.factorial(k))
                    self.assertAlmostEqual(sum(lr.sum_probabilities.values()), 1.0)
                    self.assertAlmostEqual(sum(lr.payout_probabilities.values()), 1.0)
                    weighted = sum(p * prob for p, prob in lr.payout_probabilities.items())
                    self.assertAlmostEqual(lr.expected_value, weighted)
                    self.assertEqual(lr.max_possible, max(lr.payout_counts))
                    self.assertEqual(set(lr.winning_scenarios), set(lr.payout_counts))
                    open_cells = [c for c in lr.cells if board[c] == 0]
                    for scenarios in lr.winning_scenarios.values():
                        for s in scenarios:
                            self.assertEqual(len(s), len(open_cells))
                            self.assertEqual(list(s), sorted(s))
                    if not open_cells:
                        self.assertEqual(list(lr.sum_probabilities.values()), [1.0])

                best = result.best_line_id
                self.assertEqual(evs[best], max(evs))
                self.assertEqual(best, evs.index(max(evs)))

                if k == 0:
                    self.assertIsNone(result.best_scratch_cell_id)
                else:
                    self.assertEqual(board[result.best_scratch_cell_id], 0)

    def test_calls_are_independent(self):
        board = [0, 0, 3, 0, 0, 0, 0, 0, 0]
        first = solve(board, DEFAULT_PAYOUTS).to_dict()
        solve(SCENARIO_A, {6: 1})
        self.assertEqual(solve(board, DEFAULT_PAYOUTS).to_dict(), first)


# ============================================================
# Input Validation
# ============================================================

class TestInputValidation(unittest.TestCase):

    def test_wrong_length(self):
        with self.assertRaises(InvalidInputError):
            solve([1, 2, 3], DEFAULT_PAYOUTS)
        with self.assertRaises(InvalidInputError):
            solve([0] * 10, DEFAULT_PAYOUTS)

    def test_out_of_range_cells(self):
        for bad in (10, -1, 42):
            board = [0] * 9
            board[4] = bad
            with self.subTest(value=bad), self.assertRaises(InvalidInputError):
                solve(board, DEFAULT_PAYOUTS)

    def test_non_integer_cells(self):
        with self.assertRaises(InvalidInputError):
            solve(["1", 0, 0, 0, 0, 0, 0, 0, 0], DEFAULT_PAYOUTS)
        with self.assertRaises(InvalidInputError):
            solve([1.5, 0, 0, 0, 0, 0, 0, 0, 0], DEFAULT_PAYOUTS)

    def test_non_sequence_board(self):
        with self.assertRaises(InvalidInputError):
            solve(42, DEFAULT_PAYOUTS)

    def test_invalid_input_is_value_error(self):
        with self.assertRaises(ValueError):
            solve([1, 2, 3], DEFAULT_PAYOUTS)

    def test_bad_payout_tables(self):
        with self.assertRaises(InvalidInputError):
            solve(SCENARIO_A, {6: -5})
        with self.assertRaises(InvalidInputError):
            solve(SCENARIO_A, None)
        with self.assertRaises(InvalidInputError):
            solve(SCENARIO_A, [1, 2, 3])

    def test_duplicates_lenient_by_default(self):
        board = [1, 1, 2, 3, 4, 5, 6, 0, 0]
        with self.assertLogs("cactpot.solver", level="WARNING") as logs:
            result = solve(board, DEFAULT_PAYOUTS, strict=False)
        self.assertTrue(any("repeats revealed values [1]" in m for m in logs.output))
        # pool is {7, 8, 9} for two cells: every ordering of three values is scanned
        self.assertEqual(result.total, 6)
        for lr in result.line_results:
            self.assertAlmostEqual(sum(lr.sum_probabilities.values()), 1.0)

    def test_duplicates_rejected_in_strict_mode(self):
        with self.assertRaises(InvalidInputError):
            solve([1, 1, 0, 0, 0, 0, 0, 0, 0], DEFAULT_PAYOUTS, strict=True)

    def test_board_state_helpers(self):
        state = BoardState(cells=[3, 0, 3, 0, 5, 5, 0, 0, 1])
        self.assertEqual(state.revealed_count, 5)
        self.assertEqual(state.duplicates(), [3, 5])

    def test_payout_table_helpers(self):
        table = PayoutTable()
        self.assertEqual(table.payout_for(6), 10000)
        self.assertEqual(table.payout_for(99), 0)
        custom = table.with_overrides({6: 1})
        self.assertEqual(custom.payout_for(6), 1)
        self.assertEqual(table.payout_for(6), 10000)


class TestSettings(unittest.TestCase):

    def test_summary_keys(self):
        summary = SolverConfig.summary()
        for key in ("log_level", "strict_board", "workers", "warn_empty_cells", "reveal_limit"):
            self.assertIn(key, summary)
        self.assertGreaterEqual(SolverConfig.WORKERS, 1)


# ============================================================
# Main
# ============================================================

if __name__ == "__main__":
    # Configure logging to suppress noise during tests
    logging.disable(logging.INFO)

    unittest.main(verbosity=2)
