"""Candidate boards: every way the hidden cells could be filled."""
from typing import Iterator, Optional, Sequence

from sim_engine.cactpot.permutations import Permutations

ALL_NUMBERS = tuple(range(1, 10))


def empty_cells(board: Sequence[int]) -> list[int]:
    """Indices of unrevealed cells, ascending."""
    return [idx for idx, v in enumerate(board) if v == 0]


def available_numbers(board: Sequence[int]) -> list[int]:
    """Numbers 1-9 not yet revealed, ascending."""
    used = {v for v in board if v != 0}
    return [n for n in ALL_NUMBERS if n not in used]


def complete(board: Sequence[int], ordering: Sequence[int],
             empties: Optional[Sequence[int]] = None) -> tuple:
    """Write `ordering` into the empty cells (ascending index order).

    Revealed cells are copied unchanged. If the ordering is longer than the
    number of empty cells (only possible for boards with duplicate revealed
    values) the surplus values are ignored.
    """
    if empties is None:
        empties = empty_cells(board)
    filled = list(board)
    for cell, value in zip(empties, ordering):
        filled[cell] = value
    return tuple(filled)


def iter_completions(board: Sequence[int], first: Optional[int] = None) -> Iterator[tuple]:
    """Yield every candidate board for `board`, lazily.

    With `first` set, only the candidates whose lowest-index empty cell holds
    that value are produced; the union over all available `first` values is
    the full candidate set.
    """
    empties = empty_cells(board)
    pool = available_numbers(board)
    if first is None:
        for ordering in Permutations(pool):
            yield complete(board, ordering, empties)
        return

    if first not in pool:
        raise ValueError(f"{first} is not available on this board")
    rest = [n for n in pool if n != first]
    for ordering in Permutations(rest):
        yield complete(board, (first,) + ordering, empties)


def completion_count(board: Sequence[int]) -> int:
    return len(Permutations(available_numbers(board)))
