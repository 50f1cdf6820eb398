"""Orderings of the numbers still hidden on the board."""
import math
from typing import Iterator, Sequence


class Permutations:
    """Lazy sequence of all k! orderings of `items`.

    Iterating twice yields the same orderings in the same order; nothing is
    materialised. Items are expected to be distinct.
    """

    def __init__(self, items: Sequence[int]):
        self.items = tuple(items)

    def __len__(self) -> int:
        return math.factorial(len(self.items))

    def __iter__(self) -> Iterator[tuple]:
        return heap_permutations(self.items)

    def __repr__(self) -> str:
        return f"Permutations({list(self.items)})"


def heap_permutations(items: Sequence[int]) -> Iterator[tuple]:
    """Iterative Heap's algorithm. Each step is a single swap."""
    a = list(items)
    n = len(a)
    c = [0] * n
    yield tuple(a)
    i = 1
    while i < n:
        if c[i] < i:
            j = 0 if i % 2 == 0 else c[i]
            a[j], a[i] = a[i], a[j]
            yield tuple(a)
            c[i] += 1
            i = 1
        else:
            c[i] = 0
            i += 1


def insertion_permutations(items: Sequence[int]) -> list[tuple]:
    """Eager recursive-insertion variant: insert the head into every slot
    of each ordering of the tail. Used as a cross-check for small k."""
    if not items:
        return [()]
    head, rest = items[0], items[1:]
    out = []
    for perm in insertion_permutations(rest):
        for pos in range(len(perm) + 1):
            out.append(perm[:pos] + (head,) + perm[pos:])
    return out
