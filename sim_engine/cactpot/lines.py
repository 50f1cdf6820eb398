"""Scoring lines of the 3×3 board.

Cell indices:
    0 1 2
    3 4 5
    6 7 8
"""
from enum import IntEnum


class LineType(IntEnum):
    ROW_0 = 0
    ROW_1 = 1
    ROW_2 = 2
    COL_0 = 3
    COL_1 = 4
    COL_2 = 5
    DIAG_MAIN = 6  # top-left → bottom-right
    DIAG_ANTI = 7  # top-right → bottom-left


LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

LINE_LABELS = (
    "Row 1", "Row 2", "Row 3",
    "Col 1", "Col 2", "Col 3",
    "TL-BR", "TR-BL",
)

# cell index → ids of every line passing through it
CELL_LINES: tuple[tuple[int, ...], ...] = tuple(
    tuple(line_id for line_id, cells in enumerate(LINES) if cell in cells)
    for cell in range(9)
)


def lines_through(cell: int) -> tuple[int, ...]:
    """Line ids containing `cell`: 4 for the centre, 3 for corners, 2 for edges."""
    return CELL_LINES[cell]
