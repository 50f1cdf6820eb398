"""
CACTPOT — Input Schema

Pydantic models for the two inputs of a solve: the 3×3 board and the
payout table. Validation here is structural only (shape, ranges, types);
whether a board could actually occur in play is the caller's business,
except for the optional duplicate check used by strict mode.

Usage:
    from config.cactpot_schema import BoardState, PayoutTable, DEFAULT_PAYOUTS
    board = BoardState(cells=[1, 0, 0, 0, 5, 0, 0, 0, 9])
    table = PayoutTable(payouts=DEFAULT_PAYOUTS)
"""

from __future__ import annotations

from collections import Counter
from pydantic import BaseModel, Field, StrictInt, ValidationError, field_validator


BOARD_SIZE = 9
MIN_CELL = 0          # 0 = unrevealed
MAX_CELL = 9
MIN_LINE_SUM = 6      # 1 + 2 + 3
MAX_LINE_SUM = 24     # 7 + 8 + 9


# ═══════════════════════════════════════════════════════════════
# Default payout table (line sum → reward)
# ═══════════════════════════════════════════════════════════════

DEFAULT_PAYOUTS: dict[int, int] = {
    6: 10000,
    7: 36,
    8: 720,
    9: 360,
    10: 80,
    11: 252,
    12: 108,
    13: 72,
    14: 54,
    15: 180,
    16: 72,
    17: 180,
    18: 119,
    19: 36,
    20: 306,
    21: 1080,
    22: 144,
    23: 1800,
    24: 3600,
}


# ═══════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════

class InvalidInputError(ValueError):
    """Board or payout table is structurally malformed."""

    @classmethod
    def from_validation(cls, exc: ValidationError) -> "InvalidInputError":
        errors = exc.errors()
        if not errors:
            return cls(str(exc))
        first = errors[0]
        loc = ".".join(str(p) for p in first.get("loc", ()))
        msg = first.get("msg", "invalid value")
        return cls(f"{loc}: {msg}" if loc else msg)


# ═══════════════════════════════════════════════════════════════
# Models
# ═══════════════════════════════════════════════════════════════

class BoardState(BaseModel):
    """Nine cells in row-major order; 0 marks an unrevealed cell."""
    cells: list[StrictInt] = Field(min_length=BOARD_SIZE, max_length=BOARD_SIZE)

    @field_validator("cells")
    @classmethod
    def _cells_in_range(cls, v: list[int]) -> list[int]:
        for idx, value in enumerate(v):
            if not MIN_CELL <= value <= MAX_CELL:
                raise ValueError(
                    f"cell {idx} = {value} is outside [{MIN_CELL}, {MAX_CELL}]")
        return v

    @property
    def revealed(self) -> list[int]:
        return [v for v in self.cells if v != 0]

    @property
    def revealed_count(self) -> int:
        return len(self.revealed)

    def duplicates(self) -> list[int]:
        """Revealed values that appear more than once, ascending."""
        counts = Counter(self.revealed)
        return sorted(v for v, n in counts.items() if n > 1)


class PayoutTable(BaseModel):
    """Line sum → payout. Sums without an entry pay 0."""
    payouts: dict[int, StrictInt] = Field(default_factory=lambda: dict(DEFAULT_PAYOUTS))

    @field_validator("payouts")
    @classmethod
    def _non_negative(cls, v: dict[int, int]) -> dict[int, int]:
        for total, payout in v.items():
            if payout < 0:
                raise ValueError(f"payout for sum {total} is negative ({payout})")
        return v

    def payout_for(self, total: int) -> int:
        return self.payouts.get(total, 0)

    def with_overrides(self, overrides: dict[int, int]) -> "PayoutTable":
        merged = dict(self.payouts)
        merged.update(overrides)
        return PayoutTable(payouts=merged)
