"""
CACTPOT — Solver Configuration

Environment-driven knobs for the board solver and its terminal callers.
Values are read once at import time; a local `.env` file is honoured.

    CACTPOT_LOG_LEVEL          logging level for the CLI (default INFO)
    CACTPOT_STRICT_BOARD       reject duplicate revealed numbers (default off)
    CACTPOT_WORKERS            process-pool size used by solve() (default 1)
    CACTPOT_WARN_EMPTY_CELLS   warn when a board has more empty cells (default 6)
    CACTPOT_REVEAL_LIMIT       cells a player may reveal before choosing a line (default 4)
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).parent.parent


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ============================================================
# Solver Configuration
# ============================================================

class SolverConfig:

    LOG_LEVEL = os.getenv("CACTPOT_LOG_LEVEL", "INFO").upper()

    # --- Input policy ---
    # Off: duplicate revealed numbers are logged and tolerated.
    # On:  duplicates raise InvalidInputError.
    STRICT_BOARD = _env_flag("CACTPOT_STRICT_BOARD")

    # --- Enumeration ---
    # 9 empty cells = 362,880 candidate boards per solve.
    WORKERS = max(1, int(os.getenv("CACTPOT_WORKERS", "1")))
    WARN_EMPTY_CELLS = int(os.getenv("CACTPOT_WARN_EMPTY_CELLS", "6"))

    # --- Caller-side game policy ---
    REVEAL_LIMIT = int(os.getenv("CACTPOT_REVEAL_LIMIT", "4"))

    @classmethod
    def summary(cls) -> dict:
        """Return the active configuration as a plain dict."""
        return {
            "log_level": cls.LOG_LEVEL,
            "strict_board": cls.STRICT_BOARD,
            "workers": cls.WORKERS,
            "warn_empty_cells": cls.WARN_EMPTY_CELLS,
            "reveal_limit": cls.REVEAL_LIMIT,
        }
