"""Shared constants and enumerations for the crossword filler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Direction(str, Enum):
    """Word directions supported by the grid."""

    HORIZONTAL = "H"
    VERTICAL = "V"

    def step(self) -> Tuple[int, int]:
        return (0, 1) if self is Direction.HORIZONTAL else (1, 0)


class EngineChoice(str, Enum):
    """Which solving engine(s) the filler may use."""

    AUTO = "auto"
    NATIVE = "native"
    CPSAT = "cpsat"


class SolveStatus(str, Enum):
    """Outcome of a fill attempt as seen by callers."""

    SOLVED = "SOLVED"
    NO_SLOTS = "NO_SLOTS"
    UNSATISFIABLE = "UNSATISFIABLE"
    INCONCLUSIVE = "INCONCLUSIVE"


ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
MIN_WORD_LENGTH = 2


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols
