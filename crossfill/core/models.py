"""Data models supporting the crossword filler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .constants import Direction


@dataclass(frozen=True)
class Cell:
    """Represents a grid cell: blocked, or open with an optional letter."""

    blocked: bool = False
    letter: Optional[str] = None

    def is_open(self) -> bool:
        return not self.blocked

    def is_empty(self) -> bool:
        return not self.blocked and self.letter is None


@dataclass(frozen=True)
class Slot:
    """A maximal open run of cells that holds exactly one word.

    ``pattern`` records the pre-filled letter (or ``None``) for every offset,
    captured from the grid when the slot was extracted.
    """

    id: int
    row: int
    col: int
    length: int
    direction: Direction
    pattern: Tuple[Optional[str], ...] = ()
    _cells: Optional[List[Tuple[int, int]]] = field(default=None, repr=False, compare=False, hash=False)

    @property
    def cells(self) -> List[Tuple[int, int]]:
        if self._cells is None:
            dr, dc = self.direction.step()
            cells = [(self.row + dr * i, self.col + dc * i) for i in range(self.length)]
            object.__setattr__(self, "_cells", cells)
        return self._cells  # type: ignore[return-value]

    def fixed_letters(self) -> Dict[int, str]:
        """Return ``offset -> letter`` for every pre-filled cell of the slot."""
        return {offset: letter for offset, letter in enumerate(self.pattern) if letter}


@dataclass(frozen=True)
class CrossConstraint:
    """Letter ``offset_a`` of ``slot_a`` must equal letter ``offset_b`` of ``slot_b``."""

    slot_a: int
    offset_a: int
    slot_b: int
    offset_b: int


@dataclass(frozen=True)
class Crossing:
    """Directed view of a constraint, as seen from one of its two slots."""

    other_id: int
    this_offset: int
    other_offset: int
