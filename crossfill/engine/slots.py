"""Slot discovery: maximal open runs of the grid."""

from __future__ import annotations

from typing import List, Tuple

from ..core.constants import MIN_WORD_LENGTH, Direction
from ..core.models import Slot
from .grid import GridModel


def extract_slots(grid: GridModel) -> List[Slot]:
    """Derive every horizontal and vertical slot of ``grid``.

    Ids are assigned in discovery order: all horizontal slots first (row-major
    scan), then all vertical slots (column-major scan). Runs shorter than two
    cells are not slots. A grid without any qualifying run yields ``[]``.
    """

    slots: List[Slot] = []

    # Horizontal
    for r in range(grid.rows):
        c = 0
        while c < grid.cols:
            if grid.is_blocked(r, c):
                c += 1
                continue
            start = c
            while c < grid.cols and not grid.is_blocked(r, c):
                c += 1
            if c - start >= MIN_WORD_LENGTH:
                slots.append(_make_slot(grid, len(slots), r, start, c - start, Direction.HORIZONTAL))

    # Vertical
    for c in range(grid.cols):
        r = 0
        while r < grid.rows:
            if grid.is_blocked(r, c):
                r += 1
                continue
            start = r
            while r < grid.rows and not grid.is_blocked(r, c):
                r += 1
            if r - start >= MIN_WORD_LENGTH:
                slots.append(_make_slot(grid, len(slots), start, c, r - start, Direction.VERTICAL))

    return slots


def _make_slot(grid: GridModel, slot_id: int, row: int, col: int, length: int,
               direction: Direction) -> Slot:
    dr, dc = direction.step()
    pattern: Tuple = tuple(grid.letter(row + dr * i, col + dc * i) for i in range(length))
    return Slot(id=slot_id, row=row, col=col, length=length, direction=direction, pattern=pattern)
