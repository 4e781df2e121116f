"""Write a solved assignment back onto grid coordinates."""

from __future__ import annotations

from typing import Dict, Mapping, Sequence, Tuple

from ..core.exceptions import ProjectionError
from ..core.models import Slot
from .grid import GridModel


def project_solution(grid: GridModel, slots: Sequence[Slot], mapping: Mapping[int, str]) -> GridModel:
    """Return a new grid with every slot's word written into its cells.

    Raises :class:`ProjectionError` when a slot has no word, a word does not
    fit its slot, or two words disagree on a shared cell (including a
    pre-filled letter of the source grid).
    """

    letters: Dict[Tuple[int, int], str] = {}
    owners: Dict[Tuple[int, int], int] = {}
    for slot in slots:
        word = mapping.get(slot.id)
        if word is None:
            raise ProjectionError(f"No word assigned to slot {slot.id}")
        if len(word) != slot.length:
            raise ProjectionError(
                f"Word '{word}' does not fit slot {slot.id} of length {slot.length}"
            )
        for (row, col), char in zip(slot.cells, word):
            if not grid.bounds.contains(row, col) or grid.is_blocked(row, col):
                raise ProjectionError(f"Slot {slot.id} covers unusable cell ({row},{col})")
            existing = letters.get((row, col)) or grid.letter(row, col)
            if existing is not None and existing != char:
                source = f"slot {owners[(row, col)]}" if (row, col) in owners else "the grid"
                raise ProjectionError(
                    f"Conflicting letters at ({row},{col}): '{existing}' from {source} "
                    f"vs '{char}' from slot {slot.id}"
                )
            letters[(row, col)] = char
            owners[(row, col)] = slot.id
    return grid.with_letters(letters)
