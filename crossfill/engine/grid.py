"""Immutable grid representation and helper utilities."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..core.constants import ALPHABET, Bounds
from ..core.exceptions import MalformedInputError
from ..core.models import Cell


class GridModel:
    """Rectangular, read-only matrix of :class:`Cell` objects.

    The constructor validates the shape (at least one row and one column,
    every row the same length) and the pre-filled letters, so downstream
    engines can rely on a well-formed grid.
    """

    def __init__(self, cells: Sequence[Sequence[Cell]]) -> None:
        rows = [tuple(row) for row in cells]
        if not rows or not rows[0]:
            raise MalformedInputError("Grid must have at least one row and one column")
        width = len(rows[0])
        for index, row in enumerate(rows):
            if len(row) != width:
                raise MalformedInputError(
                    f"Grid is not rectangular: row {index} has {len(row)} cells, expected {width}"
                )
            for col, cell in enumerate(row):
                self._check_cell(index, col, cell)
        self._cells: Tuple[Tuple[Cell, ...], ...] = tuple(rows)
        self.bounds = Bounds(rows=len(rows), cols=width)

    @staticmethod
    def _check_cell(row: int, col: int, cell: Cell) -> None:
        if not isinstance(cell, Cell):
            raise MalformedInputError(f"Unexpected cell value at ({row},{col}): {cell!r}")
        if cell.letter is None:
            return
        if cell.blocked:
            raise MalformedInputError(f"Blocked cell at ({row},{col}) carries letter '{cell.letter}'")
        if len(cell.letter) != 1 or cell.letter not in ALPHABET:
            raise MalformedInputError(f"Invalid letter '{cell.letter}' at ({row},{col})")

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def blank(cls, rows: int, cols: int, blocked: bool = True) -> "GridModel":
        """Return a grid where every cell is blocked (default) or open."""
        return cls([[Cell(blocked=blocked) for _ in range(cols)] for _ in range(rows)])

    @classmethod
    def from_strings(cls, lines: Iterable[str]) -> "GridModel":
        """Build a grid from compact rows: ``#`` blocked, ``.`` open, ``A-Z`` pre-filled."""
        rows: List[List[Cell]] = []
        for line in lines:
            row: List[Cell] = []
            for char in line:
                if char == "#":
                    row.append(Cell(blocked=True))
                elif char == ".":
                    row.append(Cell())
                else:
                    row.append(Cell(letter=char.upper()))
            rows.append(row)
        return cls(rows)

    def with_letters(self, letters: Dict[Tuple[int, int], str]) -> "GridModel":
        """Return a copy with ``{(row, col): letter}`` written into open cells."""
        rows: List[List[Cell]] = []
        for r, row in enumerate(self._cells):
            new_row: List[Cell] = []
            for c, cell in enumerate(row):
                letter = letters.get((r, c))
                if letter is None or cell.blocked:
                    new_row.append(cell)
                else:
                    new_row.append(Cell(blocked=False, letter=letter))
            rows.append(new_row)
        return GridModel(rows)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self.bounds.rows

    @property
    def cols(self) -> int:
        return self.bounds.cols

    def cell(self, row: int, col: int) -> Cell:
        return self._cells[row][col]

    def is_blocked(self, row: int, col: int) -> bool:
        return self._cells[row][col].blocked

    def letter(self, row: int, col: int) -> Optional[str]:
        return self._cells[row][col].letter

    def iter_rows(self) -> Iterator[Tuple[Cell, ...]]:
        return iter(self._cells)

    def open_count(self) -> int:
        return sum(1 for row in self._cells for cell in row if cell.is_open())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridModel):
            return NotImplemented
        return self._cells == other._cells

    def __hash__(self) -> int:
        return hash(self._cells)

    def __repr__(self) -> str:
        return f"GridModel({self.rows}x{self.cols})"

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------
    def to_strings(self) -> List[str]:
        """Inverse of :meth:`from_strings`."""
        return [
            "".join("#" if cell.blocked else (cell.letter or ".") for cell in row)
            for row in self._cells
        ]

    def to_jsonable(self) -> List[List[dict]]:
        return [
            [{"blocked": cell.blocked, "letter": cell.letter} for cell in row]
            for row in self._cells
        ]
