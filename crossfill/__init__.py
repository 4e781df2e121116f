"""Crossword filler: assigns words from a list to the slots of a given grid.

This package exposes the public API surface via:

- ``crossfill.engine.filler.solve``: minimal ``grid, words -> mapping or None``.
- ``crossfill.engine.filler.CrosswordFiller``: full pipeline with a
  distinguishing :class:`FillResult` (solved / no slots / unsatisfiable /
  inconclusive).
- ``crossfill.engine.grid.GridModel``: the immutable input grid.
- ``crossfill.data.dictionary.WordDomainIndex``: normalized word list by length.
"""

from .core.constants import Direction, EngineChoice, SolveStatus
from .core.models import Cell, CrossConstraint, Slot
from .data.dictionary import WordDomainIndex
from .engine.filler import CrosswordFiller, FillerConfig, FillResult, solve
from .engine.grid import GridModel

__all__ = [
    "Cell",
    "CrossConstraint",
    "CrosswordFiller",
    "Direction",
    "EngineChoice",
    "FillResult",
    "FillerConfig",
    "GridModel",
    "Slot",
    "SolveStatus",
    "WordDomainIndex",
    "solve",
]

__version__ = "0.1.0"
