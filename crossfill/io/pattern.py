"""Readers for grid pattern files and word-list files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List

from ..core.exceptions import PatternParseError, WordListError
from ..core.models import Cell
from ..data.normalization import split_words
from ..engine.grid import GridModel
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

OPEN_TOKENS = {"1", "."}
COMPACT_ROW_RE = re.compile(r"^[01#.A-Za-z]+$")
LETTER_RE = re.compile(r"^[A-Z]$")


def _tokenize(line: str) -> List[str]:
    tokens = line.split(",") if "," in line else line.split()
    if len(tokens) == 1 and COMPACT_ROW_RE.match(tokens[0]):
        return list(tokens[0])
    return tokens


def _token_to_cell(token: str) -> Cell:
    token = token.strip().upper()
    if token in OPEN_TOKENS:
        return Cell()
    if LETTER_RE.match(token):
        return Cell(letter=token)
    return Cell(blocked=True)


def parse_pattern_text(text: str) -> GridModel:
    """Turn a line-based block pattern into a grid.

    ``1`` or ``.`` open a cell, a single letter opens it pre-filled, anything
    else (``0``, ``#``, ...) blocks it. Rows may be compact (``1101``), comma
    separated or whitespace separated; short rows are padded with blocked
    cells up to the widest row.

    Letters are never block markers: ``X.X`` is one three-cell slot whose
    ends are pre-filled with ``X``. Write blocks as ``0`` or ``#``.
    """

    lines = [line.strip() for line in (text or "").splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        raise PatternParseError("Pattern text is empty")

    rows_tokens = [_tokenize(line) for line in lines]
    width = max(len(tokens) for tokens in rows_tokens)
    rows: List[List[Cell]] = []
    for tokens in rows_tokens:
        row = [_token_to_cell(token) for token in tokens]
        row.extend(Cell(blocked=True) for _ in range(width - len(row)))
        rows.append(row)
    grid = GridModel(rows)
    LOGGER.debug("Parsed pattern %dx%d with %d open cells", grid.rows, grid.cols, grid.open_count())
    return grid


def read_pattern_file(path: Path | str) -> GridModel:
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PatternParseError(f"Cannot read pattern file {source}: {exc}") from exc
    return parse_pattern_text(text)


def read_words_file(path: Path | str) -> List[str]:
    """Read words from a file, one entry per line. Blank lines and # comments are skipped."""
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise WordListError(f"Cannot read words file {source}: {exc}") from exc

    entries: List[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        entries.extend(split_words(line))
    LOGGER.debug("Read %d words from %s", len(entries), source)
    return entries
