"""Shared helpers for word-list normalization."""

from __future__ import annotations

import re
from typing import List

from ..core.constants import MIN_WORD_LENGTH

WORD_RE = re.compile(r"[^A-Z]")
SEPARATOR_RE = re.compile(r"\r?\n|[;,]+")

DEFAULT_WORDS = (
    "PROLOG", "LINUX", "KERNEL", "PYTHON", "JAVA", "ARRAY", "QUEUE", "STACK",
    "GRAPH", "HEAP", "CLASS", "OBJECT", "THREAD", "LOCK", "MUTEX", "ATOMIC",
)


def clean_word(text: str) -> str:
    """Return ``text`` trimmed, uppercased and stripped of everything but A-Z."""

    if not text:
        return ""
    return WORD_RE.sub("", text.strip().upper())


def split_words(text: str) -> List[str]:
    """Split a free-form word list on newlines, commas and semicolons.

    Every entry is normalized with :func:`clean_word`; entries shorter than
    two letters are dropped. Input order and duplicates are preserved.
    """

    words: List[str] = []
    for chunk in SEPARATOR_RE.split(text or ""):
        word = clean_word(chunk)
        if len(word) >= MIN_WORD_LENGTH:
            words.append(word)
    return words


__all__ = ["clean_word", "split_words", "DEFAULT_WORDS"]
