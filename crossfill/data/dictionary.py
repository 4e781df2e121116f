"""Word-list indexing and candidate retrieval."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from ..core.constants import MIN_WORD_LENGTH
from .normalization import clean_word


class WordDomainIndex:
    """Groups normalized candidate words by length.

    Words keep their input order inside each length bucket; that order is
    the order in which the search tries candidates. Duplicate spellings are
    kept as separate entries; the solvers stop two slots from sharing one.
    """

    def __init__(self, words: Iterable[str], min_length: int = MIN_WORD_LENGTH) -> None:
        self.min_length = min_length
        self._by_length: Dict[int, List[str]] = defaultdict(list)
        # Positional index: length -> (position, letter) -> set of spellings
        self._position_index: Dict[int, Dict[Tuple[int, str], Set[str]]] = defaultdict(
            lambda: defaultdict(set)
        )
        self._size = 0
        for raw in words:
            self.add(raw)

    def add(self, raw: str) -> Optional[str]:
        """Normalize and index ``raw``; return the stored word or ``None`` if dropped."""
        word = clean_word(raw)
        if len(word) < self.min_length:
            return None
        self._by_length[len(word)].append(word)
        length_index = self._position_index[len(word)]
        for pos, char in enumerate(word):
            length_index[(pos, char)].add(word)
        self._size += 1
        return word

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def bucket(self, length: int) -> List[str]:
        """Return the words of exactly ``length`` letters, in input order."""
        return list(self._by_length.get(length, ()))

    def lengths(self) -> List[int]:
        return sorted(length for length, words in self._by_length.items() if words)

    def distinct_words(self) -> List[str]:
        """Every distinct spelling, in first-seen order within increasing length."""
        seen: Set[str] = set()
        ordered: List[str] = []
        for length in self.lengths():
            for word in self._by_length[length]:
                if word not in seen:
                    seen.add(word)
                    ordered.append(word)
        return ordered

    def matching(self, length: int, pattern: Optional[Sequence[Optional[str]]] = None) -> List[str]:
        """Return distinct words of ``length`` agreeing with the known letters of ``pattern``.

        ``pattern`` holds a letter or ``None`` for each position. The result
        keeps bucket order.
        """

        bucket = self._by_length.get(length)
        if not bucket:
            return []
        allowed = self._index_lookup(length, pattern)
        result: List[str] = []
        seen: Set[str] = set()
        for word in bucket:
            if word in seen or (allowed is not None and word not in allowed):
                continue
            seen.add(word)
            result.append(word)
        return result

    def _index_lookup(
        self,
        length: int,
        pattern: Optional[Sequence[Optional[str]]],
    ) -> Optional[Set[str]]:
        """Intersect positional sets; ``None`` means "no letter constraint"."""
        if not pattern:
            return None
        length_index = self._position_index.get(length, {})
        constraints: List[Set[str]] = []
        for pos, letter in enumerate(pattern):
            if letter is None:
                continue
            match_set = length_index.get((pos, letter))
            if not match_set:
                return set()
            constraints.append(match_set)
        if not constraints:
            return None

        # Intersect smallest sets first for speed
        constraints.sort(key=len)
        result = set(constraints[0])
        for s in constraints[1:]:
            result &= s
            if not result:
                break
        return result

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[str]:
        for length in self.lengths():
            yield from self._by_length[length]

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str):
            return False
        cleaned = clean_word(word)
        return cleaned in self._by_length.get(len(cleaned), ())
