"""Native MRV backtracking search for filling crossword slots."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..core.exceptions import SearchBudgetExceeded
from ..core.models import CrossConstraint, Crossing, Slot
from ..data.dictionary import WordDomainIndex
from ..utils.logger import get_logger
from .constraints import build_crossing_index

LOGGER = get_logger(__name__)


@dataclass
class SearchBudget:
    """Optional limits on a single native search.

    ``max_nodes`` counts tentative word assignments; ``time_limit`` is a
    wall-clock limit in seconds. ``None`` disables a limit.
    """

    max_nodes: Optional[int] = None
    time_limit: Optional[float] = None


@dataclass
class _SearchContext:
    """Mutable state owned by exactly one ``solve`` call."""

    slots: List[Slot]
    static_domains: Dict[int, List[str]]
    crossings: Dict[int, List[Crossing]]
    budget: SearchBudget
    assignment: Dict[int, str] = field(default_factory=dict)
    used: Set[str] = field(default_factory=set)
    nodes: int = 0
    deadline: Optional[float] = None


class BacktrackingSolver:
    """Depth-first search with the minimum-remaining-values heuristic.

    The solver object holds configuration only, so one instance may serve
    concurrent calls: every :meth:`solve` builds its own search context.
    """

    name = "native"

    def __init__(self, budget: Optional[SearchBudget] = None) -> None:
        self.budget = budget or SearchBudget()

    def solve(
        self,
        slots: Sequence[Slot],
        constraints: Sequence[CrossConstraint],
        index: WordDomainIndex,
    ) -> Optional[Dict[int, str]]:
        """Return ``slot id -> word`` for every slot, or ``None`` if unsatisfiable.

        Raises :class:`SearchBudgetExceeded` when the budget runs out before
        the search space is exhausted.
        """

        if not slots:
            return None

        crossings = build_crossing_index(slots, constraints)
        # Length and fixed letters never change during the search
        static_domains = {
            slot.id: index.matching(slot.length, slot.pattern)
            for slot in slots
        }
        ctx = _SearchContext(
            slots=sorted(slots, key=lambda s: s.id),
            static_domains=static_domains,
            crossings=crossings,
            budget=self.budget,
        )
        if self.budget.time_limit is not None:
            ctx.deadline = time.monotonic() + self.budget.time_limit

        LOGGER.info(
            "Native search: %d slots, %d constraints, %d words",
            len(slots), len(constraints), len(index),
        )
        started = time.monotonic()
        solved = self._backtrack(ctx)
        elapsed = time.monotonic() - started
        if not solved:
            LOGGER.info("Native search exhausted after %d nodes (%.2fs): no solution", ctx.nodes, elapsed)
            return None
        LOGGER.info("Native search: solution found after %d nodes (%.2fs)", ctx.nodes, elapsed)
        return dict(ctx.assignment)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def _backtrack(self, ctx: _SearchContext) -> bool:
        picked = self._pick_next(ctx)
        if picked is None:
            return True
        slot, domain = picked
        if not domain:
            LOGGER.debug("Dead end at slot %d (len=%d): empty domain", slot.id, slot.length)
            return False

        for word in domain:
            self._charge_node(ctx)
            ctx.assignment[slot.id] = word
            ctx.used.add(word)
            if self._backtrack(ctx):
                return True
            del ctx.assignment[slot.id]
            ctx.used.discard(word)
        return False

    def _pick_next(self, ctx: _SearchContext) -> Optional[Tuple[Slot, List[str]]]:
        """Choose the unassigned slot with the smallest domain (lowest id on ties)."""
        best: Optional[Tuple[Slot, List[str]]] = None
        for slot in ctx.slots:
            if slot.id in ctx.assignment:
                continue
            domain = self._domain_for(ctx, slot)
            if not domain:
                return slot, domain
            if best is None or len(domain) < len(best[1]):
                best = (slot, domain)
        return best

    @staticmethod
    def _domain_for(ctx: _SearchContext, slot: Slot) -> List[str]:
        anchors = [
            (crossing.this_offset, ctx.assignment[crossing.other_id][crossing.other_offset])
            for crossing in ctx.crossings[slot.id]
            if crossing.other_id in ctx.assignment
        ]
        return [
            word
            for word in ctx.static_domains[slot.id]
            if word not in ctx.used and all(word[offset] == letter for offset, letter in anchors)
        ]

    @staticmethod
    def _charge_node(ctx: _SearchContext) -> None:
        ctx.nodes += 1
        limit = ctx.budget.max_nodes
        if limit is not None and ctx.nodes > limit:
            raise SearchBudgetExceeded(f"Native search exceeded {limit} nodes", nodes=ctx.nodes)
        if ctx.deadline is not None and time.monotonic() > ctx.deadline:
            raise SearchBudgetExceeded(
                f"Native search exceeded {ctx.budget.time_limit:.1f}s", nodes=ctx.nodes
            )
