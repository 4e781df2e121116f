"""CP-SAT crossword filling solver using OR-Tools.

The same slot/crossing/word problem the native engine searches is stated
declaratively here and handed to the CP-SAT evaluator:

* one word variable per slot, ranging over the ids of the distinct words of
  matching length (and matching any pre-filled letters);
* one letter variable per slot offset, tied to the word variable through a
  table constraint;
* an all-different constraint over the word variables;
* one equality per crossing constraint between the two letter variables.
"""

from __future__ import annotations

import functools
import threading
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from ortools.sat.python import cp_model

from ..core.constants import ALPHABET
from ..core.exceptions import SolverUnavailableError
from ..core.models import CrossConstraint, Slot
from ..data.dictionary import WordDomainIndex
from ..utils.logger import get_logger
from .constraints import build_crossing_index

LOGGER = get_logger(__name__)


class ConstraintSolver(Protocol):
    """Capability implemented by every solving engine."""

    name: str

    def solve(
        self,
        slots: Sequence[Slot],
        constraints: Sequence[CrossConstraint],
        index: WordDomainIndex,
    ) -> Optional[Dict[int, str]]:
        """Return a full assignment, or ``None`` when none exists."""


# ----------------------------------------------------------------------
# Readiness handle
# ----------------------------------------------------------------------
def _probe_cpsat() -> bool:
    """Solve a one-variable model to prove the native CP-SAT library works."""
    model = cp_model.CpModel()
    probe = model.new_int_var(0, 1, "probe")
    model.add(probe == 1)
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = 5.0
    solver.parameters.num_workers = 1
    status = solver.solve(model)
    return status == cp_model.OPTIMAL and solver.value(probe) == 1


class EngineReadiness:
    """Memoized "ready or unavailable" answer for the CP-SAT evaluator.

    The probe runs at most once per handle and is never retried; later calls
    return the cached answer.
    """

    def __init__(self, probe: Optional[Callable[[], bool]] = None) -> None:
        self._probe = probe or _probe_cpsat
        self._lock = threading.Lock()
        self._ready: Optional[bool] = None
        self.reason: Optional[str] = None

    def is_ready(self) -> bool:
        with self._lock:
            if self._ready is None:
                self._ready = self._run_probe()
            return self._ready

    def _run_probe(self) -> bool:
        try:
            ready = bool(self._probe())
        except Exception as exc:
            self.reason = f"{type(exc).__name__}: {exc}"
            LOGGER.warning("CP-SAT evaluator failed to initialize: %s", self.reason)
            return False
        if not ready:
            self.reason = "probe model was not solved"
            LOGGER.warning("CP-SAT evaluator unavailable: %s", self.reason)
        else:
            LOGGER.debug("CP-SAT evaluator ready")
        return ready


@functools.lru_cache(maxsize=None)
def default_readiness() -> EngineReadiness:
    """Process-wide readiness handle shared by callers that do not inject one."""
    return EngineReadiness()


# ----------------------------------------------------------------------
# Adapter
# ----------------------------------------------------------------------
class CpSatSolverAdapter:
    """Declarative engine: builds a CP-SAT model and reads back one solution."""

    name = "cpsat"

    def __init__(
        self,
        readiness: Optional[EngineReadiness] = None,
        timeout: float = 30.0,
        num_workers: int = 4,
        random_seed: int = 0,
    ) -> None:
        self.readiness = readiness or default_readiness()
        self.timeout = timeout
        self.num_workers = num_workers
        self.random_seed = random_seed

    def solve(
        self,
        slots: Sequence[Slot],
        constraints: Sequence[CrossConstraint],
        index: WordDomainIndex,
    ) -> Optional[Dict[int, str]]:
        """Fill ``slots`` via CP-SAT.

        Returns:
            ``slot id -> word``, or ``None`` when CP-SAT proves the problem
            infeasible.

        Raises:
            SolverUnavailableError: the evaluator is not ready, or it stopped
                without a conclusive answer (time-out, invalid model).
        """

        if not self.readiness.is_ready():
            raise SolverUnavailableError(f"CP-SAT unavailable: {self.readiness.reason}")
        if not slots:
            return None

        # Validates references before the model is built
        build_crossing_index(slots, constraints)

        vocabulary = index.distinct_words()
        word_ids = {word: wid for wid, word in enumerate(vocabulary)}

        model = cp_model.CpModel()
        word_vars: Dict[int, cp_model.IntVar] = {}
        letter_vars: Dict[int, List[cp_model.IntVar]] = {}

        # ------------------------------------------------------------------
        # Step 1: word and letter variables, tied by a table constraint
        # ------------------------------------------------------------------
        for slot in slots:
            candidates = index.matching(slot.length, slot.pattern)
            if not candidates:
                LOGGER.info(
                    "CP-SAT: slot %d at (%d,%d) dir=%s len=%d has no candidates",
                    slot.id, slot.row, slot.col, slot.direction.value, slot.length,
                )
                return None

            ids = [word_ids[word] for word in candidates]
            word_var = model.new_int_var_from_domain(
                cp_model.Domain.from_values(ids), f"W_{slot.id}"
            )
            letters = [
                model.new_int_var(0, len(ALPHABET) - 1, f"L_{slot.id}_{k}")
                for k in range(slot.length)
            ]
            tuples = [[word_ids[word]] + [_letter_value(ch) for ch in word] for word in candidates]
            model.add_allowed_assignments([word_var] + letters, tuples)
            word_vars[slot.id] = word_var
            letter_vars[slot.id] = letters

        # ------------------------------------------------------------------
        # Step 2: uniqueness and crossings
        # ------------------------------------------------------------------
        if len(word_vars) > 1:
            model.add_all_different(list(word_vars.values()))
        for cons in constraints:
            model.add(letter_vars[cons.slot_a][cons.offset_a] == letter_vars[cons.slot_b][cons.offset_b])

        # ------------------------------------------------------------------
        # Step 3: solve
        # ------------------------------------------------------------------
        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.timeout
        solver.parameters.num_workers = self.num_workers
        solver.parameters.random_seed = self.random_seed

        LOGGER.info(
            "CP-SAT: %d slots, %d constraints, %d distinct words, solving (timeout=%0.1fs)...",
            len(slots), len(constraints), len(vocabulary), self.timeout,
        )
        status = solver.solve(model)

        if status == cp_model.INFEASIBLE:
            LOGGER.info("CP-SAT: problem proven infeasible in %.2fs", solver.wall_time)
            return None
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            raise SolverUnavailableError(
                f"CP-SAT stopped without an answer (status={solver.status_name(status)})"
            )

        LOGGER.info("CP-SAT: solution found in %.2fs", solver.wall_time)
        return {slot_id: vocabulary[solver.value(var)] for slot_id, var in word_vars.items()}


def _letter_value(char: str) -> int:
    return ord(char) - ord("A")
