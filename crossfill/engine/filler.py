"""Main crossword filling orchestration.

Pipeline: grid -> slots -> crossing constraints -> engine -> validation ->
projection. Engine selection and fallback are decided here and nowhere else.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.constants import EngineChoice, SolveStatus
from ..core.exceptions import SearchBudgetExceeded, SolverUnavailableError, ValidationError
from ..core.models import CrossConstraint, Slot
from ..data.dictionary import WordDomainIndex
from ..utils.logger import get_logger
from .backtracking import BacktrackingSolver, SearchBudget
from .constraints import build_cross_constraints
from .grid import GridModel
from .projector import project_solution
from .slots import extract_slots
from .solver import ConstraintSolver, CpSatSolverAdapter, EngineReadiness
from .validator import AssignmentValidator


LOGGER = get_logger(__name__)


@dataclass
class FillerConfig:
    """Engine selection and limits.

    ``timeout_seconds`` bounds CP-SAT only. The native search runs to
    completion unless ``max_nodes`` or ``native_time_limit`` is set.
    """

    engine: EngineChoice = EngineChoice.AUTO
    timeout_seconds: float = 30.0
    max_nodes: Optional[int] = None
    native_time_limit: Optional[float] = None
    num_workers: int = 4
    random_seed: int = 0
    validate_results: bool = True

    @classmethod
    def from_env(
        cls,
        engine_env: str = "CROSSFILL_ENGINE",
        timeout_env: str = "CROSSFILL_TIMEOUT",
        max_nodes_env: str = "CROSSFILL_MAX_NODES",
    ) -> "FillerConfig":
        """Build a config from environment variables, falling back to defaults."""
        config = cls()
        engine = os.environ.get(engine_env)
        if engine:
            config.engine = EngineChoice(engine.strip().lower())
        timeout = os.environ.get(timeout_env)
        if timeout:
            config.timeout_seconds = float(timeout)
        max_nodes = os.environ.get(max_nodes_env)
        if max_nodes:
            config.max_nodes = int(max_nodes)
        return config

    def to_search_budget(self) -> SearchBudget:
        return SearchBudget(max_nodes=self.max_nodes, time_limit=self.native_time_limit)


@dataclass
class FillResult:
    status: SolveStatus
    slots: List[Slot]
    constraints: List[CrossConstraint]
    mapping: Dict[int, str] = field(default_factory=dict)
    engine: Optional[str] = None
    grid: Optional[GridModel] = None
    messages: List[str] = field(default_factory=list)

    @property
    def solved(self) -> bool:
        return self.status == SolveStatus.SOLVED


class CrosswordFiller:
    """High-level orchestrator: slot discovery then engine dispatch."""

    def __init__(
        self,
        config: Optional[FillerConfig] = None,
        readiness: Optional[EngineReadiness] = None,
        engines: Optional[Sequence[ConstraintSolver]] = None,
    ) -> None:
        self.config = config or FillerConfig()
        self.readiness = readiness
        self.validator = AssignmentValidator()
        self.engines: List[ConstraintSolver] = list(engines) if engines is not None else self._default_engines()

    def _default_engines(self) -> List[ConstraintSolver]:
        native = BacktrackingSolver(self.config.to_search_budget())
        if self.config.engine == EngineChoice.NATIVE:
            return [native]
        declarative = CpSatSolverAdapter(
            readiness=self.readiness,
            timeout=self.config.timeout_seconds,
            num_workers=self.config.num_workers,
            random_seed=self.config.random_seed,
        )
        if self.config.engine == EngineChoice.CPSAT:
            return [declarative]
        return [declarative, native]

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def fill(self, grid: GridModel, words: Iterable[str]) -> FillResult:
        slots = extract_slots(grid)
        constraints = build_cross_constraints(slots)
        LOGGER.info(
            "Grid %dx%d: %d slots, %d crossing constraints",
            grid.rows, grid.cols, len(slots), len(constraints),
        )
        if not slots:
            return FillResult(status=SolveStatus.NO_SLOTS, slots=slots, constraints=constraints)

        index = words if isinstance(words, WordDomainIndex) else WordDomainIndex(words)
        mapping: Optional[Dict[int, str]] = None
        engine_name: Optional[str] = None
        for position, engine in enumerate(self.engines):
            has_fallback = position < len(self.engines) - 1
            try:
                mapping = engine.solve(slots, constraints, index)
            except SolverUnavailableError as exc:
                if not has_fallback:
                    raise
                LOGGER.warning("Engine '%s' unavailable, falling back: %s", engine.name, exc)
                continue
            except SearchBudgetExceeded as exc:
                LOGGER.warning("Engine '%s' gave up: %s", engine.name, exc)
                return FillResult(
                    status=SolveStatus.INCONCLUSIVE,
                    slots=slots,
                    constraints=constraints,
                    engine=engine.name,
                    messages=[str(exc)],
                )
            engine_name = engine.name
            break

        if mapping is None:
            LOGGER.info("No valid assignment exists (engine=%s)", engine_name)
            return FillResult(
                status=SolveStatus.UNSATISFIABLE,
                slots=slots,
                constraints=constraints,
                engine=engine_name,
            )

        if self.config.validate_results:
            validation = self.validator.validate(slots, constraints, mapping)
            if not validation.ok:
                raise ValidationError(
                    f"Engine '{engine_name}' produced an invalid assignment: {validation.messages}"
                )

        filled = project_solution(grid, slots, mapping)
        LOGGER.info("Crossword filled with %d words (engine=%s)", len(mapping), engine_name)
        return FillResult(
            status=SolveStatus.SOLVED,
            slots=slots,
            constraints=constraints,
            mapping=mapping,
            engine=engine_name,
            grid=filled,
        )


def solve(grid: GridModel, words: Iterable[str],
          config: Optional[FillerConfig] = None) -> Optional[Dict[int, str]]:
    """Return ``slot id -> word`` for every slot of ``grid``, or ``None``.

    ``None`` covers both "no slots" and "no valid assignment"; use
    :meth:`CrosswordFiller.fill` to tell them apart. An exhausted search
    budget raises :class:`SearchBudgetExceeded` instead of returning ``None``.
    """

    result = CrosswordFiller(config).fill(grid, words)
    if result.status == SolveStatus.INCONCLUSIVE:
        raise SearchBudgetExceeded("; ".join(result.messages) or "Search budget exhausted")
    if not result.solved:
        return None
    return result.mapping
