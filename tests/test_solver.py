import unittest
from unittest.mock import MagicMock, patch

from crossfill.core.constants import EngineChoice, SolveStatus
from crossfill.core.exceptions import (ProjectionError, SearchBudgetExceeded,
                                       SolverUnavailableError, ValidationError)
from crossfill.core.models import CrossConstraint
from crossfill.data.dictionary import WordDomainIndex
from crossfill.engine.constraints import build_cross_constraints
from crossfill.engine.filler import CrosswordFiller, FillerConfig, solve
from crossfill.engine.grid import GridModel
from crossfill.engine.projector import project_solution
from crossfill.engine.slots import extract_slots
from crossfill.engine.solver import CpSatSolverAdapter, EngineReadiness
from crossfill.engine.validator import AssignmentValidator

CROSS = ["...", "#.#", "..."]


def ready_handle(ready: bool) -> MagicMock:
    handle = MagicMock(spec=EngineReadiness)
    handle.is_ready.return_value = ready
    handle.reason = None if ready else "offline"
    return handle


class EngineReadinessTests(unittest.TestCase):
    def test_probe_runs_once(self) -> None:
        probe = MagicMock(return_value=True)
        readiness = EngineReadiness(probe=probe)
        self.assertTrue(readiness.is_ready())
        self.assertTrue(readiness.is_ready())
        probe.assert_called_once_with()

    def test_failed_probe_is_not_retried(self) -> None:
        probe = MagicMock(side_effect=RuntimeError("native library missing"))
        readiness = EngineReadiness(probe=probe)
        self.assertFalse(readiness.is_ready())
        self.assertFalse(readiness.is_ready())
        self.assertEqual(probe.call_count, 1)
        self.assertIn("native library missing", readiness.reason)

    def test_real_probe_succeeds(self) -> None:
        self.assertTrue(EngineReadiness().is_ready())


class CpSatAdapterTests(unittest.TestCase):
    def _solve(self, rows, words):
        grid = GridModel.from_strings(rows)
        slots = extract_slots(grid)
        constraints = build_cross_constraints(slots)
        adapter = CpSatSolverAdapter(readiness=EngineReadiness(), timeout=10.0, num_workers=1)
        return slots, constraints, adapter.solve(slots, constraints, WordDomainIndex(words))

    def test_solvable_cross(self) -> None:
        slots, constraints, mapping = self._solve(CROSS, ["CAT", "DOG", "AXO"])
        self.assertEqual(mapping, {0: "CAT", 1: "DOG", 2: "AXO"})
        self.assertTrue(AssignmentValidator().validate(slots, constraints, mapping).ok)

    def test_unsatisfiable_cross(self) -> None:
        _, _, mapping = self._solve(CROSS, ["CAT", "DOG", "AAA"])
        self.assertIsNone(mapping)

    def test_no_slots(self) -> None:
        _, _, mapping = self._solve(["##", "##"], ["AA"])
        self.assertIsNone(mapping)

    def test_duplicate_spellings_are_used_once(self) -> None:
        _, _, mapping = self._solve(["..", "##", ".."], ["AB", "AB"])
        self.assertIsNone(mapping)

    def test_prefilled_letters(self) -> None:
        _, _, mapping = self._solve(["..T"], ["CAB", "CAT"])
        self.assertEqual(mapping, {0: "CAT"})

    def test_square_grid(self) -> None:
        slots, constraints, mapping = self._solve(["..", ".."], ["AB", "CD", "AC", "BD", "XY"])
        self.assertIsNotNone(mapping)
        assert mapping is not None
        self.assertTrue(AssignmentValidator().validate(slots, constraints, mapping).ok)

    def test_unavailable_raises(self) -> None:
        slots = extract_slots(GridModel.from_strings(["..."]))
        adapter = CpSatSolverAdapter(readiness=ready_handle(False))
        with self.assertRaises(SolverUnavailableError):
            adapter.solve(slots, [], WordDomainIndex(["ABC"]))


class FillerTests(unittest.TestCase):
    def test_scenarios_with_default_engines(self) -> None:
        filler = CrosswordFiller(FillerConfig(num_workers=1))
        solved = filler.fill(GridModel.from_strings(CROSS), ["CAT", "DOG", "AXO"])
        self.assertEqual(solved.status, SolveStatus.SOLVED)
        self.assertEqual(solved.engine, "cpsat")
        self.assertEqual(solved.grid.to_strings(), ["CAT", "#X#", "DOG"])

        unsat = filler.fill(GridModel.from_strings(CROSS), ["CAT", "DOG", "AAA"])
        self.assertEqual(unsat.status, SolveStatus.UNSATISFIABLE)
        self.assertIsNone(unsat.grid)

        empty = filler.fill(GridModel.blank(2, 2), ["AA"])
        self.assertEqual(empty.status, SolveStatus.NO_SLOTS)

        row = filler.fill(GridModel.blank(1, 4, blocked=False), ["ABCD", "EFGH"])
        self.assertEqual(row.status, SolveStatus.SOLVED)
        self.assertIn(row.mapping[0], {"ABCD", "EFGH"})

    def test_falls_back_to_native_when_unavailable(self) -> None:
        filler = CrosswordFiller(FillerConfig(), readiness=ready_handle(False))
        result = filler.fill(GridModel.from_strings(CROSS), ["CAT", "DOG", "AXO"])
        self.assertEqual(result.status, SolveStatus.SOLVED)
        self.assertEqual(result.engine, "native")
        self.assertEqual(result.mapping, {0: "CAT", 1: "DOG", 2: "AXO"})

    def test_infeasible_answer_is_authoritative(self) -> None:
        declarative = MagicMock()
        declarative.name = "cpsat"
        declarative.solve.return_value = None
        native = MagicMock()
        native.name = "native"
        filler = CrosswordFiller(engines=[declarative, native])
        result = filler.fill(GridModel.from_strings(CROSS), ["CAT", "DOG", "AXO"])
        self.assertEqual(result.status, SolveStatus.UNSATISFIABLE)
        self.assertEqual(result.engine, "cpsat")
        native.solve.assert_not_called()

    def test_explicit_cpsat_does_not_fall_back(self) -> None:
        filler = CrosswordFiller(FillerConfig(engine=EngineChoice.CPSAT), readiness=ready_handle(False))
        with self.assertRaises(SolverUnavailableError):
            filler.fill(GridModel.from_strings(CROSS), ["CAT", "DOG", "AXO"])

    def test_native_only_config(self) -> None:
        filler = CrosswordFiller(FillerConfig(engine=EngineChoice.NATIVE))
        self.assertEqual([engine.name for engine in filler.engines], ["native"])

    def test_budget_exhaustion_is_inconclusive(self) -> None:
        config = FillerConfig(engine=EngineChoice.NATIVE, max_nodes=3)
        grid = GridModel.blank(2, 2, blocked=False)
        words = ["AB", "AC", "AD", "AE", "AF"]
        result = CrosswordFiller(config).fill(grid, words)
        self.assertEqual(result.status, SolveStatus.INCONCLUSIVE)
        with self.assertRaises(SearchBudgetExceeded):
            solve(grid, words, config)

    def test_native_search_has_no_default_time_limit(self) -> None:
        budget = FillerConfig().to_search_budget()
        self.assertIsNone(budget.time_limit)
        self.assertIsNone(budget.max_nodes)
        bounded = FillerConfig(max_nodes=10, native_time_limit=1.5).to_search_budget()
        self.assertEqual((bounded.max_nodes, bounded.time_limit), (10, 1.5))

    def test_invalid_engine_output_raises(self) -> None:
        broken = MagicMock()
        broken.name = "broken"
        broken.solve.return_value = {0: "CAT", 1: "CAT", 2: "AXO"}
        filler = CrosswordFiller(engines=[broken])
        with self.assertRaises(ValidationError):
            filler.fill(GridModel.from_strings(CROSS), ["CAT", "DOG", "AXO"])

    def test_from_env(self) -> None:
        env = {"CROSSFILL_ENGINE": "Native", "CROSSFILL_TIMEOUT": "2.5", "CROSSFILL_MAX_NODES": "100"}
        with patch.dict("os.environ", env):
            config = FillerConfig.from_env()
        self.assertEqual(config.engine, EngineChoice.NATIVE)
        self.assertEqual(config.timeout_seconds, 2.5)
        self.assertEqual(config.max_nodes, 100)


class SolveContractTests(unittest.TestCase):
    def test_solve_scenarios(self) -> None:
        grid = GridModel.from_strings(CROSS)
        mapping = solve(grid, ["cat", "dog", "a-x-o"])
        self.assertIsNotNone(mapping)
        self.assertIsNone(solve(grid, ["CAT", "DOG", "AAA"]))
        self.assertIsNone(solve(GridModel.blank(2, 2), ["AA"]))
        row = solve(GridModel.blank(1, 4, blocked=False), ["ABCD", "EFGH"])
        self.assertIsNotNone(row)
        self.assertEqual(len(row), 1)

    def test_engines_agree_on_satisfiability(self) -> None:
        cases = [
            (["..", ".."], ["AB", "CD", "AC", "BD"]),
            (["..", ".."], ["AB", "AC", "AD"]),
            (["...", ".#.", "..."], ["ABC", "CDE", "AFG", "GHE", "XYZ"]),
            (["...", ".#.", "..."], ["ABC", "CDE", "AFG", "GHX"]),
        ]
        native = FillerConfig(engine=EngineChoice.NATIVE)
        cpsat = FillerConfig(engine=EngineChoice.CPSAT, num_workers=1)
        for rows, words in cases:
            grid = GridModel.from_strings(rows)
            self.assertEqual(
                solve(grid, words, native) is None,
                solve(grid, words, cpsat) is None,
                msg=f"{rows} {words}",
            )


class ProjectorTests(unittest.TestCase):
    def test_projects_words_onto_cells(self) -> None:
        grid = GridModel.from_strings(CROSS)
        slots = extract_slots(grid)
        filled = project_solution(grid, slots, {0: "CAT", 1: "DOG", 2: "AXO"})
        self.assertEqual(filled.to_strings(), ["CAT", "#X#", "DOG"])
        self.assertEqual(grid.to_strings(), CROSS)

    def test_conflicting_crossing_raises(self) -> None:
        grid = GridModel.from_strings(CROSS)
        slots = extract_slots(grid)
        with self.assertRaises(ProjectionError):
            project_solution(grid, slots, {0: "CAT", 1: "DOG", 2: "EXO"})

    def test_conflict_with_prefilled_letter_raises(self) -> None:
        grid = GridModel.from_strings(["..T"])
        with self.assertRaises(ProjectionError):
            project_solution(grid, extract_slots(grid), {0: "CAB"})

    def test_missing_word_raises(self) -> None:
        grid = GridModel.from_strings(CROSS)
        with self.assertRaises(ProjectionError):
            project_solution(grid, extract_slots(grid), {0: "CAT", 1: "DOG"})


class ValidatorTests(unittest.TestCase):
    def test_reports_crossing_mismatch(self) -> None:
        grid = GridModel.from_strings(CROSS)
        slots = extract_slots(grid)
        result = AssignmentValidator().validate(
            slots, build_cross_constraints(slots), {0: "CAT", 1: "DOG", 2: "EXO"}
        )
        self.assertFalse(result.ok)
        self.assertIn("Crossing mismatch", result.messages[0])

    def test_reports_length_and_unknown_slots(self) -> None:
        grid = GridModel.from_strings(["..."])
        slots = extract_slots(grid)
        validator = AssignmentValidator()
        self.assertFalse(validator.validate(slots, [], {0: "CATS"}).ok)
        self.assertFalse(validator.validate(slots, [], {0: "CAT", 3: "DOG"}).ok)
        self.assertFalse(validator.validate(slots, [CrossConstraint(0, 0, 0, 1)], {0: "CAT"}).ok)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
