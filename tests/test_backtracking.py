import unittest

from crossfill.core.exceptions import MalformedInputError, SearchBudgetExceeded
from crossfill.core.models import CrossConstraint
from crossfill.data.dictionary import WordDomainIndex
from crossfill.engine.backtracking import BacktrackingSolver, SearchBudget
from crossfill.engine.constraints import build_cross_constraints
from crossfill.engine.grid import GridModel
from crossfill.engine.slots import extract_slots
from crossfill.engine.validator import AssignmentValidator


def run_native(rows, words, budget=None):
    grid = GridModel.from_strings(rows)
    slots = extract_slots(grid)
    constraints = build_cross_constraints(slots)
    mapping = BacktrackingSolver(budget).solve(slots, constraints, WordDomainIndex(words))
    return slots, constraints, mapping


class BacktrackingScenarioTests(unittest.TestCase):
    def test_solvable_cross(self) -> None:
        slots, constraints, mapping = run_native(["...", "#.#", "..."], ["CAT", "DOG", "AXO"])
        self.assertEqual(mapping, {0: "CAT", 1: "DOG", 2: "AXO"})
        self.assertTrue(AssignmentValidator().validate(slots, constraints, mapping).ok)

    def test_unsatisfiable_cross(self) -> None:
        _, _, mapping = run_native(["...", "#.#", "..."], ["CAT", "DOG", "AAA"])
        self.assertIsNone(mapping)

    def test_no_slots(self) -> None:
        _, _, mapping = run_native(["##", "##"], ["AA"])
        self.assertIsNone(mapping)

    def test_single_row(self) -> None:
        slots, _, mapping = run_native(["...."], ["ABCD", "EFGH"])
        self.assertEqual(len(slots), 1)
        self.assertEqual(mapping, {0: "ABCD"})


class BacktrackingBehaviourTests(unittest.TestCase):
    def test_words_are_not_reused(self) -> None:
        # Two parallel 2-letter rows with no crossings need two distinct words
        _, _, mapping = run_native(["..", "##", ".."], ["AB", "AB"])
        self.assertIsNone(mapping)
        _, _, mapping = run_native(["..", "##", ".."], ["AB", "AB", "CD"])
        self.assertEqual(mapping, {0: "AB", 1: "CD"})

    def test_prefilled_letters_restrict_domain(self) -> None:
        _, _, mapping = run_native(["..T"], ["CAB", "CAT"])
        self.assertEqual(mapping, {0: "CAT"})
        _, _, mapping = run_native(["..Z"], ["CAB", "CAT"])
        self.assertIsNone(mapping)

    def test_smallest_domain_is_assigned_first(self) -> None:
        # Slot 1 (down, two letters) has two candidates against three for slot 0,
        # so it is filled first and its first word decides slot 0.
        _, _, mapping = run_native(["...", ".##"], ["ABC", "BCD", "CDE", "BX", "AX"])
        self.assertEqual(mapping, {0: "BCD", 1: "BX"})

    def test_domain_ties_go_to_lowest_slot_id(self) -> None:
        _, _, mapping = run_native(["..", ".#"], ["AB", "AC", "BA"])
        self.assertEqual(mapping, {0: "AB", 1: "AC"})

    def test_empty_static_domain_fails_fast(self) -> None:
        _, _, mapping = run_native(["...", "#.#", "..."], ["CAT", "DOG", "AXO", "ZZ"])
        self.assertIsNotNone(mapping)
        _, _, mapping = run_native(["....", "#.##", "#.##"], ["ABCD", "EFGH"])
        self.assertIsNone(mapping)

    def test_backtracks_past_first_choice(self) -> None:
        # ABC is tried first but no vertical word starts with B
        _, _, mapping = run_native(["...", "#.#", "#.#"], ["ABC", "XYZ", "YES"])
        self.assertEqual(mapping, {0: "XYZ", 1: "YES"})

    def test_square_grid_all_constraints_hold(self) -> None:
        words = ["AB", "CD", "AC", "BD", "XY"]
        slots, constraints, mapping = run_native(["..", ".."], words)
        self.assertIsNotNone(mapping)
        assert mapping is not None
        self.assertTrue(AssignmentValidator().validate(slots, constraints, mapping).ok)
        self.assertEqual(len(set(mapping.values())), len(slots))

    def test_deterministic(self) -> None:
        words = ["AB", "CD", "AC", "BD", "BA", "DC", "CA", "DB"]
        first = run_native(["..", ".."], words)[2]
        for _ in range(3):
            self.assertEqual(run_native(["..", ".."], words)[2], first)

    def test_solver_instance_is_reusable(self) -> None:
        solver = BacktrackingSolver()
        grid = GridModel.from_strings(["...", "#.#", "..."])
        slots = extract_slots(grid)
        constraints = build_cross_constraints(slots)
        first = solver.solve(slots, constraints, WordDomainIndex(["CAT", "DOG", "AXO"]))
        second = solver.solve(slots, constraints, WordDomainIndex(["CAT", "DOG", "AAA"]))
        third = solver.solve(slots, constraints, WordDomainIndex(["CAT", "DOG", "AXO"]))
        self.assertIsNotNone(first)
        self.assertIsNone(second)
        self.assertEqual(first, third)

    def test_node_budget_is_inconclusive_not_none(self) -> None:
        words = ["AB", "AC", "AD", "AE", "AF"]
        with self.assertRaises(SearchBudgetExceeded) as ctx:
            run_native(["..", ".."], words, budget=SearchBudget(max_nodes=3))
        self.assertEqual(ctx.exception.nodes, 4)

    def test_rejects_constraint_with_unknown_slot(self) -> None:
        slots = extract_slots(GridModel.from_strings(["..."]))
        with self.assertRaises(MalformedInputError):
            BacktrackingSolver().solve(slots, [CrossConstraint(0, 0, 5, 0)], WordDomainIndex(["ABC"]))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
