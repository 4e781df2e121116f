"""Crossing constraints between slots that share a cell."""

from __future__ import annotations

from collections import defaultdict
from itertools import combinations
from typing import Dict, Iterable, List, Sequence, Tuple

from ..core.exceptions import MalformedInputError
from ..core.models import CrossConstraint, Crossing, Slot


def build_cross_constraints(slots: Sequence[Slot]) -> List[CrossConstraint]:
    """Emit one constraint per pair of slots sharing a coordinate.

    Coordinates are visited in row-major order and each coordinate group is
    paired in increasing slot-id order, so the output is stable.
    """

    touching: Dict[Tuple[int, int], List[Tuple[int, int]]] = defaultdict(list)
    for slot in slots:
        for offset, coord in enumerate(slot.cells):
            touching[coord].append((slot.id, offset))

    constraints: List[CrossConstraint] = []
    for coord in sorted(touching):
        group = sorted(touching[coord])
        if len(group) < 2:
            continue
        for (id_a, off_a), (id_b, off_b) in combinations(group, 2):
            constraints.append(CrossConstraint(slot_a=id_a, offset_a=off_a, slot_b=id_b, offset_b=off_b))
    return constraints


def build_crossing_index(
    slots: Sequence[Slot], constraints: Iterable[CrossConstraint]
) -> Dict[int, List[Crossing]]:
    """Store every constraint as two directed lookups keyed by slot id.

    Raises :class:`MalformedInputError` when a constraint names an unknown
    slot or an offset outside the slot.
    """

    lengths = {slot.id: slot.length for slot in slots}
    index: Dict[int, List[Crossing]] = {slot.id: [] for slot in slots}
    for cons in constraints:
        _check_reference(lengths, cons.slot_a, cons.offset_a, cons)
        _check_reference(lengths, cons.slot_b, cons.offset_b, cons)
        if cons.slot_a == cons.slot_b:
            raise MalformedInputError(f"Constraint crosses slot {cons.slot_a} with itself: {cons}")
        index[cons.slot_a].append(Crossing(cons.slot_b, cons.offset_a, cons.offset_b))
        index[cons.slot_b].append(Crossing(cons.slot_a, cons.offset_b, cons.offset_a))
    return index


def _check_reference(lengths: Dict[int, int], slot_id: int, offset: int,
                     cons: CrossConstraint) -> None:
    if slot_id not in lengths:
        raise MalformedInputError(f"Constraint references unknown slot {slot_id}: {cons}")
    if not 0 <= offset < lengths[slot_id]:
        raise MalformedInputError(
            f"Constraint offset {offset} out of range for slot {slot_id} "
            f"(length {lengths[slot_id]}): {cons}"
        )
