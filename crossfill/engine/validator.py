"""Deterministic rule validation for solved assignments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence

from ..core.exceptions import ValidationError
from ..core.models import CrossConstraint, Slot
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str]


class AssignmentValidator:
    """Checks that a mapping fills every slot legally."""

    def validate(
        self,
        slots: Sequence[Slot],
        constraints: Sequence[CrossConstraint],
        mapping: Mapping[int, str],
    ) -> ValidationResult:
        messages: List[str] = []
        try:
            self._check_complete(slots, mapping)
            self._check_lengths(slots, mapping)
            self._check_fixed_letters(slots, mapping)
            self._check_no_duplicate_words(slots, mapping)
            self._check_crossings(constraints, mapping)
        except ValidationError as exc:
            messages.append(str(exc))
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=messages)
        return ValidationResult(ok=True, messages=[])

    def _check_complete(self, slots: Sequence[Slot], mapping: Mapping[int, str]) -> None:
        known = {slot.id for slot in slots}
        for slot in slots:
            if not mapping.get(slot.id):
                raise ValidationError(f"Slot {slot.id} has no word")
        extra = sorted(set(mapping) - known)
        if extra:
            raise ValidationError(f"Assignment names unknown slots {extra}")

    def _check_lengths(self, slots: Sequence[Slot], mapping: Mapping[int, str]) -> None:
        for slot in slots:
            word = mapping[slot.id]
            if len(word) != slot.length:
                raise ValidationError(
                    f"Word '{word}' has length {len(word)} but slot {slot.id} needs {slot.length}"
                )

    def _check_fixed_letters(self, slots: Sequence[Slot], mapping: Mapping[int, str]) -> None:
        for slot in slots:
            word = mapping[slot.id]
            for offset, letter in slot.fixed_letters().items():
                if word[offset] != letter:
                    raise ValidationError(
                        f"Word '{word}' in slot {slot.id} breaks pre-filled '{letter}' at offset {offset}"
                    )

    def _check_no_duplicate_words(self, slots: Sequence[Slot], mapping: Mapping[int, str]) -> None:
        seen: Dict[str, int] = {}
        for slot in slots:
            word = mapping[slot.id]
            if word in seen:
                raise ValidationError(
                    f"Duplicate word '{word}' in slots {seen[word]} and {slot.id}"
                )
            seen[word] = slot.id

    def _check_crossings(self, constraints: Sequence[CrossConstraint],
                         mapping: Mapping[int, str]) -> None:
        for cons in constraints:
            left = mapping[cons.slot_a][cons.offset_a]
            right = mapping[cons.slot_b][cons.offset_b]
            if left != right:
                raise ValidationError(
                    f"Crossing mismatch: slot {cons.slot_a}[{cons.offset_a}]='{left}' "
                    f"vs slot {cons.slot_b}[{cons.offset_b}]='{right}'"
                )
