from __future__ import annotations

from collections.abc import Mapping

from enrolment_audit.features.geography import (
    KNOWN_STATES,
    normalize_place,
    normalize_state,
    states_for_pincode,
)
from enrolment_audit.features.profile import DatasetProfile
from enrolment_audit.io.schema import CanonicalColumns, CellValue, cell_text, get_field
from enrolment_audit.rules.base import Rule, RuleHit
from enrolment_audit.rules.pincode import pincode_problem


def _display(states: frozenset[str]) -> str:
    return " / ".join(sorted(state.title() for state in states))


class PincodeStateMismatchRule(Rule):
    """Checks the pincode's postal-circle prefix against the recorded state.

    Only recognized state names are judged; unknown names are not evidence.
    """

    name = "pincode_state_mismatch"

    def __init__(self, *, weight: float, digit_count: int, allow_leading_zero: bool) -> None:
        super().__init__(weight=weight)
        self.digit_count = int(digit_count)
        self.allow_leading_zero = bool(allow_leading_zero)

    def evaluate(
        self,
        index: int,
        record: Mapping[str, CellValue],
        profile: DatasetProfile,
    ) -> RuleHit | None:
        pincode_value = get_field(record, CanonicalColumns.pincode)
        state_value = get_field(record, CanonicalColumns.state)
        if pincode_value is None or state_value is None:
            return None

        pincode = cell_text(pincode_value)
        if pincode_problem(pincode, self.digit_count, self.allow_leading_zero) is not None:
            return None
        state = normalize_state(cell_text(state_value))
        if state not in KNOWN_STATES:
            return None
        allowed = states_for_pincode(pincode)
        if allowed is None or state in allowed:
            return None
        return RuleHit(
            reason="Pincode does not match state",
            feature=CanonicalColumns.pincode,
            value=pincode_value,
            explanation=(
                f"Pincode {pincode} belongs to the {_display(allowed)} postal circle, "
                f"but the record lists {cell_text(state_value)}."
            ),
        )


class DistrictStateMismatchRule(Rule):
    name = "district_state_mismatch"

    def __init__(self, *, weight: float, district_states: Mapping[str, str]) -> None:
        super().__init__(weight=weight)
        self.district_states = {
            normalize_place(district): normalize_state(state)
            for district, state in district_states.items()
        }

    def evaluate(
        self,
        index: int,
        record: Mapping[str, CellValue],
        profile: DatasetProfile,
    ) -> RuleHit | None:
        if not self.district_states:
            return None
        district_value = get_field(record, CanonicalColumns.district)
        state_value = get_field(record, CanonicalColumns.state)
        if district_value is None or state_value is None:
            return None

        expected = self.district_states.get(normalize_place(cell_text(district_value)))
        if expected is None or normalize_state(cell_text(state_value)) == expected:
            return None
        return RuleHit(
            reason="District does not match state",
            feature=CanonicalColumns.district,
            value=district_value,
            explanation=(
                f"District {cell_text(district_value)} lies in {expected.title()}, "
                f"but the record lists {cell_text(state_value)}."
            ),
        )
