from __future__ import annotations

import re
from collections.abc import Mapping

from enrolment_audit.features.profile import DatasetProfile
from enrolment_audit.io.schema import CanonicalColumns, CellValue, cell_text, get_field
from enrolment_audit.rules.base import Rule, RuleHit

_DIGITS = re.compile(r"[0-9]+")


def pincode_problem(text: str, digit_count: int, allow_leading_zero: bool) -> str | None:
    """Describe why a pincode fails the structural check, or ``None`` if it passes."""
    if not _DIGITS.fullmatch(text):
        return f"contains non-numeric characters; expected {digit_count} digits"
    if len(text) != digit_count:
        return f"has {len(text)} digits; expected {digit_count}"
    if not allow_leading_zero and text.startswith("0"):
        return "starts with 0, which no postal circle uses"
    return None


class MalformedPincodeRule(Rule):
    name = "malformed_pincode"

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
        value = get_field(record, CanonicalColumns.pincode)
        if value is None:
            return None
        text = cell_text(value)
        problem = pincode_problem(text, self.digit_count, self.allow_leading_zero)
        if problem is None:
            return None
        return RuleHit(
            reason="Malformed pincode",
            feature=CanonicalColumns.pincode,
            value=value,
            explanation=f"Pincode '{text}' {problem}.",
        )
