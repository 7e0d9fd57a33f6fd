from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from enrolment_audit.features.profile import DatasetProfile
from enrolment_audit.io.schema import CellValue


@dataclass(frozen=True)
class RuleHit:
    reason: str
    feature: str
    value: Any
    explanation: str


class Rule:
    """One independent per-record check.

    ``evaluate`` returns ``None`` when the rule does not fire, including when
    the fields it needs are missing or unusable.
    """

    name: str

    def __init__(self, *, weight: float) -> None:
        self.weight = float(min(1.0, max(0.0, weight)))

    def evaluate(
        self,
        index: int,
        record: Mapping[str, CellValue],
        profile: DatasetProfile,
    ) -> RuleHit | None:
        raise NotImplementedError
