from __future__ import annotations

from collections.abc import Mapping

from enrolment_audit.features.profile import DatasetProfile
from enrolment_audit.io.schema import CellValue, cell_text, get_field
from enrolment_audit.rules.base import Rule, RuleHit


class FrequencyRepeatRule(Rule):
    """Same field value repeated far more often than its peers within one window."""

    name = "frequency_repeat"

    def __init__(
        self,
        *,
        weight: float,
        fields: list[str],
        window_days: int,
        min_repeat_count: int,
        repeat_ratio: float,
    ) -> None:
        super().__init__(weight=weight)
        self.fields = list(fields)
        self.window_days = max(1, int(window_days))
        self.min_repeat_count = int(min_repeat_count)
        self.repeat_ratio = float(repeat_ratio)

    def evaluate(
        self,
        index: int,
        record: Mapping[str, CellValue],
        profile: DatasetProfile,
    ) -> RuleHit | None:
        window = profile.window_key(index, self.window_days)
        if window is None:
            return None
        for field_name in self.fields:
            value = get_field(record, field_name)
            counts = profile.repeat_counts.get(field_name)
            if value is None or counts is None:
                continue
            text = cell_text(value)
            count = counts.get((text, window), 0)
            median = profile.repeat_medians[field_name]
            if count < self.min_repeat_count or count < self.repeat_ratio * median:
                continue
            return RuleHit(
                reason=f"Unusually frequent {field_name}",
                feature=field_name,
                value=value,
                explanation=(
                    f"{field_name} '{text}' appears {count} times within {self.window_days} "
                    f"day(s); the typical count is {median:g}."
                ),
            )
        return None


class DuplicateRecordRule(Rule):
    name = "duplicate_record"

    def evaluate(
        self,
        index: int,
        record: Mapping[str, CellValue],
        profile: DatasetProfile,
    ) -> RuleHit | None:
        first = profile.duplicate_of.get(index)
        if first is None:
            return None
        return RuleHit(
            reason="Duplicate record",
            feature="record",
            value=first,
            explanation=f"Identical to record #{first}.",
        )
