from __future__ import annotations

from collections.abc import Mapping
from datetime import date

from enrolment_audit.features.profile import DatasetProfile
from enrolment_audit.io.schema import CanonicalColumns, CellValue, cell_text, get_field
from enrolment_audit.rules.base import Rule, RuleHit


class TemporalAnomalyRule(Rule):
    """Unparseable, future, pre-programme, or statistically distant dates."""

    name = "temporal_anomaly"

    def __init__(
        self,
        *,
        weight: float,
        earliest_plausible_date: date,
        zscore_threshold: float,
    ) -> None:
        super().__init__(weight=weight)
        self.earliest_plausible_date = earliest_plausible_date
        self.zscore_threshold = float(zscore_threshold)

    def evaluate(
        self,
        index: int,
        record: Mapping[str, CellValue],
        profile: DatasetProfile,
    ) -> RuleHit | None:
        value = get_field(record, CanonicalColumns.date)
        if value is None:
            return None
        text = cell_text(value)
        parsed = profile.dates[index]

        if parsed is None:
            return self._hit("Unparseable date", value, f"Date '{text}' could not be parsed.")
        if parsed > profile.reference_date:
            return self._hit(
                "Future date",
                value,
                f"Date {parsed.isoformat()} is after {profile.reference_date.isoformat()}.",
            )
        if parsed < self.earliest_plausible_date:
            return self._hit(
                "Implausible date",
                value,
                f"Date {parsed.isoformat()} precedes the earliest plausible date "
                f"{self.earliest_plausible_date.isoformat()}.",
            )
        if profile.date_mean is None or profile.date_std is None:
            return None
        zscore = (parsed.toordinal() - profile.date_mean) / profile.date_std
        if abs(zscore) <= self.zscore_threshold:
            return None
        return self._hit(
            "Date outside observed range",
            value,
            f"Date {parsed.isoformat()} lies {abs(zscore):.1f} standard deviations "
            "from the dataset's mean date.",
        )

    @staticmethod
    def _hit(reason: str, value: CellValue, explanation: str) -> RuleHit:
        return RuleHit(
            reason=reason,
            feature=CanonicalColumns.date,
            value=value,
            explanation=explanation,
        )
