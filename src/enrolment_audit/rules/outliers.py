from __future__ import annotations

from collections.abc import Mapping

from enrolment_audit.features.profile import ColumnSpread, DatasetProfile
from enrolment_audit.io.schema import CellValue, cell_number, cell_text, get_field
from enrolment_audit.rules.base import Rule, RuleHit


class AgeOutlierRule(Rule):
    name = "age_outlier"

    def __init__(
        self,
        *,
        weight: float,
        age_fields: list[str],
        min_valid: float,
        max_valid: float,
    ) -> None:
        super().__init__(weight=weight)
        self.age_fields = list(age_fields)
        self.min_valid = float(min_valid)
        self.max_valid = float(max_valid)

    def evaluate(
        self,
        index: int,
        record: Mapping[str, CellValue],
        profile: DatasetProfile,
    ) -> RuleHit | None:
        for field_name in self.age_fields:
            value = get_field(record, field_name)
            if value is None:
                continue
            age = cell_number(value)
            if age is None or self.min_valid <= age <= self.max_valid:
                return None
            return RuleHit(
                reason="Implausible age",
                feature=field_name,
                value=value,
                explanation=(
                    f"Age {cell_text(value)} is outside the plausible range "
                    f"{cell_text(self.min_valid)}-{cell_text(self.max_valid)}."
                ),
            )
        return None


class NumericOutlierRule(Rule):
    """Flags the most extreme robust z-score among the profiled numeric columns."""

    name = "numeric_outlier"

    def __init__(self, *, weight: float, zscore_threshold: float) -> None:
        super().__init__(weight=weight)
        self.zscore_threshold = float(zscore_threshold)

    def evaluate(
        self,
        index: int,
        record: Mapping[str, CellValue],
        profile: DatasetProfile,
    ) -> RuleHit | None:
        worst: tuple[float, str, ColumnSpread] | None = None
        for column, value in record.items():
            spread = profile.numeric_spreads.get(column)
            number = cell_number(value)
            if spread is None or number is None:
                continue
            zscore = (number - spread.median) / spread.scale
            if abs(zscore) <= self.zscore_threshold:
                continue
            if worst is None or abs(zscore) > abs(worst[0]):
                worst = (zscore, column, spread)
        if worst is None:
            return None

        zscore, column, spread = worst
        direction = "above" if zscore > 0 else "below"
        if spread.uses_mean_deviation:
            unit = "scaled mean deviations"
        else:
            unit = "robust standard deviations"
        return RuleHit(
            reason=f"Outlier value in {column}",
            feature=column,
            value=record[column],
            explanation=(
                f"{column}={cell_text(record[column])} is {abs(zscore):.1f} {unit} "
                f"{direction} the median {cell_text(spread.median)}."
            ),
        )
