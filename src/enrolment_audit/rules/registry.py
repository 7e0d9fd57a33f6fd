from __future__ import annotations

from enrolment_audit.config import AppConfig
from enrolment_audit.rules.base import Rule
from enrolment_audit.rules.frequency import DuplicateRecordRule, FrequencyRepeatRule
from enrolment_audit.rules.geography import DistrictStateMismatchRule, PincodeStateMismatchRule
from enrolment_audit.rules.outliers import AgeOutlierRule, NumericOutlierRule
from enrolment_audit.rules.pincode import MalformedPincodeRule
from enrolment_audit.rules.temporal import TemporalAnomalyRule


def default_rules(config: AppConfig) -> list[Rule]:
    """Build the rules in evaluation order; that order fixes reason ordering."""
    weights = config.rules.weights
    thresholds = config.thresholds
    rules: list[Rule] = [
        MalformedPincodeRule(
            weight=weights.malformed_pincode,
            digit_count=thresholds.pincode_digit_count,
            allow_leading_zero=thresholds.pincode_allow_leading_zero,
        ),
        AgeOutlierRule(
            weight=weights.age_outlier,
            age_fields=config.columns.age_fields,
            min_valid=thresholds.age_min_valid,
            max_valid=thresholds.age_max_valid,
        ),
        NumericOutlierRule(
            weight=weights.numeric_outlier,
            zscore_threshold=config.numeric_outlier.robust_zscore_threshold,
        ),
        TemporalAnomalyRule(
            weight=weights.temporal_anomaly,
            earliest_plausible_date=config.temporal.earliest_plausible_date,
            zscore_threshold=config.temporal.date_zscore_threshold,
        ),
        FrequencyRepeatRule(
            weight=weights.frequency_repeat,
            fields=config.frequency.fields,
            window_days=config.frequency.window_days,
            min_repeat_count=config.frequency.min_repeat_count,
            repeat_ratio=config.frequency.repeat_ratio,
        ),
        DuplicateRecordRule(weight=weights.duplicate_record),
    ]
    if config.geography.check_pincode_prefix:
        rules.insert(
            1,
            PincodeStateMismatchRule(
                weight=weights.pincode_state_mismatch,
                digit_count=thresholds.pincode_digit_count,
                allow_leading_zero=thresholds.pincode_allow_leading_zero,
            ),
        )
    if config.geography.district_states:
        rules.insert(
            2 if config.geography.check_pincode_prefix else 1,
            DistrictStateMismatchRule(
                weight=weights.district_state_mismatch,
                district_states=config.geography.district_states,
            ),
        )
    disabled = set(config.rules.disabled)
    return [rule for rule in rules if rule.name not in disabled]
