from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from types import MappingProxyType

from enrolment_audit.config import AppConfig
from enrolment_audit.features.aggregates import build_statistics
from enrolment_audit.features.profile import DatasetProfile, build_profile
from enrolment_audit.io.schema import CellValue
from enrolment_audit.results import AnomalyFinding, DetailedReason, DetectionResult
from enrolment_audit.rules.base import Rule
from enrolment_audit.rules.registry import default_rules

LOGGER = logging.getLogger(__name__)


def combine_weights(weights: Iterable[float]) -> float:
    """Probabilistic union ``1 - prod(1 - w)`` of fired-rule weights."""
    remaining = 1.0
    for weight in weights:
        remaining *= 1.0 - min(1.0, max(0.0, float(weight)))
    return min(1.0, max(0.0, 1.0 - remaining))


def evaluate_record(
    index: int,
    record: Mapping[str, CellValue],
    rules: Sequence[Rule],
    profile: DatasetProfile,
) -> AnomalyFinding | None:
    reasons: list[str] = []
    details: list[DetailedReason] = []
    weights: list[float] = []
    for rule in rules:
        hit = rule.evaluate(index, record, profile)
        if hit is None:
            continue
        reasons.append(hit.reason)
        details.append(
            DetailedReason(
                feature=hit.feature,
                value=hit.value,
                explanation=hit.explanation,
                importance=rule.weight,
            )
        )
        weights.append(rule.weight)
    if not reasons:
        return None
    return AnomalyFinding(
        row=MappingProxyType(dict(record)),
        index=index,
        reasons=tuple(reasons),
        detailed_reasons=tuple(details),
        score=combine_weights(weights),
    )


def detect(
    records: Sequence[Mapping[str, CellValue]],
    config: AppConfig | None = None,
    *,
    reference_date: date | None = None,
    rules: Sequence[Rule] | None = None,
) -> DetectionResult:
    """Score every record and summarize the dataset.

    Only records that fire at least one rule appear in ``findings``, in input
    order. Empty input yields empty findings and zeroed statistics.
    """
    cfg = config or AppConfig()
    active_rules = list(rules) if rules is not None else default_rules(cfg)
    profile = build_profile(records, cfg, reference_date=reference_date)

    findings: list[AnomalyFinding] = []
    for index, record in enumerate(records):
        finding = evaluate_record(index, record, active_rules, profile)
        if finding is not None:
            findings.append(finding)

    stats = build_statistics(records, profile.dates, len(findings), cfg)
    LOGGER.info(
        "Detection complete: %d records, %d anomalies (rate %.4f)",
        stats.total_rows,
        stats.anomaly_count,
        stats.anomaly_rate,
    )
    return DetectionResult(findings=tuple(findings), stats=stats)
