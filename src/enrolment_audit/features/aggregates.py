from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date

import pandas as pd

from enrolment_audit.config import AppConfig
from enrolment_audit.io.schema import CanonicalColumns, CellValue, cell_number, cell_text, get_field
from enrolment_audit.results import (
    AgeBucketCount,
    DatasetStatistics,
    DatePoint,
    PincodeCount,
    StateCount,
)

UNKNOWN_AGE_BUCKET = "unknown"


def _ranked_counts(values: list[str], limit: int | None = None) -> pd.Series:
    """Counts per value, descending, ties kept in first-seen order."""
    if not values:
        return pd.Series(dtype="int64")
    series = pd.Series(values, dtype="object")
    counts = series.groupby(series, sort=False).size().sort_values(ascending=False, kind="stable")
    if limit is not None:
        counts = counts.head(limit)
    return counts


def _field_texts(records: Sequence[Mapping[str, CellValue]], key: str) -> list[str]:
    texts = []
    for record in records:
        value = get_field(record, key)
        if value is not None:
            texts.append(cell_text(value))
    return texts


def build_top_states(
    records: Sequence[Mapping[str, CellValue]], limit: int
) -> tuple[StateCount, ...]:
    counts = _ranked_counts(_field_texts(records, CanonicalColumns.state), limit)
    return tuple(StateCount(name=str(name), value=int(n)) for name, n in counts.items())


def build_pincode_heatmap(
    records: Sequence[Mapping[str, CellValue]], limit: int | None = None
) -> tuple[PincodeCount, ...]:
    counts = _ranked_counts(_field_texts(records, CanonicalColumns.pincode), limit)
    return tuple(PincodeCount(pincode=str(code), count=int(n)) for code, n in counts.items())


def age_bucket_labels(boundaries: Sequence[float]) -> list[str]:
    edges = [cell_text(float(edge)) for edge in boundaries]
    labels = [f"{low}-{high}" for low, high in zip(edges, edges[1:])]
    labels.append(f"{edges[-1]}+")
    return labels


def build_age_distribution(
    records: Sequence[Mapping[str, CellValue]],
    config: AppConfig,
) -> tuple[AgeBucketCount, ...]:
    """Histogram over half-open ``[low, high)`` buckets.

    Missing, non-numeric and implausible ages land in ``unknown``, so the
    counts always sum to the number of records.
    """
    if not records:
        return ()
    thresholds = config.thresholds
    boundaries = [float(edge) for edge in thresholds.age_buckets]
    labels = age_bucket_labels(boundaries)

    ages = []
    for record in records:
        age = None
        for field_name in config.columns.age_fields:
            value = get_field(record, field_name)
            if value is not None:
                age = cell_number(value)
                break
        if age is not None and thresholds.age_min_valid <= age <= thresholds.age_max_valid:
            ages.append(age)
        else:
            ages.append(float("nan"))

    bucketed = pd.cut(
        pd.Series(ages, dtype="float64"),
        bins=boundaries + [float("inf")],
        labels=labels,
        right=False,
    )
    counts = bucketed.value_counts(sort=False)
    unknown = int(bucketed.isna().sum())
    rows = [AgeBucketCount(range=label, count=int(counts.get(label, 0))) for label in labels]
    rows.append(AgeBucketCount(range=UNKNOWN_AGE_BUCKET, count=unknown))
    return tuple(rows)


def build_time_series(dates: Sequence[date | None]) -> tuple[DatePoint, ...]:
    parsed = [value for value in dates if value is not None]
    if not parsed:
        return ()
    counts = pd.Series(parsed, dtype="object").value_counts().sort_index()
    return tuple(DatePoint(date=day.isoformat(), count=int(n)) for day, n in counts.items())


def build_statistics(
    records: Sequence[Mapping[str, CellValue]],
    dates: Sequence[date | None],
    anomaly_count: int,
    config: AppConfig,
) -> DatasetStatistics:
    total_rows = len(records)
    if total_rows == 0:
        return DatasetStatistics(total_rows=0, anomaly_count=0, anomaly_rate=0.0)
    return DatasetStatistics(
        total_rows=total_rows,
        anomaly_count=anomaly_count,
        anomaly_rate=anomaly_count / total_rows,
        top_states=build_top_states(records, config.thresholds.top_states_limit),
        pincode_heatmap=build_pincode_heatmap(records, config.thresholds.pincode_heatmap_limit),
        age_distribution=build_age_distribution(records, config),
        time_series=build_time_series(dates),
    )
