from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date

import numpy as np
import pandas as pd

from enrolment_audit.config import AppConfig
from enrolment_audit.features.dates import parse_record_date
from enrolment_audit.io.schema import (
    MANDATORY_COLUMNS,
    CanonicalColumns,
    CellValue,
    cell_number,
    cell_text,
    get_field,
)

# Scale factors that make MAD / mean absolute deviation consistent with a
# normal standard deviation (Iglewicz & Hoaglin).
MAD_SCALE = 0.6745
MEAN_AD_SCALE = 1.253314
NUMERIC_COLUMN_MIN_SHARE = 0.9


@dataclass(frozen=True)
class ColumnSpread:
    median: float
    scale: float
    uses_mean_deviation: bool


@dataclass(frozen=True)
class DatasetProfile:
    """Dataset-wide context computed once per run and shared by all rules."""

    reference_date: date
    dates: tuple[date | None, ...]
    date_mean: float | None
    date_std: float | None
    numeric_spreads: Mapping[str, ColumnSpread] = field(default_factory=dict)
    repeat_counts: Mapping[str, Mapping[tuple[str, int], int]] = field(default_factory=dict)
    repeat_medians: Mapping[str, float] = field(default_factory=dict)
    duplicate_of: Mapping[int, int] = field(default_factory=dict)

    def window_key(self, index: int, window_days: int) -> int | None:
        parsed = self.dates[index]
        if parsed is None:
            return None
        return parsed.toordinal() // window_days


def _date_moments(
    dates: Sequence[date | None], min_samples: int
) -> tuple[float | None, float | None]:
    ordinals = np.array([value.toordinal() for value in dates if value is not None], dtype=float)
    if ordinals.size < min_samples:
        return None, None
    std = float(ordinals.std())
    if std <= 0.0:
        return float(ordinals.mean()), None
    return float(ordinals.mean()), std


def _is_present(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, float) and np.isnan(value):
        return False
    return not (isinstance(value, str) and not value.strip())


def _numeric_spreads(
    records: Sequence[Mapping[str, CellValue]],
    excluded: set[str],
    min_samples: int,
) -> dict[str, ColumnSpread]:
    if not records:
        return {}
    frame = pd.DataFrame([dict(record) for record in records])
    spreads: dict[str, ColumnSpread] = {}
    for column in frame.columns:
        if column in excluded:
            continue
        raw = frame[column]
        present = raw.map(_is_present)
        numbers = pd.to_numeric(raw.map(cell_number), errors="coerce")
        n_present = int(present.sum())
        n_numeric = int(numbers.notna().sum())
        if n_numeric < min_samples or n_numeric < NUMERIC_COLUMN_MIN_SHARE * n_present:
            continue
        values = numbers.dropna().to_numpy(dtype=float)
        median = float(np.median(values))
        mad = float(np.median(np.abs(values - median)))
        if mad > 0.0:
            spreads[str(column)] = ColumnSpread(median, mad / MAD_SCALE, False)
            continue
        mean_ad = float(np.mean(np.abs(values - median)))
        if mean_ad > 0.0:
            spreads[str(column)] = ColumnSpread(median, mean_ad * MEAN_AD_SCALE, True)
    return spreads


def _repeat_counts(
    records: Sequence[Mapping[str, CellValue]],
    dates: Sequence[date | None],
    fields: list[str],
    window_days: int,
) -> tuple[dict[str, dict[tuple[str, int], int]], dict[str, float]]:
    counts: dict[str, dict[tuple[str, int], int]] = {}
    medians: dict[str, float] = {}
    for field_name in fields:
        keys = []
        for record, parsed in zip(records, dates):
            value = get_field(record, field_name)
            if value is None or parsed is None:
                continue
            keys.append((cell_text(value), parsed.toordinal() // window_days))
        if not keys:
            continue
        grouped = (
            pd.DataFrame(keys, columns=["value", "window"])
            .groupby(["value", "window"])
            .size()
        )
        counts[field_name] = {(str(key[0]), int(key[1])): int(n) for key, n in grouped.items()}
        medians[field_name] = float(grouped.median())
    return counts, medians


def _duplicates(records: Sequence[Mapping[str, CellValue]]) -> dict[int, int]:
    first_seen: dict[tuple, int] = {}
    duplicate_of: dict[int, int] = {}
    for index, record in enumerate(records):
        key = tuple(sorted(record.items(), key=lambda item: item[0]))
        if key in first_seen:
            duplicate_of[index] = first_seen[key]
        else:
            first_seen[key] = index
    return duplicate_of


def build_profile(
    records: Sequence[Mapping[str, CellValue]],
    config: AppConfig,
    *,
    reference_date: date | None = None,
) -> DatasetProfile:
    temporal = config.temporal
    dates = tuple(
        parse_record_date(get_field(record, CanonicalColumns.date), temporal.date_formats)
        for record in records
    )
    date_mean, date_std = _date_moments(dates, temporal.min_samples)

    excluded = set(MANDATORY_COLUMNS)
    excluded.update(config.columns.age_fields)
    excluded.update(config.frequency.fields)
    excluded.update(config.numeric_outlier.exclude_fields)
    spreads = _numeric_spreads(records, excluded, config.numeric_outlier.min_samples)

    repeat_counts, repeat_medians = _repeat_counts(
        records,
        dates,
        config.frequency.fields,
        config.frequency.window_days,
    )

    return DatasetProfile(
        reference_date=reference_date or temporal.reference_date or date.today(),
        dates=dates,
        date_mean=date_mean,
        date_std=date_std,
        numeric_spreads=spreads,
        repeat_counts=repeat_counts,
        repeat_medians=repeat_medians,
        duplicate_of=_duplicates(records),
    )
