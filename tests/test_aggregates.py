from __future__ import annotations

from datetime import date

from enrolment_audit.config import AppConfig
from enrolment_audit.features.aggregates import (
    age_bucket_labels,
    build_age_distribution,
    build_pincode_heatmap,
    build_statistics,
    build_time_series,
    build_top_states,
)
from enrolment_audit.results import AgeBucketCount, DatePoint, PincodeCount, StateCount


def test_age_bucket_labels_from_boundaries() -> None:
    assert age_bucket_labels([0, 18, 30, 45, 60]) == ["0-18", "18-30", "30-45", "45-60", "60+"]
    assert age_bucket_labels([0, 12.5]) == ["0-12.5", "12.5+"]


def test_age_distribution_uses_half_open_buckets_and_unknown() -> None:
    ages: list[object] = [5, 18, 29, 30, 44, 59, 60, 150, "abc"]
    records = [{"age": age} for age in ages]
    records.append({"state": "Delhi"})

    distribution = build_age_distribution(records, AppConfig())

    assert distribution == (
        AgeBucketCount(range="0-18", count=1),
        AgeBucketCount(range="18-30", count=2),
        AgeBucketCount(range="30-45", count=2),
        AgeBucketCount(range="45-60", count=1),
        AgeBucketCount(range="60+", count=1),
        AgeBucketCount(range="unknown", count=3),
    )
    assert sum(bucket.count for bucket in distribution) == len(records)


def test_age_distribution_reads_first_configured_age_field() -> None:
    config = AppConfig.model_validate({"columns": {"age_fields": ["applicant_age", "age"]}})
    records = [{"applicant_age": 70, "age": 10}, {"age": 10}]

    distribution = dict((row.range, row.count) for row in build_age_distribution(records, config))

    assert distribution["60+"] == 1
    assert distribution["0-18"] == 1


def test_top_states_truncates_and_breaks_ties_by_first_seen() -> None:
    names = [f"State {index:02d}" for index in range(12)]
    records = [{"state": name} for name in names]
    records.extend([{"state": "State 07"}, {"state": "State 03"}, {"state": ""}])

    top = build_top_states(records, limit=10)

    assert len(top) == 10
    assert top[0] == StateCount(name="State 03", value=2)
    assert top[1] == StateCount(name="State 07", value=2)
    assert [row.name for row in top[2:]] == [
        "State 00",
        "State 01",
        "State 02",
        "State 04",
        "State 05",
        "State 06",
        "State 08",
        "State 09",
    ]


def test_pincode_heatmap_counts_every_distinct_value() -> None:
    records = [
        {"pincode": 110001},
        {"pincode": "ABCDE"},
        {"pincode": 560001},
        {"pincode": 110001.0},
        {"state": "Goa"},
    ]

    heatmap = build_pincode_heatmap(records)

    assert heatmap == (
        PincodeCount(pincode="110001", count=2),
        PincodeCount(pincode="ABCDE", count=1),
        PincodeCount(pincode="560001", count=1),
    )
    assert len(build_pincode_heatmap(records, limit=1)) == 1


def test_time_series_sorted_by_day_and_skips_unparsed() -> None:
    dates = [date(2025, 3, 2), None, date(2025, 3, 1), date(2025, 3, 2)]

    assert build_time_series(dates) == (
        DatePoint(date="2025-03-01", count=1),
        DatePoint(date="2025-03-02", count=2),
    )
    assert build_time_series([None]) == ()


def test_build_statistics_rate_and_empty_input() -> None:
    records = [{"state": "Goa"}, {"state": "Goa"}, {"state": "Delhi"}, {"state": "Goa"}]

    stats = build_statistics(records, [None] * 4, anomaly_count=1, config=AppConfig())

    assert stats.total_rows == 4
    assert stats.anomaly_rate == 0.25
    assert stats.top_states[0] == StateCount(name="Goa", value=3)

    empty = build_statistics([], [], anomaly_count=0, config=AppConfig())
    assert empty.total_rows == 0
    assert empty.anomaly_rate == 0.0
    assert empty.to_dict()["top_states"] == ()
