from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, NamedTuple

from enrolment_audit.io.schema import CellValue


@dataclass(frozen=True)
class DetailedReason:
    feature: str
    value: Any
    explanation: str
    importance: float


@dataclass(frozen=True)
class AnomalyFinding:
    row: Mapping[str, CellValue]
    index: int
    reasons: tuple[str, ...]
    detailed_reasons: tuple[DetailedReason, ...]
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "row": dict(self.row),
            "index": self.index,
            "reasons": list(self.reasons),
            "detailed_reasons": [asdict(detail) for detail in self.detailed_reasons],
            "score": self.score,
        }


@dataclass(frozen=True)
class StateCount:
    name: str
    value: int


@dataclass(frozen=True)
class PincodeCount:
    pincode: str
    count: int


@dataclass(frozen=True)
class AgeBucketCount:
    range: str
    count: int


@dataclass(frozen=True)
class DatePoint:
    date: str
    count: int


@dataclass(frozen=True)
class DatasetStatistics:
    total_rows: int
    anomaly_count: int
    anomaly_rate: float
    top_states: tuple[StateCount, ...] = ()
    pincode_heatmap: tuple[PincodeCount, ...] = ()
    age_distribution: tuple[AgeBucketCount, ...] = ()
    time_series: tuple[DatePoint, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class DetectionResult(NamedTuple):
    findings: tuple[AnomalyFinding, ...]
    stats: DatasetStatistics
