from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_AGE_BUCKETS = [0, 18, 30, 45, 60]
DEFAULT_DATE_FORMATS = ["%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d", "%Y%m%d"]


class ColumnsConfig(BaseModel):
    """Source column names mapped onto the canonical record keys."""

    date: str = "date"
    state: str = "state"
    district: str = "district"
    pincode: str = "pincode"
    age_fields: list[str] = Field(default_factory=lambda: ["age"])


class ThresholdsConfig(BaseModel):
    pincode_digit_count: int = Field(default=6, ge=1)
    pincode_allow_leading_zero: bool = False
    age_min_valid: float = 0
    age_max_valid: float = 120
    top_states_limit: int = Field(default=10, ge=1)
    pincode_heatmap_limit: int | None = Field(default=None, ge=1)
    age_buckets: list[float] = Field(default_factory=lambda: list(DEFAULT_AGE_BUCKETS))

    @field_validator("age_buckets")
    @classmethod
    def _strictly_increasing(cls, value: list[float]) -> list[float]:
        if not value:
            raise ValueError("age_buckets must contain at least one boundary")
        if any(later <= earlier for earlier, later in zip(value, value[1:])):
            raise ValueError("age_buckets must be strictly increasing")
        return value


class TemporalConfig(BaseModel):
    date_formats: list[str] = Field(default_factory=lambda: list(DEFAULT_DATE_FORMATS))
    earliest_plausible_date: date = date(2010, 1, 1)
    reference_date: date | None = None
    date_zscore_threshold: float = Field(default=3.0, gt=0)
    min_samples: int = Field(default=10, ge=2)


class NumericOutlierConfig(BaseModel):
    robust_zscore_threshold: float = Field(default=3.5, gt=0)
    min_samples: int = Field(default=10, ge=3)
    exclude_fields: list[str] = Field(default_factory=list)


class FrequencyConfig(BaseModel):
    fields: list[str] = Field(default_factory=lambda: ["operator_id"])
    window_days: int = Field(default=1, ge=1)
    min_repeat_count: int = Field(default=5, ge=2)
    repeat_ratio: float = Field(default=3.0, ge=1.0)


class GeographyConfig(BaseModel):
    check_pincode_prefix: bool = True
    district_states: dict[str, str] = Field(default_factory=dict)


class RuleWeightsConfig(BaseModel):
    malformed_pincode: float = Field(default=0.90, ge=0, le=1)
    pincode_state_mismatch: float = Field(default=0.85, ge=0, le=1)
    district_state_mismatch: float = Field(default=0.80, ge=0, le=1)
    age_outlier: float = Field(default=0.60, ge=0, le=1)
    numeric_outlier: float = Field(default=0.50, ge=0, le=1)
    temporal_anomaly: float = Field(default=0.55, ge=0, le=1)
    frequency_repeat: float = Field(default=0.30, ge=0, le=1)
    duplicate_record: float = Field(default=0.35, ge=0, le=1)


class RulesConfig(BaseModel):
    weights: RuleWeightsConfig = Field(default_factory=RuleWeightsConfig)
    disabled: list[str] = Field(default_factory=list)


class InputConfig(BaseModel):
    encoding: str = "utf-8-sig"
    malformed_rows: Literal["skip", "error"] = "skip"
    max_workers: int | None = Field(default=None, ge=1)


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"
    summary_max_findings: int = Field(default=50, ge=1)


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    temporal: TemporalConfig = Field(default_factory=TemporalConfig)
    numeric_outlier: NumericOutlierConfig = Field(default_factory=NumericOutlierConfig)
    frequency: FrequencyConfig = Field(default_factory=FrequencyConfig)
    geography: GeographyConfig = Field(default_factory=GeographyConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return AppConfig.model_validate(data)
