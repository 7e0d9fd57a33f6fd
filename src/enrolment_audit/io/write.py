from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from enrolment_audit.results import AnomalyFinding

RECORD_COLUMN_PREFIX = "record."


def findings_table(findings: Sequence[AnomalyFinding]) -> pd.DataFrame:
    """One row per finding: index, score, joined reasons, then the record's fields.

    Record fields are prefixed with ``record.`` so they never collide with the
    computed columns.
    """
    rows = []
    for finding in findings:
        row: dict[str, Any] = {
            "row_index": finding.index,
            "score": finding.score,
            "reasons": "; ".join(finding.reasons),
        }
        for key, value in finding.row.items():
            row[f"{RECORD_COLUMN_PREFIX}{key}"] = value
        rows.append(row)
    return pd.DataFrame(rows, columns=None if rows else ["row_index", "score", "reasons"])


def write_table(df: pd.DataFrame, path: Path, fmt: str = "csv") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "parquet":
        # Record columns mix numbers and text; parquet needs one type per column.
        text_columns = {column: "string" for column in df.columns if df[column].dtype == object}
        df.astype(text_columns).to_parquet(path, index=False)
        return path
    if fmt == "csv":
        df.to_csv(path, index=False)
        return path
    raise ValueError(f"Unsupported table format: {fmt}")


def write_summary(data: dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
    return path
