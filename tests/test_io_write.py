from __future__ import annotations

from pathlib import Path

import pandas as pd

from enrolment_audit.io.write import findings_table, write_table
from enrolment_audit.results import AnomalyFinding


def _finding(row: dict[str, object]) -> AnomalyFinding:
    return AnomalyFinding(
        row=row,
        index=4,
        reasons=("Malformed pincode", "Duplicate record"),
        detailed_reasons=(),
        score=0.935,
    )


def test_findings_table_keeps_record_fields_named_like_computed_columns() -> None:
    table = findings_table([_finding({"score": 77, "reasons": "walk-in", "pincode": "ABCDE"})])

    assert list(table.columns) == [
        "row_index",
        "score",
        "reasons",
        "record.score",
        "record.reasons",
        "record.pincode",
    ]
    assert table.loc[0, "score"] == 0.935
    assert table.loc[0, "reasons"] == "Malformed pincode; Duplicate record"
    assert table.loc[0, "record.score"] == 77
    assert table.loc[0, "record.reasons"] == "walk-in"


def test_write_table_csv(tmp_path: Path) -> None:
    path = write_table(findings_table([_finding({"pincode": 110001})]), tmp_path / "f.csv")

    written = pd.read_csv(path)

    assert list(written["record.pincode"]) == [110001]
    assert list(written["row_index"]) == [4]
