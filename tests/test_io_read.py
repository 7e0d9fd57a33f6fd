from __future__ import annotations

import logging
from pathlib import Path

import pytest

from enrolment_audit.config import AppConfig
from enrolment_audit.errors import EmptyInputError, MalformedRowError, ReadError
from enrolment_audit.io.read import coerce_cell, load_records, parse_csv_text


def test_coerce_cell_parses_plain_numbers_only() -> None:
    assert coerce_cell("42") == 42
    assert isinstance(coerce_cell("42"), int)
    assert coerce_cell(" 2.5 ") == 2.5
    assert coerce_cell("-7") == -7
    assert coerce_cell("1e3") == 1000.0
    assert coerce_cell(" Delhi ") == "Delhi"
    assert coerce_cell("1_000") == "1_000"
    assert coerce_cell("nan") == "nan"
    assert coerce_cell("inf") == "inf"
    assert coerce_cell("") == ""


def test_coerce_cell_keeps_leading_zero_codes_as_text() -> None:
    assert coerce_cell(" 012345 ") == "012345"
    assert coerce_cell("007") == "007"
    assert coerce_cell("0") == 0
    assert coerce_cell("-0") == 0

    records = parse_csv_text("operator_id\n007\n7\n")

    assert [record["operator_id"] for record in records] == ["007", 7]


def test_parse_csv_text_handles_quoted_commas_and_newlines() -> None:
    text = (
        "state,district,pincode,note\n"
        'Delhi,"New Delhi, Central",110001,"said ""hi""\nthen left"\n'
    )

    records = parse_csv_text(text)

    assert records == [
        {
            "state": "Delhi",
            "district": "New Delhi, Central",
            "pincode": 110001,
            "note": 'said "hi"\nthen left',
        }
    ]


def test_parse_csv_text_leaves_missing_trailing_fields_absent() -> None:
    records = parse_csv_text("a,b,c\n1,2\n")

    assert records == [{"a": 1, "b": 2}]
    assert "c" not in records[0]


def test_parse_csv_text_skips_blank_lines_and_strips_bom() -> None:
    text = "\ufeffdate , state\n\n2025-03-01,Delhi\n   \n2025-03-02,Goa\n"

    records = parse_csv_text(text)

    assert [record["date"] for record in records] == ["2025-03-01", "2025-03-02"]
    assert records[1]["state"] == "Goa"


def test_parse_csv_text_header_only_returns_no_records() -> None:
    assert parse_csv_text("date,state,district,pincode\n") == []
    assert parse_csv_text("") == []


def test_parse_csv_text_skips_overlong_rows_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="enrolment_audit.io.read"):
        records = parse_csv_text("a,b\n1,2,3\n4,5\n", source="upload.csv")

    assert records == [{"a": 4, "b": 5}]
    assert "upload.csv:2" in caplog.text


def test_parse_csv_text_error_policy_raises_on_overlong_row() -> None:
    with pytest.raises(MalformedRowError) as excinfo:
        parse_csv_text("a,b\n1,2\n1,2,3\n", source="upload.csv", malformed_rows="error")

    assert excinfo.value.line == 3
    assert "upload.csv" in str(excinfo.value)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_records_concatenates_files_in_given_order(tmp_path: Path) -> None:
    paths = [
        _write(tmp_path / f"part_{index}.csv", f"state,batch\nDelhi,{index}\nGoa,{index}\n")
        for index in range(6)
    ]

    records = load_records(list(reversed(paths)), AppConfig(), max_workers=4)

    assert [record["batch"] for record in records] == [5, 5, 4, 4, 3, 3, 2, 2, 1, 1, 0, 0]


def test_load_records_renames_configured_columns(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "export.csv",
        "Date,State,District,PIN Code\n2025-03-01,Goa,North Goa,403001\n",
    )
    config = AppConfig.model_validate(
        {
            "columns": {
                "date": "Date",
                "state": "State",
                "district": "District",
                "pincode": "PIN Code",
            }
        }
    )

    records = load_records([path], config)

    assert records == [
        {"date": "2025-03-01", "state": "Goa", "district": "North Goa", "pincode": 403001}
    ]


def test_load_records_rejects_header_only_input(tmp_path: Path) -> None:
    first = _write(tmp_path / "a.csv", "state,district,pincode\n")
    second = _write(tmp_path / "b.csv", "")

    with pytest.raises(EmptyInputError):
        load_records([first, second], AppConfig())


def test_load_records_rejects_empty_file_list() -> None:
    with pytest.raises(EmptyInputError):
        load_records([], AppConfig())


def test_load_records_wraps_missing_file_as_read_error(tmp_path: Path) -> None:
    good = _write(tmp_path / "good.csv", "state\nDelhi\n")

    with pytest.raises(ReadError) as excinfo:
        load_records([good, tmp_path / "missing.csv"], AppConfig())

    assert excinfo.value.source == "missing.csv"


def test_load_records_wraps_undecodable_file_as_read_error(tmp_path: Path) -> None:
    path = tmp_path / "binary.csv"
    path.write_bytes(b"state\n\xff\xfe\xfa\n")

    with pytest.raises(ReadError):
        load_records([path], AppConfig())
