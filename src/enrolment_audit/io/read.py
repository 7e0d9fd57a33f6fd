from __future__ import annotations

import csv
import io
import logging
import math
import re
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Literal

from enrolment_audit.config import AppConfig
from enrolment_audit.errors import EmptyInputError, MalformedRowError, ReadError
from enrolment_audit.io.schema import CellValue, Record, normalize_columns

LOGGER = logging.getLogger(__name__)

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")
# Identifier-like codes (pincodes, operator ids) whose leading zero is significant.
_LEADING_ZERO_PATTERN = re.compile(r"[+-]?0\d+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?")
_DEFAULT_MAX_WORKERS = 8


def coerce_cell(raw: str) -> CellValue:
    """Store a cell as int/float when it is a plain numeric literal, else trimmed text.

    Integer literals with a redundant leading zero such as ``012345`` stay text.
    """
    text = raw.strip()
    if _LEADING_ZERO_PATTERN.fullmatch(text):
        return text
    if _INTEGER_PATTERN.fullmatch(text):
        return int(text)
    if _FLOAT_PATTERN.fullmatch(text):
        value = float(text)
        if math.isfinite(value):
            return value
    return text


def parse_csv_text(
    text: str,
    *,
    source: str = "<text>",
    malformed_rows: Literal["skip", "error"] = "skip",
) -> list[Record]:
    """Parse CSV text into records keyed by the header row.

    Quoted fields follow standard CSV rules: ``"``-delimited, ``""`` escapes a
    quote, commas and newlines may appear inside quotes. Rows shorter than the
    header leave the trailing fields absent. Rows longer than the header are
    skipped with a warning, or raise ``MalformedRowError`` when
    ``malformed_rows="error"``.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    header: list[str] | None = None
    records: list[Record] = []
    try:
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            if header is None:
                header = [cell.strip() for cell in row]
                continue
            if len(row) > len(header):
                reason = f"expected at most {len(header)} fields, found {len(row)}"
                if malformed_rows == "error":
                    raise MalformedRowError(source, reader.line_num, reason)
                LOGGER.warning("Skipping row at %s:%d: %s", source, reader.line_num, reason)
                continue
            records.append(
                {name: coerce_cell(cell) for name, cell in zip(header, row) if name}
            )
    except csv.Error as exc:
        raise MalformedRowError(source, reader.line_num, str(exc)) from exc
    return records


def read_csv_file(path: Path, encoding: str = "utf-8-sig") -> str:
    try:
        with path.open("r", encoding=encoding, newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadError(path.name, str(exc)) from exc


def _load_one(path: Path, config: AppConfig) -> list[Record]:
    text = read_csv_file(path, encoding=config.input.encoding)
    records = parse_csv_text(
        text,
        source=path.name,
        malformed_rows=config.input.malformed_rows,
    )
    return [normalize_columns(record, config.columns) for record in records]


def load_records(
    paths: Iterable[Path | str],
    config: AppConfig,
    *,
    max_workers: int | None = None,
) -> list[Record]:
    """Read and parse every file, concatenating records in the given file order."""
    sources = [Path(path) for path in paths]
    if not sources:
        raise EmptyInputError("No files were provided.")

    workers = max_workers or config.input.max_workers or min(len(sources), _DEFAULT_MAX_WORKERS)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        # map() yields in submission order, so completion order never leaks into the result.
        batches = list(pool.map(lambda path: _load_one(path, config), sources))

    combined = [record for batch in batches for record in batch]
    if not combined:
        raise EmptyInputError()
    LOGGER.info("Loaded %d records from %d file(s)", len(combined), len(sources))
    return combined
