from __future__ import annotations

from datetime import date, datetime

from enrolment_audit.io.schema import CellValue, cell_text


def parse_record_date(value: CellValue | None, formats: list[str]) -> date | None:
    """Parse a date cell at day granularity.

    Configured formats are tried in order; ISO-8601 timestamps are accepted as
    a fallback. Returns ``None`` when nothing matches.
    """
    text = cell_text(value)
    if not text:
        return None
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None
