from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass

from enrolment_audit.config import ColumnsConfig

CellValue = str | int | float
Record = dict[str, CellValue]


@dataclass(frozen=True)
class CanonicalColumns:
    date: str = "date"
    state: str = "state"
    district: str = "district"
    pincode: str = "pincode"


MANDATORY_COLUMNS = [
    CanonicalColumns.date,
    CanonicalColumns.state,
    CanonicalColumns.district,
    CanonicalColumns.pincode,
]


def normalize_columns(record: Record, columns: ColumnsConfig) -> Record:
    """Rename configured source columns to the canonical record keys.

    Fields without a mapping keep their original name and position.
    """
    rename_map = {
        columns.date: CanonicalColumns.date,
        columns.state: CanonicalColumns.state,
        columns.district: CanonicalColumns.district,
        columns.pincode: CanonicalColumns.pincode,
    }
    if all(source == target for source, target in rename_map.items()):
        return record
    return {rename_map.get(key, key): value for key, value in record.items()}


def cell_text(value: CellValue | None) -> str:
    """Render a cell as text; integral floats lose their trailing ``.0``."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def cell_number(value: CellValue | None) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, numbers.Real):
        number = float(value)
        return number if math.isfinite(number) else None
    return None


def get_field(record: Mapping[str, CellValue], key: str) -> CellValue | None:
    """Return a field value, treating blank strings as absent."""
    value = record.get(key)
    if isinstance(value, str) and not value.strip():
        return None
    return value
