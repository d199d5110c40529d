from datetime import datetime, tzinfo
from typing import Optional, Sequence

from .dq import ColumnNotFoundError, remove_quotes


NA_TOKEN = "NA"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT_ISO_Z = "%Y-%m-%dT%H:%M:%SZ"


class DataValidationError(ValueError):
    """Raised when a cell value cannot be parsed into the expected type."""


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value == "" or value == NA_TOKEN


def parse_integer(value: Optional[str]) -> int:
    """Parse an int, mapping "" and "NA" to 0. Anything else invalid raises."""
    value = remove_quotes(value)
    if _is_blank(value):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise DataValidationError(f"Failed to parse integer: {value!r}") from exc


def parse_double(value: Optional[str]) -> float:
    """Parse a float, mapping "" and "NA" to 0.0. Anything else invalid raises."""
    value = remove_quotes(value)
    if _is_blank(value):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise DataValidationError(f"Failed to parse number: {value!r}") from exc


def date_from_string(value: Optional[str], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse "yyyy-mm-dd H:MM:SS", its "T...Z" variant, or a bare date.

    Returns None for empty input. A bare date means midnight. When tz is
    given it is attached to the parsed value.
    """
    value = remove_quotes(value)
    if value is None or value == "":
        return None

    cleaned = value.replace("T", " ").replace("Z", "").replace("'", "")
    if len(value) == 10:
        cleaned += " 00:00:00"
    try:
        parsed = datetime.strptime(cleaned, DATE_FORMAT)
    except ValueError as exc:
        raise DataValidationError(f"Failed to parse date string: {value!r} - {exc}") from exc

    if tz is not None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def format_date(value: datetime, iso_z: bool = False) -> str:
    return value.strftime(DATE_FORMAT_ISO_Z if iso_z else DATE_FORMAT)


def to_upper_underscore(value: Optional[str]) -> Optional[str]:
    """Upper-case and turn " - ", spaces and dashes into underscores."""
    if value is None:
        return None
    return value.upper().replace(" - ", "_").replace(" ", "_").replace("-", "_")


def column_index(columns: Sequence[str], name: str) -> int:
    """Index of name in columns, or -1."""
    try:
        return list(columns).index(name)
    except ValueError:
        return -1


def require_column_index(columns: Sequence[str], name: str) -> int:
    index = column_index(columns, name)
    if index < 0:
        raise ColumnNotFoundError([name])
    return index


def header_value_in_row(row: Sequence[str], columns: Sequence[str], name: str) -> Optional[str]:
    """Trimmed value of the named column in row, or None if the column is absent."""
    index = column_index(columns, name)
    if index == -1 or index >= len(row):
        return None
    return row[index].strip()


def matches_header_value_in_row(
    row: Sequence[str], columns: Sequence[str], name: str, expected: str
) -> bool:
    return expected == header_value_in_row(row, columns, name)
