"""
Date handling for the master table validity windows.

A record is active on day ``D`` when ``Valid_From <= D <= Valid_Till``,
where an empty bound is unbounded on its side.  Comparison happens at
day granularity: datetimes are reduced to their calendar date before
comparing, so a record that ends "today at 00:00" is still active for
the whole of today.

Cells read from a spreadsheet may arrive as ``date``/``datetime``
objects, as formatted strings or as spreadsheet serial numbers (days
since 1899-12-30).  ``to_date`` accepts all of them.
"""

from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from ..core.errors import DateParseError

# Day zero of spreadsheet serial dates.
SERIAL_EPOCH = date(1899, 12, 30)

DEFAULT_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d.%m.%Y")


def to_date(value: Any, formats: Iterable[str] = DEFAULT_DATE_FORMATS) -> Optional[date]:
    """Convert a cell value into a calendar date.

    ``None`` and blank strings yield ``None``.  Strings are tried as
    ISO 8601 first (with or without a time part) and then against each
    of ``formats``.  Raises ``DateParseError`` for anything else.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        raise DateParseError(f"Invalid date value {value!r}")
    if isinstance(value, (int, float)):
        try:
            return SERIAL_EPOCH + timedelta(days=int(value))
        except (OverflowError, ValueError) as exc:
            raise DateParseError(f"Invalid date serial {value!r}") from exc
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise DateParseError(f"Invalid date value {text!r}")


def is_valid(valid_from: Any, valid_till: Any, today: Any) -> bool:
    """Return ``True`` if a record with the given window is active on ``today``."""
    day = to_date(today)
    if day is None:
        raise DateParseError("A reference date is required")
    start = to_date(valid_from)
    if start is not None and start > day:
        return False
    end = to_date(valid_till)
    if end is not None and end < day:
        return False
    return True
