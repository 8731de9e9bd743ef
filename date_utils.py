from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

# Accepted text layouts, ISO first. Excel cells usually arrive as datetimes.
_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%m/%d/%y", "%d-%b-%Y", "%b %d %Y")


def is_blank(value: Any) -> bool:
    """True if value is None/NaN/NaT/pd.NA or an empty/whitespace string."""
    if value is None:
        return True
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        # pd.isna on list-likes returns an array; those are never "blank".
        pass
    if isinstance(value, str):
        return value.strip() == ""
    return False


def coerce_date(value: Any) -> Optional[date]:
    """
    Convert a cell/JSON value into a Python date.

    Returns None for blanks. Raises ValueError for a non-blank value that
    cannot be read as a date, so callers can report which field was bad.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # pandas sometimes gives Timestamp
    if hasattr(value, "to_pydatetime"):
        dt = value.to_pydatetime()
        if isinstance(dt, datetime):
            return dt.date()
    if isinstance(value, str):
        v = value.strip()
        # ISO datetimes such as 2025-01-06T00:00:00.000Z
        if "T" in v:
            v = v.split("T", 1)[0]
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(v, fmt).date()
            except ValueError:
                continue
    raise ValueError(f"not a date: {value!r} (use YYYY-MM-DD)")


def coerce_hours(value: Any) -> Optional[float]:
    """Parse an hours cell. Blank or unparseable -> None; negative -> ValueError."""
    if is_blank(value) or isinstance(value, bool):
        return None
    try:
        hours = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(hours) or math.isinf(hours):
        return None
    if hours < 0:
        raise ValueError(f"hours must be non-negative, got {value!r}")
    return hours


def coerce_index(value: Any) -> Optional[int]:
    """Parse a zero-based index (colorIndex, taskIndex). Anything non-integral -> None."""
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        s = value.strip()
        try:
            f = float(s)
        except ValueError:
            return None
        return int(f) if f.is_integer() else None
    return None


def coerce_bool(value: Any, *, default: bool = True) -> bool:
    """Normalize booleans from Excel (TRUE/FALSE), JSON, or strings."""
    if is_blank(value):
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        s = value.strip().lower()
        if s in {"true", "yes", "y", "1"}:
            return True
        if s in {"false", "no", "n", "0"}:
            return False
        return default
    if isinstance(value, (int, float)):
        return bool(value)
    return default
