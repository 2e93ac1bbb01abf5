from __future__ import annotations

import datetime as _dt
from typing import Optional, Union

DateInput = Union[str, _dt.date, _dt.datetime]


def parse_iso_datetime(value: Union[str, _dt.datetime]) -> _dt.datetime:
    """Parse an ISO-8601 timestamp into an aware datetime (naive values are UTC)."""
    if isinstance(value, _dt.datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = _dt.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_dt.timezone.utc)
    return parsed


def _as_date(value: DateInput) -> _dt.date:
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    text = value.strip()
    if len(text) == 10:
        return _dt.date.fromisoformat(text)
    return parse_iso_datetime(text).date()


def age_from_date_of_birth(date_of_birth: DateInput, today: Optional[DateInput] = None) -> int:
    born = _as_date(date_of_birth)
    ref = _as_date(today) if today is not None else _dt.date.today()
    if ref < born:
        raise ValueError(f"Date of birth {born.isoformat()} is after {ref.isoformat()}")
    # One less when this year's birthday has not been reached yet.
    had_birthday = (ref.month, ref.day) >= (born.month, born.day)
    return ref.year - born.year - (0 if had_birthday else 1)
