import datetime as dt

import pytest

from carescore.utils.dates import age_from_date_of_birth, parse_iso_datetime


def test_parse_iso_datetime_handles_z_and_naive_values() -> None:
    zulu = parse_iso_datetime("2024-05-01T10:00:00Z")
    naive = parse_iso_datetime("2024-05-01T10:00:00")
    assert zulu == naive
    assert zulu.tzinfo is not None


def test_age_counts_whole_years_before_and_after_birthday() -> None:
    assert age_from_date_of_birth("1950-06-15", "2024-06-14") == 73
    assert age_from_date_of_birth("1950-06-15", "2024-06-15") == 74
    assert age_from_date_of_birth(dt.date(2000, 1, 1), dt.date(2000, 12, 31)) == 0


def test_age_rejects_future_birth_dates() -> None:
    with pytest.raises(ValueError):
        age_from_date_of_birth("2030-01-01", "2024-01-01")
