from datetime import date, datetime, timedelta

import pytest

from agreements.duration import add_months, add_years, calculate_duration, parse_date


def test_year_month_day_breakdown():
    result = calculate_duration("2024-01-01", "2025-03-15")
    assert (result.years, result.months, result.days) == (1, 2, 14)
    assert result.total_days == 439


def test_payload_uses_wire_keys():
    assert calculate_duration("2024-01-01", "2024-01-31").to_payload() == {
        "years": 0,
        "months": 0,
        "days": 30,
        "totalDays": 30,
    }


def test_exact_year():
    result = calculate_duration(date(2023, 3, 1), date(2024, 3, 1))
    assert (result.years, result.months, result.days, result.total_days) == (1, 0, 0, 366)


def test_month_end_start_clamps_into_february():
    result = calculate_duration("2024-01-31", "2024-02-29")
    assert (result.years, result.months, result.days) == (0, 1, 0)
    assert result.total_days == 29


def test_month_end_clamp_does_not_drift():
    # Jan 31 + 2 months is Mar 31, not Mar 29 carried over from February.
    result = calculate_duration("2024-01-31", "2024-03-30")
    assert (result.months, result.days) == (1, 30)
    result = calculate_duration("2024-01-31", "2024-03-31")
    assert (result.months, result.days) == (2, 0)


def test_leap_day_anniversary():
    result = calculate_duration("2024-02-29", "2025-02-28")
    assert (result.years, result.months, result.days) == (1, 0, 0)
    assert result.total_days == 365


def test_end_not_after_start_does_not_raise():
    same = calculate_duration("2024-05-01", "2024-05-01")
    assert (same.years, same.months, same.days, same.total_days) == (0, 0, 0, 0)
    backwards = calculate_duration("2024-06-01", "2024-05-01")
    assert (backwards.years, backwards.months) == (0, 0)
    assert backwards.total_days == -31
    assert backwards.days == backwards.total_days


def test_accepts_datetimes_and_timestamps():
    result = calculate_duration(datetime(2024, 1, 1, 18, 30), "2024-02-01T00:00:00Z")
    assert (result.months, result.days, result.total_days) == (1, 0, 31)


def test_invalid_date_raises_value_error():
    with pytest.raises(ValueError):
        calculate_duration("2024-01-01", "not a date")
    with pytest.raises(ValueError):
        parse_date(20240101)


def test_total_days_monotonic_and_components_non_negative():
    start = date(2023, 11, 30)
    previous = None
    for offset in range(1, 800, 7):
        end = start + timedelta(days=offset)
        result = calculate_duration(start, end)
        assert min(result.years, result.months, result.days, result.total_days) >= 0
        assert result.days < 31
        if previous is not None:
            assert result.total_days >= previous
        previous = result.total_days


def test_add_months_helpers():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
    assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)


def test_offsets_are_normalized_to_utc():
    assert parse_date("2024-01-01T23:30:00-05:00") == date(2024, 1, 2)
    # Ends before it starts once both are read in UTC.
    result = calculate_duration("2024-01-01T23:30:00-05:00", "2024-01-02T01:00:00Z")
    assert (result.years, result.months, result.days, result.total_days) == (0, 0, 0, 0)
    result = calculate_duration("2024-01-01T23:30:00-05:00", "2024-03-02T12:00:00+00:00")
    assert (result.months, result.days, result.total_days) == (2, 0, 60)
