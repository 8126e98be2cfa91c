from datetime import date

import pytest

from roster.exceptions import ValidationError
from roster.services.calendar import month_bounds, sundays_in_month
from roster.utils import parse_service_date

def test_sundays_in_march_2024():
    assert sundays_in_month(2024, 3) == [
        date(2024, 3, 3), date(2024, 3, 10), date(2024, 3, 17), date(2024, 3, 24), date(2024, 3, 31),
    ]

def test_month_starting_on_sunday():
    days = sundays_in_month(2024, 9)
    assert days[0] == date(2024, 9, 1)
    assert len(days) == 5

def test_february_leap_year():
    assert sundays_in_month(2024, 2) == [date(2024, 2, 4), date(2024, 2, 11), date(2024, 2, 18), date(2024, 2, 25)]

def test_month_bounds():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

def test_service_date_must_be_a_whole_iso_date():
    assert parse_service_date(" 2024-06-02 ") == date(2024, 6, 2)
    for bad in ("2024-06-02garbage", "2024-02-30", "06/02/2024", ""):
        with pytest.raises(ValidationError):
            parse_service_date(bad)
