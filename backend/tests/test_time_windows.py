from datetime import date, datetime
from decimal import Decimal

import pytest

from hall_service.services.time_windows import combine, date_span, overlaps, window, window_hours
from hall_service.utils.errors import ValidationError


def test_half_open_overlap():
    assert overlaps((600, 1080), (1000, 1200))
    assert not overlaps((600, 1080), (1080, 1200))


@pytest.mark.parametrize("value", ["9:00", "24:00", "10:60", "", None])
def test_rejects_malformed_times(value):
    with pytest.raises(ValidationError):
        window(value, "23:00")


def test_window_hours_and_combine():
    assert window_hours("10:00", "18:30") == Decimal("8.50")
    assert combine(date(2030, 1, 1), "10:15") == datetime(2030, 1, 1, 10, 15)


def test_date_span_is_inclusive():
    assert list(date_span(date(2030, 1, 1), date(2030, 1, 3))) == [
        date(2030, 1, 1), date(2030, 1, 2), date(2030, 1, 3),
    ]
