import pytest

from app.services.brewery_service import UnknownWeekdayError, normalize_weekday


@pytest.mark.parametrize("raw", ["friday", "FRIDAY", " Friday ", "fRiDaY"])
def test_weekday_names_normalize(raw):
    assert normalize_weekday(raw) == "Friday"


@pytest.mark.parametrize("raw", ["", "fri", "Funday", "5"])
def test_unknown_weekday(raw):
    with pytest.raises(UnknownWeekdayError) as excinfo:
        normalize_weekday(raw)

    assert excinfo.value.day == raw
