from datetime import datetime

import pytest

from library_api.errors import ValidationError
from library_api.utils.parsing import MAX_ID, clean_str, parse_datetime, parse_id


@pytest.mark.parametrize("value", [7, "7", " 7 "])
def test_parse_id_accepts_positive_integers(value):
    assert parse_id(value) == 7


@pytest.mark.parametrize("value", [
    None, "", "abc", "1.5", "-3", 0, -1, True, "²", "٣", "１２", str(MAX_ID + 1), MAX_ID + 1,
])
def test_parse_id_rejects_malformed_values(value):
    with pytest.raises(ValidationError):
        parse_id(value, "book_id")


def test_parse_id_upper_bound():
    assert parse_id(str(MAX_ID)) == MAX_ID


def test_parse_datetime_normalises_to_naive_utc():
    assert parse_datetime("2024-03-01T12:00:00Z", "due_date") == datetime(2024, 3, 1, 12)
    assert parse_datetime("2024-03-01T14:00:00+02:00", "due_date") == datetime(2024, 3, 1, 12)
    assert parse_datetime("  ", "due_date") is None
    with pytest.raises(ValidationError):
        parse_datetime("next tuesday", "due_date")
    with pytest.raises(ValidationError):
        parse_datetime(20240301, "due_date")


def test_clean_str():
    assert clean_str("  x ") == "x"
    assert clean_str("   ") is None
    assert clean_str(None) is None
