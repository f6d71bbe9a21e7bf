"""Unit tests for identifier and timestamp helpers."""

from datetime import datetime

import pytest

from character_figure.core.utils import add_months, get_snow_id, get_uuid, parse_iso_datetime, utc_now


class TestIdentifiers:
    def test_uuid_is_unique_and_canonical(self):
        first, second = get_uuid(), get_uuid()

        assert first != second
        assert len(first) == 36
        assert first.count("-") == 4

    def test_snow_ids_are_numeric_unique_and_increasing(self):
        ids = [get_snow_id() for _ in range(2000)]

        assert all(i.isdigit() for i in ids)
        assert len(set(ids)) == len(ids)
        assert [int(i) for i in ids] == sorted(int(i) for i in ids)


class TestTimestamps:
    def test_utc_now_is_naive(self):
        assert utc_now().tzinfo is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-03-01", datetime(2024, 3, 1)),
            ("2024-03-01T10:30:00", datetime(2024, 3, 1, 10, 30)),
            ("2024-03-01T10:30:00Z", datetime(2024, 3, 1, 10, 30)),
            ("2024-03-01T12:30:00+02:00", datetime(2024, 3, 1, 10, 30)),
        ],
    )
    def test_parse_iso_datetime(self, value, expected):
        parsed = parse_iso_datetime(value)

        assert parsed == expected
        assert parsed.tzinfo is None

    @pytest.mark.parametrize("value", ["yesterday", "2024-13-01", ""])
    def test_parse_iso_datetime_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_iso_datetime(value)


@pytest.mark.parametrize(
    "start,months,expected",
    [
        (datetime(2025, 1, 15, 9, 30), 1, datetime(2025, 2, 15, 9, 30)),
        (datetime(2025, 1, 31), 1, datetime(2025, 2, 28)),
        (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
        (datetime(2025, 11, 30), 3, datetime(2026, 2, 28)),
        (datetime(2024, 2, 29), 12, datetime(2025, 2, 28)),
    ],
)
def test_add_months(start, months, expected):
    assert add_months(start, months) == expected
